"""
Offline check-in cache.

Keeps a local snapshot of an event's tickets and a queue of check-ins made
from that snapshot, and replays the queue against the remote ticket store
once the device is back online.

Persisted layout per event:
    offline_tickets_<event_id>            JSON list of OfflineTicket
    offline_checkins_<event_id>           JSON list of LocalCheckIn
    offline_download_<event_id>         ISO-8601 time of the last download
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set

from pydantic import TypeAdapter

from app.core.exceptions import ValidationError
from app.core.logging import log_checkin_context
from app.models.offline_checkin import (
    TicketStatus, OfflineErrorKind, OfflineTicket, LocalCheckIn,
    CheckInResult, DownloadResult, SyncSummary, OfflineStatus
)
from app.services.connectivity import ConnectivitySource
from app.services.notices import NoticeBoard
from app.services.storage.base import KeyValueStore
from app.services.stores.base import RemoteTicketStore, RemoteTicket, ConditionalUpdateResult
from app.tasks.dispatcher import BackgroundDispatcher
from app.utils.messages import translate
from app.utils.ticket_codes import extract_ticket_code, normalize_code

logger = logging.getLogger(__name__)

STORAGE_KEY_TICKETS = "offline_tickets"
STORAGE_KEY_CHECKINS = "offline_checkins"
STORAGE_KEY_DOWNLOADED_AT = "offline_download"

_TICKETS_ADAPTER = TypeAdapter(List[OfflineTicket])
_CHECKINS_ADAPTER = TypeAdapter(List[LocalCheckIn])


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OfflineCheckInCache:
    """Offline ticket snapshot and pending check-in queue for one event"""

    def __init__(
        self,
        event_id: str,
        storage: KeyValueStore,
        remote_store: RemoteTicketStore,
        connectivity: ConnectivitySource,
        language: str = "en",
        notices: Optional[NoticeBoard] = None,
        dispatcher: Optional[BackgroundDispatcher] = None,
        error_notifier=None,
        clock: Callable[[], datetime] = _utc_now
    ):
        if not event_id or not event_id.strip():
            raise ValidationError("Event id is required")

        self.event_id = event_id
        self.storage = storage
        self.remote_store = remote_store
        self.connectivity = connectivity
        self.language = language
        self.notices = notices or NoticeBoard()
        self.dispatcher = dispatcher
        self.error_notifier = error_notifier
        self._now = clock

        self._tickets: List[OfflineTicket] = []
        self._pending: List[LocalCheckIn] = []
        self._index: Dict[str, int] = {}
        self._pending_codes: Set[str] = set()
        self._generation = 0
        self._unsubscribe = None

        self.last_download: Optional[datetime] = None
        self.is_downloading = False
        self.is_syncing = False

        self.load()

    # ==================== STORAGE ====================

    @property
    def tickets_key(self) -> str:
        return f"{STORAGE_KEY_TICKETS}_{self.event_id}"

    @property
    def checkins_key(self) -> str:
        return f"{STORAGE_KEY_CHECKINS}_{self.event_id}"

    @property
    def timestamp_key(self) -> str:
        return f"{STORAGE_KEY_DOWNLOADED_AT}_{self.event_id}"

    def load(self):
        """Restore snapshot, queue and download time from local storage"""
        try:
            raw_tickets = self.storage.get(self.tickets_key)
            if raw_tickets:
                self._tickets = _TICKETS_ADAPTER.validate_json(raw_tickets)
        except Exception as e:
            logger.error(f"Error loading offline tickets for event {self.event_id}: {e}")
            self._tickets = []

        try:
            raw_checkins = self.storage.get(self.checkins_key)
            if raw_checkins:
                self._pending = _CHECKINS_ADAPTER.validate_json(raw_checkins)
        except Exception as e:
            logger.error(f"Error loading offline check-ins for event {self.event_id}: {e}")
            self._pending = []

        try:
            raw_timestamp = self.storage.get(self.timestamp_key)
            if raw_timestamp:
                self.last_download = datetime.fromisoformat(raw_timestamp)
        except Exception as e:
            logger.error(f"Error loading last download time for event {self.event_id}: {e}")
            self.last_download = None

        self._rebuild_index()

    def _save(self):
        try:
            self.storage.set(self.tickets_key, _TICKETS_ADAPTER.dump_json(self._tickets).decode())
            self.storage.set(self.checkins_key, _CHECKINS_ADAPTER.dump_json(self._pending).decode())
        except Exception as e:
            logger.error(f"Error saving offline data for event {self.event_id}: {e}")

    def _rebuild_index(self):
        self._index = {
            normalize_code(ticket.ticket_code): position
            for position, ticket in enumerate(self._tickets)
        }
        self._pending_codes = {normalize_code(c.ticket_code) for c in self._pending}

    # ==================== CONNECTIVITY ====================

    def attach(self):
        """Sync automatically whenever connectivity comes back"""
        if self._unsubscribe is None:
            self._unsubscribe = self.connectivity.subscribe(self._handle_connectivity_change)

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _handle_connectivity_change(self, online: bool):
        if online:
            await self.sync()

    def _report_failure(self, error: Exception, context: dict):
        if self.dispatcher is None or self.error_notifier is None:
            return
        self.dispatcher.dispatch(
            lambda: self.error_notifier.send_error(error, context),
            name=f"notify-{context.get('operation', 'error')}-{self.event_id}"
        )

    def _report_warning(self, summary: SyncSummary):
        if self.dispatcher is None or self.error_notifier is None:
            return
        self.dispatcher.dispatch(
            lambda: self.error_notifier.send_warning(
                "Offline check-ins not applied",
                f"{summary.no_match + summary.failed} of {summary.attempted} check-ins "
                f"were marked synced without being applied remotely",
                {
                    "event_id": self.event_id,
                    "no_match": summary.no_match,
                    "failed": summary.failed
                }
            ),
            name=f"notify-sync-warning-{self.event_id}"
        )

    # ==================== DOWNLOAD ====================

    def _to_offline_ticket(self, ticket: RemoteTicket, language: str) -> OfflineTicket:
        checked_in_at = ticket.checked_in_at
        if isinstance(checked_in_at, datetime):
            checked_in_at = checked_in_at.isoformat()

        return OfflineTicket(
            id=ticket.id,
            ticket_code=ticket.ticket_code,
            status=ticket.status,
            checked_in_at=checked_in_at,
            event_id=ticket.event_id,
            participant_name=ticket.participant_name or translate('unknown_guest', language),
            ticket_type=ticket.category_name or translate('general_admission', language)
        )

    def _apply_pending(self, tickets: List[OfflineTicket]) -> List[OfflineTicket]:
        # A fresh download must not forget check-ins already made on this device
        checked_in = {c.ticket_id: c.checked_in_at for c in self._pending}
        return [
            t.model_copy(update={'status': TicketStatus.USED.value, 'checked_in_at': checked_in[t.id]})
            if t.id in checked_in else t
            for t in tickets
        ]

    def _download_failed(self, message: str) -> DownloadResult:
        self.notices.error(self.event_id, message)
        return DownloadResult(
            success=False,
            count=len(self._tickets),
            error=OfflineErrorKind.DOWNLOAD_FAILED,
            message=message
        )

    async def download_snapshot(self, language: Optional[str] = None) -> DownloadResult:
        """
        Replace the local snapshot with every ticket of the event.

        All or nothing: if the fetch fails the previous snapshot stays
        in place. Pending check-ins are kept and re-applied on top.
        """
        language = language or self.language

        if self.is_downloading:
            return self._download_failed(translate('download_in_progress', language))

        if not self.connectivity.is_online:
            logger.warning(f"Download skipped for event {self.event_id}: offline")
            return self._download_failed(translate('download_offline', language))

        self.is_downloading = True
        try:
            remote_tickets = await self.remote_store.fetch_tickets_for_event(self.event_id)
            tickets = self._apply_pending(
                [self._to_offline_ticket(t, language) for t in remote_tickets]
            )
            self.storage.set(self.tickets_key, _TICKETS_ADAPTER.dump_json(tickets).decode())
        except Exception as e:
            logger.error(
                f"Error downloading tickets: {e}",
                extra={"context": log_checkin_context(self.event_id, operation="download")}
            )
            self._report_failure(e, {"operation": "download", "event_id": self.event_id})
            return self._download_failed(translate('download_failed', language))
        finally:
            self.is_downloading = False

        downloaded_at = self._now()
        try:
            self.storage.set(self.timestamp_key, downloaded_at.isoformat())
        except Exception as e:
            logger.error(f"Error saving download time for event {self.event_id}: {e}")

        self._tickets = tickets
        self.last_download = downloaded_at
        self._rebuild_index()

        message = translate('download_success', language, count=len(tickets))
        self.notices.success(self.event_id, message)
        logger.info(f"Downloaded {len(tickets)} tickets for offline use (event {self.event_id})")

        return DownloadResult(success=True, count=len(tickets), message=message)

    # ==================== CHECK-IN ====================

    def _check_in_failed(self, error: OfflineErrorKind) -> CheckInResult:
        return CheckInResult(
            success=False,
            error=error,
            message=translate(error.value, self.language)
        )

    def check_in(self, code: str) -> CheckInResult:
        """
        Check a ticket in against the local snapshot.

        Never touches the network. Accepts a bare code or scanned QR text.
        """
        ticket_code = extract_ticket_code(code) or (code or "").strip()
        key = normalize_code(ticket_code)

        position = self._index.get(key)
        if position is None:
            return self._check_in_failed(OfflineErrorKind.TICKET_NOT_FOUND_OFFLINE)

        ticket = self._tickets[position]

        if key in self._pending_codes or ticket.status == TicketStatus.USED:
            return self._check_in_failed(OfflineErrorKind.ALREADY_USED)

        if ticket.status == TicketStatus.CANCELLED:
            return self._check_in_failed(OfflineErrorKind.CANCELLED)

        checked_in_at = self._now().isoformat()
        record = LocalCheckIn(
            ticket_id=ticket.id,
            ticket_code=ticket.ticket_code,
            checked_in_at=checked_in_at,
            guest_name=ticket.participant_name,
            ticket_type=ticket.ticket_type,
            synced=False
        )

        self._pending.append(record)
        self._pending_codes.add(key)
        self._tickets[position] = ticket.model_copy(
            update={'status': TicketStatus.USED.value, 'checked_in_at': checked_in_at}
        )
        self._save()

        logger.info(f"Offline check-in: ticket {ticket.ticket_code} (event {self.event_id})")

        return CheckInResult(
            success=True,
            guest_name=ticket.participant_name,
            ticket_type=ticket.ticket_type,
            message=translate('check_in_success', self.language)
        )

    # ==================== SYNC ====================

    async def sync(self) -> SyncSummary:
        """
        Replay unsynced check-ins against the remote store.

        Each record is written at most once: it is marked synced after the
        attempt whether or not the write landed. A device that stays
        partitioned through its only attempt loses that write remotely.
        """
        if self.is_syncing:
            logger.info(f"Sync already running for event {self.event_id}")
            return SyncSummary(skipped=True)

        if not self.connectivity.is_online:
            logger.info(f"Sync skipped for event {self.event_id}: offline")
            return SyncSummary(skipped=True)

        unsynced = [c for c in self._pending if not c.synced]
        if not unsynced:
            return SyncSummary()

        self.is_syncing = True
        generation = self._generation
        summary = SyncSummary(attempted=len(unsynced))

        try:
            for check_in in unsynced:
                try:
                    outcome = await self.remote_store.conditional_update_ticket_status(
                        check_in.ticket_id,
                        TicketStatus.USED.value,
                        check_in.checked_in_at,
                        TicketStatus.VALID.value
                    )
                except Exception as e:
                    summary.failed += 1
                    logger.error(
                        f"Error syncing check-in {check_in.ticket_code}: {e}",
                        extra={"context": log_checkin_context(
                            self.event_id, check_in.ticket_code,
                            error=OfflineErrorKind.SYNC_ITEM_FAILED.value
                        )}
                    )
                    self._report_failure(e, {
                        "operation": "sync",
                        "event_id": self.event_id,
                        "ticket_code": check_in.ticket_code
                    })
                    continue

                if outcome == ConditionalUpdateResult.APPLIED:
                    summary.confirmed += 1
                else:
                    summary.no_match += 1
                    logger.warning(
                        f"Check-in {check_in.ticket_code} not applied remotely: "
                        f"ticket is no longer {TicketStatus.VALID.value}"
                    )

            for check_in in unsynced:
                check_in.synced = True

            # clear() during the pass already wiped this event's storage
            if generation == self._generation:
                self._save()
        finally:
            self.is_syncing = False

        if summary.confirmed > 0:
            summary.message = translate('sync_success', self.language, count=summary.confirmed)
            self.notices.success(self.event_id, summary.message)

        lost = summary.no_match + summary.failed
        if lost > 0:
            self.notices.warning(self.event_id, translate('sync_incomplete', self.language, count=lost))
            self._report_warning(summary)

        logger.info(
            f"Sync complete for event {self.event_id}: {summary.confirmed}/{summary.attempted} confirmed, "
            f"{summary.no_match} no match, {summary.failed} failed"
        )
        return summary

    # ==================== CLEAR / STATE ====================

    def clear(self):
        """Drop every local trace of this event. The remote store is untouched."""
        for key in (self.tickets_key, self.checkins_key, self.timestamp_key):
            try:
                self.storage.delete(key)
            except Exception as e:
                logger.error(f"Error removing {key}: {e}")

        self._tickets = []
        self._pending = []
        self.last_download = None
        self._generation += 1
        self._rebuild_index()
        logger.info(f"Cleared offline data for event {self.event_id}")

    @property
    def tickets(self) -> List[OfflineTicket]:
        return list(self._tickets)

    @property
    def pending_check_ins(self) -> List[LocalCheckIn]:
        return list(self._pending)

    @property
    def pending_count(self) -> int:
        return sum(1 for c in self._pending if not c.synced)

    @property
    def has_offline_data(self) -> bool:
        return len(self._tickets) > 0

    def status(self) -> OfflineStatus:
        return OfflineStatus(
            event_id=self.event_id,
            is_online=self.connectivity.is_online,
            is_downloading=self.is_downloading,
            is_syncing=self.is_syncing,
            has_offline_data=self.has_offline_data,
            offline_ticket_count=len(self._tickets),
            pending_count=self.pending_count,
            last_download=self.last_download
        )


class OfflineCheckInRegistry:
    """One cache per event, all sharing storage, remote store and connectivity"""

    def __init__(
        self,
        storage: KeyValueStore,
        remote_store: RemoteTicketStore,
        connectivity: ConnectivitySource,
        notices: Optional[NoticeBoard] = None,
        dispatcher: Optional[BackgroundDispatcher] = None,
        error_notifier=None,
        default_language: str = "en"
    ):
        self.storage = storage
        self.remote_store = remote_store
        self.connectivity = connectivity
        self.notices = notices or NoticeBoard()
        self.dispatcher = dispatcher
        self.error_notifier = error_notifier
        self.default_language = default_language
        self._caches: Dict[str, OfflineCheckInCache] = {}

    def get(self, event_id: str) -> OfflineCheckInCache:
        """Cache for the event, registered and synced on reconnect"""
        cache = self._caches.get(event_id)
        if cache is None:
            cache = self._build(event_id)
            cache.attach()
            self._caches[event_id] = cache
        return cache

    def resolve(self, event_id: str) -> OfflineCheckInCache:
        """
        Cache for the event without registering an empty one.

        Events with nothing stored on this device get a detached cache that
        is dropped after the request. Only a download (get) registers them.
        """
        cache = self._caches.get(event_id)
        if cache is not None:
            return cache

        cache = self._build(event_id)
        if cache.has_offline_data or cache.pending_check_ins:
            cache.attach()
            self._caches[event_id] = cache
        return cache

    def discard(self, event_id: str):
        """Clear the event's local data and stop tracking it"""
        cache = self._caches.pop(event_id, None) or self._build(event_id)
        cache.detach()
        cache.clear()

    def _build(self, event_id: str) -> OfflineCheckInCache:
        return OfflineCheckInCache(
            event_id,
            storage=self.storage,
            remote_store=self.remote_store,
            connectivity=self.connectivity,
            language=self.default_language,
            notices=self.notices,
            dispatcher=self.dispatcher,
            error_notifier=self.error_notifier
        )

    @property
    def event_ids(self) -> List[str]:
        return list(self._caches.keys())

    def close(self):
        for cache in self._caches.values():
            cache.detach()
        self._caches.clear()
