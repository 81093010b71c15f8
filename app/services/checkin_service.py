import logging
from datetime import datetime, timezone
from typing import Optional

from app.models.checkin import ScanResult, ScanResultKind, CheckInStats
from app.models.offline_checkin import TicketStatus
from app.services.stores.base import RemoteTicketStore, ConditionalUpdateResult
from app.utils.messages import translate
from app.utils.ticket_codes import extract_ticket_code

logger = logging.getLogger(__name__)


def _rejected(result: ScanResultKind, language: str, message_key: Optional[str] = None) -> ScanResult:
    return ScanResult(
        is_valid=False,
        result=result,
        message=translate(message_key or result.value, language)
    )


async def check_in_online(
    store: RemoteTicketStore,
    event_id: str,
    scanned_text: str,
    language: str = "en"
) -> ScanResult:
    """
    Validate a scanned ticket at the entrance against the remote store.
    This is the connected path; the offline cache covers the disconnected one.
    """
    ticket_code = extract_ticket_code(scanned_text)
    if not ticket_code:
        return _rejected(ScanResultKind.INVALID_QR, language)

    try:
        ticket = await store.find_ticket_by_code(ticket_code)

        if not ticket:
            return _rejected(ScanResultKind.TICKET_NOT_FOUND, language)

        if ticket.event_id != event_id:
            return _rejected(ScanResultKind.WRONG_EVENT, language)

        if ticket.status == TicketStatus.USED:
            return _rejected(ScanResultKind.ALREADY_USED, language)

        if ticket.status == TicketStatus.CANCELLED:
            return _rejected(ScanResultKind.CANCELLED, language)

        checked_in_at = datetime.now(timezone.utc)
        outcome = await store.conditional_update_ticket_status(
            ticket.id,
            TicketStatus.USED.value,
            checked_in_at,
            TicketStatus.VALID.value
        )
    except Exception as e:
        logger.error(f"Error processing check-in for {ticket_code}: {e}")
        return _rejected(ScanResultKind.ERROR, language, 'check_in_error')

    # Another device checked the ticket in between our read and write
    if outcome != ConditionalUpdateResult.APPLIED:
        return _rejected(ScanResultKind.ALREADY_USED, language)

    logger.info(f"Check-in: ticket {ticket.ticket_code} validated for event {event_id}")

    return ScanResult(
        is_valid=True,
        result=ScanResultKind.VALID,
        message=translate('check_in_success', language),
        ticket_id=ticket.id,
        ticket_code=ticket.ticket_code,
        guest_name=ticket.participant_name or translate('unknown_guest', language),
        ticket_type=ticket.category_name or translate('general_admission', language),
        checked_in_at=checked_in_at
    )


async def get_check_in_stats(store: RemoteTicketStore, event_id: str) -> CheckInStats:
    """Get check-in statistics for an event"""
    counts = await store.count_check_ins(event_id)

    total = counts.total_tickets
    checked_in = counts.checked_in

    return CheckInStats(
        event_id=event_id,
        total_tickets=total,
        checked_in=checked_in,
        pending=max(total - checked_in, 0),
        check_in_percentage=round((checked_in / total * 100) if total > 0 else 0, 2)
    )
