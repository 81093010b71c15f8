from fastapi import Depends
from app.config import settings
from app.core.exceptions import ValidationError
from app.services.connectivity import ConnectivitySource, HttpConnectivityProbe
from app.services.discord_error_notifier import error_notifier
from app.services.notices import NoticeBoard
from app.services.offline_checkin_service import OfflineCheckInRegistry, OfflineCheckInCache
from app.services.storage import get_key_value_store
from app.services.stores import RemoteTicketStore, PostgresTicketStore
from app.tasks.dispatcher import BackgroundDispatcher
import logging

logger = logging.getLogger(__name__)

_connectivity = None
_registry = None

dispatcher = BackgroundDispatcher()
notice_board = NoticeBoard()


def get_connectivity() -> ConnectivitySource:
    """
    Dependency to get the process-wide connectivity source.
    Uses the HTTP probe when CONNECTIVITY_PROBE_URL is configured.
    """
    global _connectivity
    if _connectivity is None:
        if settings.connectivity_probe_url:
            _connectivity = HttpConnectivityProbe(
                settings.connectivity_probe_url,
                timeout=settings.connectivity_probe_timeout
            )
        else:
            _connectivity = ConnectivitySource()
    return _connectivity


def get_ticket_store() -> RemoteTicketStore:
    """Dependency to get the remote ticket store"""
    return PostgresTicketStore()


def get_offline_registry() -> OfflineCheckInRegistry:
    """Dependency to get the registry of per-event offline caches"""
    global _registry
    if _registry is None:
        storage = get_key_value_store(
            settings.offline_storage_backend,
            settings.offline_storage_dir
        )
        logger.info(f"Offline storage: {storage.name} ({settings.offline_storage_dir})")
        _registry = OfflineCheckInRegistry(
            storage=storage,
            remote_store=get_ticket_store(),
            connectivity=get_connectivity(),
            notices=notice_board,
            dispatcher=dispatcher,
            error_notifier=error_notifier,
            default_language=settings.default_language
        )
    return _registry


def _require_event_id(event_id: str):
    if not event_id.strip():
        raise ValidationError("Event id is required")


def get_offline_cache(
    event_id: str,
    registry: OfflineCheckInRegistry = Depends(get_offline_registry)
) -> OfflineCheckInCache:
    """
    Dependency that resolves the offline cache for the event in the path.
    Events with no local data are not registered. Raises ValidationError
    for a blank event id.
    """
    _require_event_id(event_id)
    return registry.resolve(event_id)


def get_download_cache(
    event_id: str,
    registry: OfflineCheckInRegistry = Depends(get_offline_registry)
) -> OfflineCheckInCache:
    """Dependency for downloads: registers the event's cache"""
    _require_event_id(event_id)
    return registry.get(event_id)


def reset_dependencies():
    """Drop the lazily built singletons (used on shutdown)"""
    global _connectivity, _registry
    if _registry is not None:
        _registry.close()
    _registry = None
    _connectivity = None
