from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional
from app.core.dependencies import (
    get_offline_cache, get_download_cache, get_connectivity, get_offline_registry
)
from app.models.offline_checkin import (
    CheckInRequest, CheckInResult, DownloadResult, SyncSummary,
    OfflineStatus, ConnectivityState
)
from app.core.exceptions import ValidationError
from app.services.connectivity import ConnectivitySource
from app.services.notices import Notice
from app.services.offline_checkin_service import OfflineCheckInCache, OfflineCheckInRegistry

router = APIRouter()


@router.get("/connectivity", response_model=ConnectivityState)
async def get_connectivity_state(
    connectivity: ConnectivitySource = Depends(get_connectivity)
):
    """Current online/offline flag of the device."""
    return ConnectivityState(online=connectivity.is_online)


@router.put("/connectivity", response_model=ConnectivityState)
async def set_connectivity_state(
    data: ConnectivityState,
    connectivity: ConnectivitySource = Depends(get_connectivity)
):
    """
    Override the connectivity flag.

    Going back online triggers a sync of every loaded event and returns
    once those syncs are done.
    """
    await connectivity.set_online(data.online)
    return ConnectivityState(online=connectivity.is_online)


@router.post("/{event_id}/download", response_model=DownloadResult)
async def download_tickets(
    language: Optional[str] = Query(default=None, description="Language for fallback names and messages"),
    cache: OfflineCheckInCache = Depends(get_download_cache)
):
    """
    Download every ticket of the event for offline check-in.
    Replaces the previous snapshot; on failure the previous snapshot is kept.
    """
    return await cache.download_snapshot(language)


@router.post("/{event_id}/check-in", response_model=CheckInResult)
async def check_in(
    data: CheckInRequest,
    cache: OfflineCheckInCache = Depends(get_offline_cache)
):
    """
    Check a ticket in against the offline snapshot.
    Works without connectivity; the check-in is queued for sync.
    """
    return cache.check_in(data.code)


@router.post("/{event_id}/sync", response_model=SyncSummary)
async def sync_check_ins(
    cache: OfflineCheckInCache = Depends(get_offline_cache)
):
    """Push queued offline check-ins to the remote store."""
    return await cache.sync()


@router.get("/{event_id}/status", response_model=OfflineStatus)
async def get_status(
    cache: OfflineCheckInCache = Depends(get_offline_cache)
):
    return cache.status()


@router.get("/{event_id}/notices", response_model=List[Notice])
async def get_notices(
    limit: int = Query(default=20, ge=1, le=100),
    cache: OfflineCheckInCache = Depends(get_offline_cache)
):
    """Recent status messages for the event, newest first."""
    return cache.notices.for_event(cache.event_id, limit)


@router.delete("/{event_id}", status_code=204)
async def clear_offline_data(
    event_id: str,
    registry: OfflineCheckInRegistry = Depends(get_offline_registry)
):
    """Remove the local snapshot and queue. Remote data is not touched."""
    if not event_id.strip():
        raise ValidationError("Event id is required")
    registry.discard(event_id)
    return Response(status_code=204)
