from fastapi import APIRouter, Depends
from app.config import settings
from app.core.dependencies import get_ticket_store
from app.models.checkin import ScanRequest, ScanResult, CheckInStats
from app.services import checkin_service
from app.services.stores import RemoteTicketStore

router = APIRouter()


@router.post("/{event_id}/scan", response_model=ScanResult)
async def scan_ticket(
    event_id: str,
    data: ScanRequest,
    store: RemoteTicketStore = Depends(get_ticket_store)
):
    """
    Validate a scanned ticket at the event entrance.

    If valid, marks the ticket as 'used' in the remote store.
    Returns validation result with guest and ticket type.
    """
    return await checkin_service.check_in_online(
        store, event_id, data.scanned_text, data.language or settings.default_language
    )


@router.get("/{event_id}/stats", response_model=CheckInStats)
async def get_check_in_stats(
    event_id: str,
    store: RemoteTicketStore = Depends(get_ticket_store)
):
    """
    Get check-in statistics for an event.
    Shows total tickets, checked in, pending, and percentage.
    """
    return await checkin_service.get_check_in_stats(store, event_id)
