from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class TicketStatus(str, Enum):
    """Estado de un ticket en el store remoto"""
    VALID = "valid"
    USED = "used"
    CANCELLED = "cancelled"


class OfflineErrorKind(str, Enum):
    """Errores del cache offline"""
    TICKET_NOT_FOUND_OFFLINE = "ticket_not_found_offline"
    ALREADY_USED = "already_used"
    CANCELLED = "cancelled"
    DOWNLOAD_FAILED = "download_failed"
    SYNC_ITEM_FAILED = "sync_item_failed"


class OfflineTicket(BaseModel):
    """Copia local de un ticket, tomada al descargar el evento"""
    id: str
    ticket_code: str
    status: str
    checked_in_at: Optional[str] = None
    event_id: str
    participant_name: str
    ticket_type: str


class LocalCheckIn(BaseModel):
    """Check-in registrado sin conexion, pendiente de sincronizar"""
    ticket_id: str
    ticket_code: str
    checked_in_at: str = Field(..., description="ISO-8601, hora del dispositivo al hacer check-in")
    guest_name: str
    ticket_type: str
    synced: bool = False


class CheckInRequest(BaseModel):
    """Codigo tecleado o texto escaneado del QR"""
    code: str = Field(..., min_length=1)


class CheckInResult(BaseModel):
    success: bool
    guest_name: Optional[str] = None
    ticket_type: Optional[str] = None
    error: Optional[OfflineErrorKind] = None
    message: str


class DownloadResult(BaseModel):
    success: bool
    count: int = 0
    error: Optional[OfflineErrorKind] = None
    message: str


class SyncSummary(BaseModel):
    """Resultado de una pasada de sincronizacion"""
    attempted: int = 0
    confirmed: int = 0
    no_match: int = 0
    failed: int = 0
    skipped: bool = False
    message: Optional[str] = None


class OfflineStatus(BaseModel):
    event_id: str
    is_online: bool
    is_downloading: bool
    is_syncing: bool
    has_offline_data: bool
    offline_ticket_count: int
    pending_count: int
    last_download: Optional[datetime] = None


class ConnectivityState(BaseModel):
    online: bool
