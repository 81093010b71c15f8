from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ScanResultKind(str, Enum):
    """Resultado del check-in en linea"""
    VALID = "valid"
    INVALID_QR = "invalid_qr"
    TICKET_NOT_FOUND = "ticket_not_found"
    WRONG_EVENT = "wrong_event"
    ALREADY_USED = "already_used"
    CANCELLED = "cancelled"
    ERROR = "error"


class ScanRequest(BaseModel):
    """Request para validar un ticket escaneado"""
    scanned_text: str = Field(..., description="Texto leido del QR o codigo tecleado")
    language: Optional[str] = Field(default=None, description="Idioma para los mensajes")


class ScanResult(BaseModel):
    """Respuesta del check-in en linea"""
    is_valid: bool
    result: ScanResultKind
    message: str

    # Info del ticket (solo si valido)
    ticket_id: Optional[str] = None
    ticket_code: Optional[str] = None
    guest_name: Optional[str] = None
    ticket_type: Optional[str] = None
    checked_in_at: Optional[datetime] = None


class CheckInStats(BaseModel):
    """Estadisticas de check-in"""
    event_id: str
    total_tickets: int
    checked_in: int
    pending: int
    check_in_percentage: float
