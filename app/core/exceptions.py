from fastapi import Request
from fastapi.responses import JSONResponse
import logging
from datetime import datetime, timezone
from typing import Dict, Any

logger = logging.getLogger(__name__)

class APIError(Exception):
    """Base API exception"""

    def __init__(self, message: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(APIError):
    """Validation related errors"""

    def __init__(self, message: str = "Validation failed", details: Dict[str, Any] = None):
        super().__init__(message, 400, details)

class RemoteStoreError(APIError):
    """Remote ticket store unreachable or failing"""

    def __init__(self, message: str = "Remote ticket store unavailable", details: Dict[str, Any] = None):
        super().__init__(message, 503, details)

class LocalStorageError(APIError):
    """Device-local key-value storage errors"""

    def __init__(self, message: str = "Local storage operation failed", details: Dict[str, Any] = None):
        super().__init__(message, 500, details)

async def api_exception_handler(request: Request, exc: APIError):
    """Handle custom API exceptions with logging"""

    timestamp = datetime.now(timezone.utc).isoformat()
    context = {
        "error_type": exc.__class__.__name__,
        "status_code": exc.status_code,
        "path": str(request.url.path),
        "method": request.method
    }

    if exc.status_code >= 500:
        logger.error(f"API Error: {exc.message}", extra={"context": context})
    else:
        logger.warning(f"API Error: {exc.message}", extra={"context": context})

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.message,
            "details": exc.details,
            "timestamp": timestamp
        }
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""

    timestamp = datetime.now(timezone.utc).isoformat()
    context = {
        "error_type": exc.__class__.__name__,
        "path": str(request.url.path),
        "method": request.method
    }

    logger.error(f"Unexpected error: {str(exc)}", extra={"context": context}, exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "message": "Internal server error",
            "timestamp": timestamp
        }
    )
