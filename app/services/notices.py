import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """User-facing status message (the toast shown on the device)"""
    event_id: str
    level: NoticeLevel
    message: str
    created_at: datetime


class NoticeBoard:
    """
    Keeps the most recent notices so the device can pick them up,
    including those raised by syncs nobody is waiting on.
    """

    def __init__(self, max_notices: int = 100):
        self._notices: Deque[Notice] = deque(maxlen=max_notices)

    def post(self, event_id: str, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(
            event_id=event_id,
            level=level,
            message=message,
            created_at=datetime.now(timezone.utc)
        )
        self._notices.append(notice)
        return notice

    def success(self, event_id: str, message: str) -> Notice:
        return self.post(event_id, NoticeLevel.SUCCESS, message)

    def warning(self, event_id: str, message: str) -> Notice:
        return self.post(event_id, NoticeLevel.WARNING, message)

    def error(self, event_id: str, message: str) -> Notice:
        return self.post(event_id, NoticeLevel.ERROR, message)

    def for_event(self, event_id: str, limit: Optional[int] = None) -> List[Notice]:
        """Newest first"""
        notices = [n for n in reversed(self._notices) if n.event_id == event_id]
        return notices[:limit] if limit else notices
