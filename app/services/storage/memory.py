from typing import Dict, Optional
from app.services.storage.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Contents are lost on restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    @property
    def name(self) -> str:
        return "memory"

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())
