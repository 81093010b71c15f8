import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote

from app.services.storage.base import KeyValueStore
from app.core.exceptions import LocalStorageError

logger = logging.getLogger(__name__)


class FileKeyValueStore(KeyValueStore):
    """
    One file per key under a directory.

    Each write goes to a temporary file that is renamed over the target,
    so a single key is never left half-written. Writes spanning several
    keys are not atomic as a group.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalStorageError(f"Cannot create storage directory {directory}: {e}")

    @property
    def name(self) -> str:
        return "file"

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise LocalStorageError(f"Cannot read key {key}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise LocalStorageError(f"Cannot write key {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise LocalStorageError(f"Cannot delete key {key}: {e}")

    def keys(self):
        return [
            unquote(p.name[:-len(self.SUFFIX)])
            for p in self.directory.glob(f"*{self.SUFFIX}")
        ]
