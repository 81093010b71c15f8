# Device-local key-value storage
from app.services.storage.base import KeyValueStore
from app.services.storage.memory import InMemoryKeyValueStore
from app.services.storage.file import FileKeyValueStore

BACKENDS = ('file', 'memory')

def get_key_value_store(backend: str, directory: str = None) -> KeyValueStore:
    """Get storage instance by backend name"""
    name = backend.lower()
    if name == 'memory':
        return InMemoryKeyValueStore()
    if name == 'file':
        if not directory:
            raise ValueError("File storage requires a directory")
        return FileKeyValueStore(directory)
    raise ValueError(f"Unknown storage backend: {backend}. Available: {list(BACKENDS)}")
