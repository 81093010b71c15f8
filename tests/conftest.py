"""
Configuración global de pytest y fixtures compartidos.
"""
import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
import sys
import os

# Add app to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.main import app
from app.core.dependencies import get_offline_registry, get_connectivity, get_ticket_store
from app.services.connectivity import ConnectivitySource
from app.services.notices import NoticeBoard
from app.services.offline_checkin_service import OfflineCheckInRegistry
from app.services.storage import InMemoryKeyValueStore
from app.tasks.dispatcher import BackgroundDispatcher
from tests.utils.factories import RemoteTicketFactory
from tests.utils.mocks import FakeTicketStore, MockErrorNotifier


# ============================================================================
# Colaboradores del cache offline
# ============================================================================

@pytest.fixture
def memory_storage() -> InMemoryKeyValueStore:
    """Storage local en memoria."""
    return InMemoryKeyValueStore()


@pytest.fixture
def connectivity() -> ConnectivitySource:
    """Señal de conectividad controlada por el test (inicia online)."""
    return ConnectivitySource(online=True)


@pytest.fixture
def ticket_store() -> FakeTicketStore:
    """Store remoto con el evento E1 y tres tickets válidos: A1, A2, A3."""
    return FakeTicketStore(RemoteTicketFactory.create_batch("E1", ["A1", "A2", "A3"]))


@pytest.fixture
def error_notifier() -> MockErrorNotifier:
    return MockErrorNotifier()


@pytest.fixture
def dispatcher() -> BackgroundDispatcher:
    return BackgroundDispatcher()


@pytest.fixture
def offline_registry(memory_storage, ticket_store, connectivity, dispatcher, error_notifier):
    """Registry con todos los colaboradores inyectados."""
    registry = OfflineCheckInRegistry(
        storage=memory_storage,
        remote_store=ticket_store,
        connectivity=connectivity,
        notices=NoticeBoard(),
        dispatcher=dispatcher,
        error_notifier=error_notifier,
        default_language="en"
    )
    yield registry
    registry.close()


@pytest.fixture
def offline_cache(offline_registry):
    """Cache offline del evento E1."""
    return offline_registry.get("E1")


# ============================================================================
# Cliente HTTP Async
# ============================================================================

@pytest.fixture
async def client(offline_registry, connectivity, ticket_store) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP async para hacer requests al API."""
    app.dependency_overrides[get_offline_registry] = lambda: offline_registry
    app.dependency_overrides[get_connectivity] = lambda: connectivity
    app.dependency_overrides[get_ticket_store] = lambda: ticket_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Utilidades
# ============================================================================

@pytest.fixture
def make_db_row():
    """Factory para crear rows de base de datos."""
    def _make_row(data: dict):
        """Crea un objeto que actúa como asyncpg Record."""
        class MockRecord(dict):
            def __getitem__(self, key):
                return self.get(key)

        return MockRecord(data)

    return _make_row
