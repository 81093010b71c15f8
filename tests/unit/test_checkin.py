"""
Tests para el check-in en linea (escaneo con conexión).
"""
import pytest

from app.models.checkin import ScanResultKind
from app.services import checkin_service
from tests.utils.factories import RemoteTicketFactory
from tests.utils.mocks import FakeTicketStore


@pytest.fixture
def scan_store():
    return FakeTicketStore([
        RemoteTicketFactory.create(ticket_code="EVT-OK-0001", id="ok", event_id="E1"),
        RemoteTicketFactory.create(ticket_code="EVT-USED-0002", id="used", event_id="E1", status="used"),
        RemoteTicketFactory.create(ticket_code="EVT-GONE-0003", id="gone", event_id="E1", status="cancelled"),
        RemoteTicketFactory.create(ticket_code="EVT-OTHER-0004", id="other", event_id="E2"),
    ])


class TestCheckInOnline:
    """Tests para checkin_service.check_in_online"""

    @pytest.mark.asyncio
    async def test_valid_ticket(self, scan_store):
        result = await checkin_service.check_in_online(
            scan_store, "E1", "https://wichty.com/ticket/EVT-OK-0001"
        )

        assert result.is_valid is True
        assert result.result == ScanResultKind.VALID
        assert result.guest_name == "Test Guest"
        assert result.checked_in_at is not None
        assert scan_store.tickets["ok"].status == "used"

    @pytest.mark.asyncio
    async def test_invalid_qr(self, scan_store):
        result = await checkin_service.check_in_online(scan_store, "E1", "not a ticket")

        assert result.result == ScanResultKind.INVALID_QR
        assert scan_store.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,expected", [
        ("EVT-MISSING-9999", ScanResultKind.TICKET_NOT_FOUND),
        ("EVT-OTHER-0004", ScanResultKind.WRONG_EVENT),
        ("EVT-USED-0002", ScanResultKind.ALREADY_USED),
        ("EVT-GONE-0003", ScanResultKind.CANCELLED),
    ])
    async def test_rejections(self, scan_store, code, expected):
        result = await checkin_service.check_in_online(scan_store, "E1", code)

        assert result.is_valid is False
        assert result.result == expected
        assert scan_store.update_calls() == []

    @pytest.mark.asyncio
    async def test_lost_race_reports_already_used(self, scan_store):
        """Otro dispositivo escribe entre la lectura y el update."""
        original_find = scan_store.find_ticket_by_code

        async def find_then_race(code):
            ticket = await original_find(code)
            scan_store.tickets["ok"].status = "used"
            return ticket

        scan_store.find_ticket_by_code = find_then_race

        result = await checkin_service.check_in_online(scan_store, "E1", "EVT-OK-0001")

        assert result.result == ScanResultKind.ALREADY_USED

    @pytest.mark.asyncio
    async def test_store_error(self, scan_store):
        scan_store.unreachable = True

        result = await checkin_service.check_in_online(scan_store, "E1", "EVT-OK-0001", language="de")

        assert result.result == ScanResultKind.ERROR
        assert result.message == "Fehler beim Check-in"


class TestCheckInStats:
    """Tests para checkin_service.get_check_in_stats"""

    @pytest.mark.asyncio
    async def test_stats(self, scan_store):
        stats = await checkin_service.get_check_in_stats(scan_store, "E1")

        assert stats.total_tickets == 3
        assert stats.checked_in == 1
        assert stats.pending == 2
        assert stats.check_in_percentage == 33.33

    @pytest.mark.asyncio
    async def test_stats_empty_event(self, scan_store):
        stats = await checkin_service.get_check_in_stats(scan_store, "E404")

        assert stats.total_tickets == 0
        assert stats.check_in_percentage == 0
