"""
Tests para endpoints de check-in offline y en linea.
"""
import pytest
from httpx import AsyncClient


class TestOfflineEndpoints:
    """Tests para /offline"""

    @pytest.mark.asyncio
    async def test_download(self, client: AsyncClient):
        """POST /offline/{event_id}/download descarga el snapshot."""
        response = await client.post("/offline/E1/download", params={"language": "de"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["count"] == 3
        assert "heruntergeladen" in data["message"]

    @pytest.mark.asyncio
    async def test_download_failure_is_not_an_http_error(self, client: AsyncClient, ticket_store):
        ticket_store.fail_fetch = True

        response = await client.post("/offline/E1/download")

        assert response.status_code == 200
        assert response.json()["error"] == "download_failed"

    @pytest.mark.asyncio
    async def test_check_in_flow(self, client: AsyncClient):
        await client.post("/offline/E1/download")

        first = await client.post("/offline/E1/check-in", json={"code": "a1"})
        second = await client.post("/offline/E1/check-in", json={"code": "A1"})

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["guest_name"] == "Guest A1"
        assert second.json()["success"] is False
        assert second.json()["error"] == "already_used"

    @pytest.mark.asyncio
    async def test_check_in_requires_code(self, client: AsyncClient):
        response = await client.post("/offline/E1/check-in", json={"code": ""})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_status_and_sync(self, client: AsyncClient, ticket_store):
        await client.post("/offline/E1/download")
        await client.post("/offline/E1/check-in", json={"code": "A2"})

        status = (await client.get("/offline/E1/status")).json()
        assert status["pending_count"] == 1
        assert status["offline_ticket_count"] == 3
        assert status["is_online"] is True

        response = await client.post("/offline/E1/sync")

        assert response.status_code == 200
        assert response.json()["confirmed"] == 1
        assert ticket_store.tickets["E1-A2"].status == "used"
        assert (await client.get("/offline/E1/status")).json()["pending_count"] == 0

    @pytest.mark.asyncio
    async def test_going_online_syncs_loaded_events(self, client: AsyncClient, ticket_store):
        await client.post("/offline/E1/download")

        offline = await client.put("/offline/connectivity", json={"online": False})
        assert offline.json() == {"online": False}

        await client.post("/offline/E1/check-in", json={"code": "A3"})
        assert ticket_store.tickets["E1-A3"].status == "valid"

        online = await client.put("/offline/connectivity", json={"online": True})

        assert online.json() == {"online": True}
        assert ticket_store.tickets["E1-A3"].status == "used"
        notices = (await client.get("/offline/E1/notices")).json()
        assert notices[0]["message"] == "1 offline check-ins synced"

    @pytest.mark.asyncio
    async def test_get_connectivity(self, client: AsyncClient):
        response = await client.get("/offline/connectivity")

        assert response.status_code == 200
        assert response.json() == {"online": True}

    @pytest.mark.asyncio
    async def test_clear(self, client: AsyncClient, memory_storage):
        await client.post("/offline/E1/download")

        response = await client.delete("/offline/E1")

        assert response.status_code == 204
        assert "offline_tickets_E1" not in memory_storage
        assert (await client.get("/offline/E1/status")).json()["has_offline_data"] is False

    @pytest.mark.asyncio
    async def test_unknown_event_reads_are_not_tracked(self, client: AsyncClient, offline_registry, connectivity):
        """GET de status/notices para eventos sin datos no registra caches."""
        for i in range(20):
            status = await client.get(f"/offline/unknown-{i}/status")
            assert status.json()["has_offline_data"] is False
            await client.get(f"/offline/unknown-{i}/notices")

        assert offline_registry.event_ids == []
        assert connectivity._listeners == []

    @pytest.mark.asyncio
    async def test_clear_stops_tracking_event(self, client: AsyncClient, offline_registry):
        await client.post("/offline/E1/download")
        assert offline_registry.event_ids == ["E1"]

        await client.delete("/offline/E1")

        assert offline_registry.event_ids == []

    @pytest.mark.asyncio
    async def test_blank_event_id(self, client: AsyncClient):
        response = await client.get("/offline/%20/status")

        assert response.status_code == 400
        assert response.json()["error"] is True


class TestScanEndpoints:
    """Tests para /checkin"""

    @pytest.mark.asyncio
    async def test_scan_valid(self, client: AsyncClient, ticket_store):
        ticket_store.tickets["E1-A1"].ticket_code = "EVT-LX3K9A-7QPZ"

        response = await client.post(
            "/checkin/E1/scan",
            json={"scanned_text": "https://wichty.com/ticket/EVT-LX3K9A-7QPZ"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["result"] == "valid"

    @pytest.mark.asyncio
    async def test_scan_invalid_qr(self, client: AsyncClient):
        response = await client.post("/checkin/E1/scan", json={"scanned_text": "garbage", "language": "de"})

        assert response.json()["result"] == "invalid_qr"
        assert response.json()["message"] == "Ungültiger QR-Code"

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient):
        response = await client.get("/checkin/E1/stats")

        assert response.status_code == 200
        assert response.json()["total_tickets"] == 3

    @pytest.mark.asyncio
    async def test_stats_store_unavailable(self, client: AsyncClient, ticket_store):
        ticket_store.unreachable = True

        response = await client.get("/checkin/E1/stats")

        assert response.status_code == 503
        assert response.json()["message"] == "Network unreachable"
