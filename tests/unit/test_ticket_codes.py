"""
Tests para extracción de códigos de ticket y mensajes.
"""
from app.utils.messages import translate, resolve_language
from app.utils.ticket_codes import extract_ticket_code, normalize_code


class TestExtractTicketCode:
    """Tests para extract_ticket_code"""

    def test_ticket_url(self):
        assert extract_ticket_code("https://wichty.com/ticket/EVT-LX3K9A-7QPZ") == "EVT-LX3K9A-7QPZ"

    def test_ticket_url_lowercase(self):
        assert extract_ticket_code("https://wichty.com/ticket/evt-lx3k9a-7qpz?ref=mail") == "evt-lx3k9a-7qpz"

    def test_bare_code(self):
        assert extract_ticket_code("  EVT-ABC-123 ") == "EVT-ABC-123"

    def test_unrelated_text(self):
        assert extract_ticket_code("hello world") is None
        assert extract_ticket_code("") is None

    def test_normalize_code(self):
        assert normalize_code(" EVT-ABC123 ") == normalize_code("evt-abc123")


class TestMessages:
    """Tests para translate"""

    def test_english_default(self):
        assert translate("already_used", "en") == "Ticket already used"

    def test_german(self):
        assert translate("sync_success", "de", count=2) == "2 Offline-Check-Ins synchronisiert"

    def test_region_tag_and_unknown_language(self):
        assert resolve_language("de-AT") == "de"
        assert resolve_language("fr") == "en"
        assert resolve_language(None) == "en"
