"""
User-facing status messages for check-in operations.

Only English and German are shipped; any other language tag falls back to English.
"""
from typing import Any

FALLBACK_LANGUAGE = 'en'

MESSAGES = {
    'en': {
        'unknown_guest': "Unknown guest",
        'general_admission': "General Admission",
        'download_success': "{count} tickets downloaded for offline use",
        'download_failed': "Error downloading tickets",
        'download_offline': "Cannot download tickets while offline",
        'download_in_progress': "A download is already in progress",
        'ticket_not_found_offline': "Ticket not found in offline data",
        'already_used': "Ticket already used",
        'cancelled': "Ticket was cancelled",
        'check_in_success': "Check-in successful",
        'sync_success': "{count} offline check-ins synced",
        'sync_incomplete': "{count} offline check-ins were not applied remotely",
        'invalid_qr': "Invalid QR code",
        'ticket_not_found': "Ticket not found",
        'wrong_event': "This ticket belongs to another event",
        'check_in_error': "Error processing check-in",
    },
    'de': {
        'unknown_guest': "Unbekannter Gast",
        'general_admission': "Eintritt",
        'download_success': "{count} Tickets für Offline-Nutzung heruntergeladen",
        'download_failed': "Fehler beim Herunterladen der Tickets",
        'download_offline': "Tickets können offline nicht heruntergeladen werden",
        'download_in_progress': "Ein Download läuft bereits",
        'ticket_not_found_offline': "Ticket nicht in Offline-Daten gefunden",
        'already_used': "Ticket bereits verwendet",
        'cancelled': "Ticket wurde storniert",
        'check_in_success': "Check-in erfolgreich",
        'sync_success': "{count} Offline-Check-Ins synchronisiert",
        'sync_incomplete': "{count} Offline-Check-Ins wurden nicht übernommen",
        'invalid_qr': "Ungültiger QR-Code",
        'ticket_not_found': "Ticket nicht gefunden",
        'wrong_event': "Dieses Ticket gehört zu einem anderen Event",
        'check_in_error': "Fehler beim Check-in",
    },
}


def resolve_language(language: str) -> str:
    """Map a language tag such as 'de-AT' onto a shipped message table"""
    if not language:
        return FALLBACK_LANGUAGE
    base = language.split('-')[0].split('_')[0].lower()
    return base if base in MESSAGES else FALLBACK_LANGUAGE


def translate(key: str, language: str, **kwargs: Any) -> str:
    table = MESSAGES[resolve_language(language)]
    return table[key].format(**kwargs)
