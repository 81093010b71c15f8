"""
Ticket code helpers shared by the online scanner and the offline cache.

Ticket QR codes encode the public ticket URL, e.g.
https://wichty.com/ticket/EVT-LX3K9A-7QPZ
"""
import re
from typing import Optional

_URL_PATTERN = re.compile(r'ticket/([A-Z0-9-]+)', re.IGNORECASE)
_CODE_PATTERN = re.compile(r'^(EVT-[A-Z0-9]+-[A-Z0-9]+)$', re.IGNORECASE)


def extract_ticket_code(scanned_text: str) -> Optional[str]:
    """
    Pull the ticket code out of scanned QR text.

    Accepts a ticket URL or a bare EVT-XXXX-XXXX code.
    Returns None if the text matches neither.
    """
    if not scanned_text:
        return None

    text = scanned_text.strip()

    url_match = _URL_PATTERN.search(text)
    if url_match:
        return url_match.group(1)

    code_match = _CODE_PATTERN.match(text)
    if code_match:
        return code_match.group(1)

    return None


def normalize_code(code: str) -> str:
    """Lookup key for case-insensitive code matching"""
    return code.strip().lower()
