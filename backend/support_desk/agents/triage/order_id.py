"""
Order number extraction and validation.

`clean_order_id` is the only gate an order number passes through. It runs on
text extracted here, on order numbers proposed by the chat model during
triage, and again in the reply stage before any lookup.
"""
import re
from typing import Optional

MIN_LENGTH = 5
MAX_LENGTH = 24

STOP_WORDS = frozenset({
    "ORDER", "BESTELLUNG", "AUFTRAG", "STATUS", "TRACK",
    "SENDUNG", "DELIVERY", "SHIPMENT", "TRACKING",
})

# "Bestellung 123-45", "order-id: A12345", "Auftragsnr. 98765", "ord #X1234"
KEYWORD_PATTERN = re.compile(
    r"(bestell(?:ung)?|order(?:-?id)?|auftrag(?:s)?nr\.?|ord(?:er)?\s*#?)"
    r"[:\s-]*([A-Z0-9][A-Z0-9-]*\d[A-Z0-9-]*)",
    re.IGNORECASE | re.ASCII,
)
# Any standalone token with a digit and at least five characters
TOKEN_PATTERN = re.compile(r"\b([A-Z0-9][A-Z0-9-]*\d[A-Z0-9-]{3,})\b", re.IGNORECASE | re.ASCII)

_ALLOWED = re.compile(r"[A-Z0-9-]+")
_DIGIT = re.compile(r"\d")


def clean_order_id(value: Optional[str]) -> Optional[str]:
    """
    Normalize a candidate order number or reject it.

    Returns the upper-cased, trimmed id, or None when the candidate is too
    short or long, contains anything but letters, digits and hyphens, is a
    bare keyword like "ORDER", or has no digit at all.
    """
    if not value:
        return None
    candidate = value.upper().strip()
    if len(candidate) < MIN_LENGTH or len(candidate) > MAX_LENGTH:
        return None
    if not _ALLOWED.fullmatch(candidate):
        return None
    if candidate in STOP_WORDS:
        return None
    if not _DIGIT.search(candidate):
        return None
    return candidate


def find_order_candidate(text: str) -> Optional[str]:
    """Raw order-number candidate: keyword-anchored first, then any token."""
    match = KEYWORD_PATTERN.search(text)
    if match:
        return match.group(2)
    match = TOKEN_PATTERN.search(text)
    if match:
        return match.group(1)
    return None


def extract_order_id(text: str) -> Optional[str]:
    """Find an order number in free text and validate it."""
    return clean_order_id(find_order_candidate(text))
