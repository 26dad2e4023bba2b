"""Rule-based intent and language detection (German / English)."""
import re

# Checked in order, first hit wins
INTENT_RULES = [
    ("cancellation", re.compile(r"widerruf|storno|cancel|refund|return")),
    ("order_status", re.compile(r"bestell|order|status|track|sendung|shipment|delivery|tracking")),
    ("technical", re.compile(r"technik|error|bug|crash|stürzt|problem|issue|fault")),
]

UMLAUT_PATTERN = re.compile(r"[äöüß]", re.IGNORECASE)
GERMAN_HINTS = re.compile(
    r"[äöüß]|bestell|auftrag|widerruf|storno|retoure|rücksend|liefer|paket|versand"
)
ENGLISH_HINTS = re.compile(r"order|cancel|return|refund|shipment|delivery|tracking")


def detect_intent(text: str) -> str:
    """Map a message onto order_status / cancellation / technical / other."""
    lowered = text.lower()
    for intent, pattern in INTENT_RULES:
        if pattern.search(lowered):
            return intent
    return "other"


def detect_language(text: str) -> str:
    """
    Guess whether a message is German or English.

    Domain vocabulary decides when only one language matches; otherwise
    umlauts tip the balance towards German and English is the default.
    """
    lowered = text.lower()
    de_hit = bool(GERMAN_HINTS.search(lowered))
    en_hit = bool(ENGLISH_HINTS.search(lowered))
    if de_hit and not en_hit:
        return "de"
    if en_hit and not de_hit:
        return "en"
    return "de" if UMLAUT_PATTERN.search(text) else "en"
