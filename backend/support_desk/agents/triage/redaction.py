"""
Best-effort PII masking applied before text leaves the service.

Not a security boundary: the patterns are coarse and will miss unusual
formats.
"""
import re

EMAIL_TOKEN = "<email>"
PHONE_TOKEN = "<phone>"
IBAN_TOKEN = "<iban>"

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
# Digits separated by spaces, parentheses, hyphens or typographic dashes
PHONE_PATTERN = re.compile(r"\+?\d[0-9\s()\-\u2010\u2011\u2012\u2013\u2014]{6,}\d")
IBAN_PATTERN = re.compile(r"\b[A-Z]{2}\d{2}[A-Z0-9]{1,30}\b")


def redact(text: str) -> str:
    """Replace emails, phone numbers and IBAN-like tokens with placeholders."""
    text = EMAIL_PATTERN.sub(EMAIL_TOKEN, text)
    text = PHONE_PATTERN.sub(PHONE_TOKEN, text)
    return IBAN_PATTERN.sub(IBAN_TOKEN, text)


def preview(text: str, limit: int = 80) -> str:
    """Redacted, truncated form of ``text`` that is safe to log."""
    masked = redact(text)
    if len(masked) <= limit:
        return masked
    return masked[:limit] + "..."
