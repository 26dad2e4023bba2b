"""
Blocking HTTP client for the support API, for scripts and UIs.
"""
import os
from typing import Any, Iterator

import requests

SUPPORT_API_URL = os.getenv("SUPPORT_API_URL", "http://localhost:8000/api/support")


def request_triage(message: str, base_url: str = SUPPORT_API_URL) -> dict:
    """
    Triage a message.

    Returns:
        TriageRecord as a dict (camelCase keys, absent fields omitted)
    """
    response = requests.post(f"{base_url}/triage", json={"message": message}, timeout=60)
    response.raise_for_status()
    return response.json()


def request_reply(message: str, triage: dict[str, Any], base_url: str = SUPPORT_API_URL) -> str:
    """Fetch the complete reply for a triaged message."""
    payload = {"message": message, "triage": triage}
    response = requests.post(f"{base_url}/reply", json=payload, timeout=120)
    response.raise_for_status()
    return response.json()["reply"]


def stream_reply(
    message: str,
    triage: dict[str, Any],
    base_url: str = SUPPORT_API_URL,
) -> Iterator[str]:
    """Yield reply text as the server streams it."""
    payload = {"message": message, "triage": triage}
    with requests.post(f"{base_url}/reply/stream", json=payload, stream=True, timeout=120) as response:
        response.raise_for_status()
        response.encoding = response.encoding or "utf-8"
        for chunk in response.iter_content(chunk_size=None, decode_unicode=True):
            if chunk:
                yield chunk
