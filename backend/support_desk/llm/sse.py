"""
Decoding of chat-completion server-sent events into plain text tokens.

The upstream body is a sequence of lines such as::

    data: {"choices":[{"delta":{"content":"Hel"}}]}
    data: {"choices":[{"delta":{"content":"lo"}}]}
    data: [DONE]
"""
import json
from typing import AsyncIterable, AsyncIterator

from support_desk.core.errors import ParseError
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def parse_sse_data(payload: str) -> str:
    """
    Extract the incremental text from one ``data:`` payload.

    Returns "" for events without content (role headers, finish events).
    Raises ParseError when the payload is not the expected JSON shape.
    """
    try:
        event = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(f"Undecodable event payload: {e.msg}", details=payload) from e
    if not isinstance(event, dict):
        raise ParseError("Event payload is not an object", details=payload)

    choices = event.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else ""


async def iter_sse_tokens(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """
    Lazily turn SSE lines into text tokens.

    Non-data lines are ignored, malformed events are skipped, and iteration
    ends at the ``[DONE]`` sentinel or when the lines run out.
    """
    async for line in lines:
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_SENTINEL:
            return
        try:
            token = parse_sse_data(payload)
        except ParseError as e:
            logger.debug(f"Skipping malformed stream event: {e.message}")
            continue
        if token:
            yield token
