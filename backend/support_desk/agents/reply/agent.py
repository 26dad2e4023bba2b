import asyncio
from typing import AsyncIterator, Optional, Protocol

from support_desk.agents.fulfillment.service import get_order_status
from support_desk.agents.reply.prompts import build_reply_messages
from support_desk.agents.reply.templates import render_reply
from support_desk.agents.triage.order_id import clean_order_id
from support_desk.llm.client import ChatCompletionClient, message_content
from support_desk.schemas.models import OrderStatusInfo, TriageRecord
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_DELAY = 0.04


class ReplyComposer(Protocol):
    """Produces the customer-facing answer for a triaged message."""

    async def compose(self, message: str, triage: TriageRecord) -> str:
        ...

    async def open_stream(self, message: str, triage: TriageRecord) -> AsyncIterator[str]:
        ...


async def resolve_order(
    triage: TriageRecord,
    lookup_delay: Optional[float] = None,
) -> tuple[Optional[str], Optional[OrderStatusInfo]]:
    """
    Re-validate the triage order number and look it up when relevant.

    The stored id is never trusted: it is passed through `clean_order_id`
    again because the record may come straight from a client or a model.
    """
    order_id = clean_order_id(triage.entities.order_id)
    if triage.entities.order_id and not order_id:
        logger.warning("⚠️ REPLY: Discarding order id that failed validation")
    info = None
    if triage.intent == "order_status" and order_id:
        info = await get_order_status(order_id, delay=lookup_delay)
    return order_id, info


def split_chunks(text: str) -> list[str]:
    """Split at single spaces, keeping the space on each following chunk."""
    words = text.split(" ")
    return [words[0]] + [" " + word for word in words[1:]]


async def paced_chunks(chunks: list[str], delay: float) -> AsyncIterator[str]:
    for index, chunk in enumerate(chunks):
        if index and delay:
            await asyncio.sleep(delay)
        yield chunk


class TemplateReplyComposer:
    """Deterministic replies, no chat model involved."""

    def __init__(self, lookup_delay: Optional[float] = None, chunk_delay: float = DEFAULT_CHUNK_DELAY):
        self.lookup_delay = lookup_delay
        self.chunk_delay = chunk_delay

    async def compose(self, message: str, triage: TriageRecord) -> str:
        order_id, info = await resolve_order(triage, self.lookup_delay)
        reply = render_reply(triage.intent, triage.language, order_id, info)
        logger.info(f"✅ REPLY (template): intent={triage.intent}, language={triage.language}")
        return reply

    async def open_stream(self, message: str, triage: TriageRecord) -> AsyncIterator[str]:
        """Replay the template reply word by word to mimic typing."""
        reply = await self.compose(message, triage)
        return paced_chunks(split_chunks(reply), self.chunk_delay)


class ModelReplyComposer:
    """Grounded replies generated by the chat model."""

    def __init__(
        self,
        client: ChatCompletionClient,
        temperature: float = 0.2,
        lookup_delay: Optional[float] = None,
    ):
        self.client = client
        self.temperature = temperature
        self.lookup_delay = lookup_delay

    async def _messages(self, message: str, triage: TriageRecord) -> list[dict[str, str]]:
        order_id, info = await resolve_order(triage, self.lookup_delay)
        if triage.intent == "order_status" and not order_id:
            logger.info("ℹ️ REPLY: No valid order id, instructing model to ask for one")
        return build_reply_messages(message, triage, order_id, info)

    async def compose(self, message: str, triage: TriageRecord) -> str:
        messages = await self._messages(message, triage)
        data = await self.client.complete(messages=messages, temperature=self.temperature)
        reply = (message_content(data) or "").strip()
        logger.info(f"✅ REPLY (model): {len(reply)} characters")
        return reply

    async def open_stream(self, message: str, triage: TriageRecord) -> AsyncIterator[str]:
        messages = await self._messages(message, triage)
        logger.info("🔄 REPLY (model): Opening token stream")
        return await self.client.open_stream(messages=messages, temperature=self.temperature)
