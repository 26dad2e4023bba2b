"""
Strategy selection for both pipeline stages.

``USE_DUMMY_AI`` picks the rule-based classifier and template composer;
otherwise both stages talk to the chat model, which requires
``OPENAI_API_KEY``.
"""
from typing import Optional

import httpx

from support_desk.agents.reply.agent import ModelReplyComposer, ReplyComposer, TemplateReplyComposer
from support_desk.agents.triage.agent import HeuristicTriageClassifier, ModelTriageClassifier, TriageClassifier
from support_desk.core.config import Settings
from support_desk.llm.client import ChatCompletionClient


def get_llm_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for outbound model calls; None means real network."""
    return None


def build_triage_classifier(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TriageClassifier:
    if settings.USE_DUMMY_AI:
        return HeuristicTriageClassifier()
    client = ChatCompletionClient.from_settings(settings, transport=transport)
    return ModelTriageClassifier(client, temperature=settings.TRIAGE_TEMPERATURE)


def build_reply_composer(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ReplyComposer:
    if settings.USE_DUMMY_AI:
        return TemplateReplyComposer(
            lookup_delay=settings.FULFILLMENT_DELAY,
            chunk_delay=settings.STREAM_CHUNK_DELAY,
        )
    client = ChatCompletionClient.from_settings(settings, transport=transport)
    return ModelReplyComposer(
        client,
        temperature=settings.REPLY_TEMPERATURE,
        lookup_delay=settings.FULFILLMENT_DELAY,
    )
