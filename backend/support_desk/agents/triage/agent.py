import json
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from support_desk.agents.triage.heuristics import detect_intent, detect_language
from support_desk.agents.triage.order_id import clean_order_id, extract_order_id
from support_desk.agents.triage.prompts import TRIAGE_PROMPT, TRIAGE_RESPONSE_FORMAT
from support_desk.agents.triage.redaction import preview, redact
from support_desk.core.errors import SchemaError, UpstreamError, ValidationError
from support_desk.llm.client import ChatCompletionClient, message_content
from support_desk.schemas.models import Entities, TriageRecord
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

HEURISTIC_CONFIDENCE = 0.9


class TriageClassifier(Protocol):
    """Turns an already redacted message into a TriageRecord."""

    async def classify(self, redacted: str) -> TriageRecord:
        ...


class HeuristicTriageClassifier:
    """Keyword rules, no network access."""

    async def classify(self, redacted: str) -> TriageRecord:
        intent = detect_intent(redacted)
        language = detect_language(redacted)
        order_id = extract_order_id(redacted) if intent == "order_status" else None
        logger.debug(f"Rule-based triage: intent={intent}, language={language}, order_id={order_id}")
        return TriageRecord(
            intent=intent,
            urgency="low",
            entities=Entities(order_id=order_id),
            language=language,
            confidence=HEURISTIC_CONFIDENCE,
        )


class ModelTriageClassifier:
    """Structured-output classification by the chat model."""

    def __init__(self, client: ChatCompletionClient, temperature: float = 0.0):
        self.client = client
        self.temperature = temperature

    async def classify(self, redacted: str) -> TriageRecord:
        data = await self.client.complete(
            messages=[
                {"role": "system", "content": TRIAGE_PROMPT},
                {"role": "user", "content": redacted},
            ],
            temperature=self.temperature,
            response_format=TRIAGE_RESPONSE_FORMAT,
        )
        raw = message_content(data)
        if not raw:
            raise UpstreamError("No content", details=data)

        try:
            record = TriageRecord.model_validate(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.warning(f"Triage output is not JSON: {e}")
            raise SchemaError(
                "Schema validation failed",
                issues=[{"loc": [], "msg": f"Invalid JSON: {e.msg}", "type": "json_invalid"}],
            ) from e
        except PydanticValidationError as e:
            logger.warning(f"Triage output failed schema validation: {e.error_count()} issue(s)")
            raise SchemaError(
                "Schema validation failed",
                issues=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

        return enforce_order_id(record, redacted)


def enforce_order_id(record: TriageRecord, redacted: str) -> TriageRecord:
    """
    Re-validate the order number of a record produced outside this module.

    A proposed id must pass `clean_order_id` on its own; when none was
    proposed the redacted text is searched instead. Intents other than
    order_status never carry an order number.
    """
    if record.intent != "order_status":
        return record.with_order_id(None)
    proposed = record.entities.order_id
    if proposed:
        cleaned = clean_order_id(proposed)
        if cleaned != proposed:
            logger.info(f"Order id normalized from model output: {proposed!r} -> {cleaned!r}")
    else:
        cleaned = extract_order_id(redacted)
    return record.with_order_id(cleaned)


async def assemble(message: str, classifier: TriageClassifier) -> TriageRecord:
    """
    Triage one support message.

    The message is redacted before the classifier sees it.

    Raises:
        ValidationError: message is empty
        SchemaError: model output did not match the schema
        UpstreamError: the chat model call failed
    """
    if not message or not message.strip():
        raise ValidationError(
            "message must not be empty",
            details=[{"loc": ["message"], "msg": "String should have at least 1 character"}],
        )

    redacted = redact(message)
    logger.info(f"🔍 TRIAGE: Analyzing message: '{preview(redacted)}'")

    record = await classifier.classify(redacted)

    logger.info(
        f"✅ TRIAGE: intent={record.intent}, language={record.language}, "
        f"order_id={record.entities.order_id}, confidence={record.confidence}"
    )
    return record
