import json

import pytest

from support_desk.agents.triage.agent import (
    HEURISTIC_CONFIDENCE,
    HeuristicTriageClassifier,
    ModelTriageClassifier,
    assemble,
    enforce_order_id,
)
from support_desk.core.errors import SchemaError, UpstreamError, ValidationError
from support_desk.llm.client import ChatCompletionClient
from support_desk.schemas.models import Entities, TriageRecord


def model_triage(**fields) -> str:
    record = {
        "intent": "order_status",
        "urgency": "low",
        "entities": {},
        "language": "en",
        "confidence": 0.8,
    }
    record.update(fields)
    return json.dumps(record)


@pytest.fixture
def model_classifier(fake_openai):
    client = ChatCompletionClient(
        api_key="sk-test",
        model="gpt-4o-mini",
        base_url="https://api.openai.test/v1",
        transport=fake_openai.transport,
    )
    return ModelTriageClassifier(client, temperature=0.0)


class RecordingClassifier:
    def __init__(self):
        self.seen = []

    async def classify(self, redacted: str) -> TriageRecord:
        self.seen.append(redacted)
        return TriageRecord(intent="other", language="en", confidence=0.5)


class TestHeuristicTriage:

    # --- 1. Reference scenarios ---

    @pytest.mark.asyncio
    async def test_german_order_status_with_order_number(self):
        """Heuristic triage of the German reference message"""
        record = await assemble(
            "Hallo, meine Bestellung #A123456 ist noch nicht angekommen. Was ist der Status?",
            HeuristicTriageClassifier(),
        )

        assert record.intent == "order_status"
        assert record.language == "de"
        assert record.entities.order_id == "A123456"
        assert record.confidence == HEURISTIC_CONFIDENCE == 0.9
        assert record.urgency == "low"

    @pytest.mark.asyncio
    async def test_english_order_status_without_order_number(self):
        record = await assemble("Where is my order?", HeuristicTriageClassifier())

        assert record.intent == "order_status"
        assert record.language == "en"
        assert record.entities.order_id is None

    # --- 2. Order number only for order_status ---

    @pytest.mark.parametrize("message, intent", [
        ("I want to cancel order A12345", "cancellation"),
        ("Error 500 on page X12345-B", "technical"),
        ("Gutschein K12345 einlösen?", "other"),
    ])
    @pytest.mark.asyncio
    async def test_other_intents_never_carry_order_id(self, message, intent):
        """Order numbers are dropped for non order intents"""
        record = await assemble(message, HeuristicTriageClassifier())

        assert record.intent == intent
        assert record.entities.order_id is None

    @pytest.mark.asyncio
    async def test_pii_is_redacted_before_extraction(self):
        # The phone number would otherwise look like an order number
        record = await assemble("Status? Call me on 0170 12345678", HeuristicTriageClassifier())

        assert record.intent == "order_status"
        assert record.entities.order_id is None

    # --- 3. Input validation ---

    @pytest.mark.parametrize("message", ["", "   ", "\n\t"])
    @pytest.mark.asyncio
    async def test_empty_message_is_rejected(self, message):
        """Empty input is a validation error"""
        with pytest.raises(ValidationError) as exc_info:
            await assemble(message, HeuristicTriageClassifier())

        assert exc_info.value.details[0]["loc"] == ["message"]

    @pytest.mark.asyncio
    async def test_classifier_only_sees_redacted_text(self):
        """PII never reaches the classifier"""
        classifier = RecordingClassifier()

        await assemble("I am jane@example.com, phone +49 170 1234567", classifier)

        assert classifier.seen == ["I am <email>, phone <phone>"]


class TestModelTriage:

    @pytest.mark.asyncio
    async def test_sends_strict_schema_request(self, fake_openai, model_classifier):
        """Model triage asks for strict JSON output"""
        fake_openai.reply_content(model_triage(entities={"orderId": "A12345"}))

        await assemble("Where is order A12345? Mail: jane@example.com", model_classifier)

        payload = fake_openai.payload()
        assert payload["temperature"] == 0
        assert payload["model"] == "gpt-4o-mini"
        assert payload["response_format"]["type"] == "json_schema"
        assert payload["response_format"]["json_schema"]["name"] == "triage_schema"
        assert payload["response_format"]["json_schema"]["strict"] is True
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1] == {
            "role": "user",
            "content": "Where is order A12345? Mail: <email>",
        }
        assert "stream" not in payload

    @pytest.mark.asyncio
    async def test_model_order_id_is_normalized(self, fake_openai, model_classifier):
        fake_openai.reply_content(model_triage(urgency="medium", entities={"orderId": " a12345 "}))

        record = await assemble("where is a12345", model_classifier)

        assert record.entities.order_id == "A12345"
        assert record.urgency == "medium"
        assert record.confidence == 0.8

    @pytest.mark.asyncio
    async def test_hallucinated_order_id_is_dropped(self, fake_openai, model_classifier):
        """Keywords proposed as ids are rejected"""
        fake_openai.reply_content(model_triage(entities={"orderId": "ORDER"}))

        record = await assemble("What is the status of my order?", model_classifier)

        assert record.entities.order_id is None

    @pytest.mark.asyncio
    async def test_rejected_model_id_does_not_fall_back_to_text(self, fake_openai, model_classifier):
        fake_openai.reply_content(model_triage(entities={"orderId": "TRACKING"}))

        record = await assemble("Status of order B99999?", model_classifier)

        assert record.entities.order_id is None

    @pytest.mark.asyncio
    async def test_missing_model_id_is_extracted_from_text(self, fake_openai, model_classifier):
        fake_openai.reply_content(model_triage())

        record = await assemble("Status for order B77777 please", model_classifier)

        assert record.entities.order_id == "B77777"

    @pytest.mark.asyncio
    async def test_non_order_intent_clears_model_order_id(self, fake_openai, model_classifier):
        fake_openai.reply_content(model_triage(intent="cancellation", entities={"orderId": "A12345"}))

        record = await assemble("cancel A12345", model_classifier)

        assert record.intent == "cancellation"
        assert record.entities.order_id is None

    @pytest.mark.parametrize("content, field", [
        (model_triage(language="fr"), "language"),
        (model_triage(confidence=1.5), "confidence"),
        (model_triage(intent="refund"), "intent"),
    ])
    @pytest.mark.asyncio
    async def test_schema_violations_raise_schema_error(self, fake_openai, model_classifier, content, field):
        """Out-of-vocabulary output fails validation"""
        fake_openai.reply_content(content)

        with pytest.raises(SchemaError) as exc_info:
            await assemble("hello", model_classifier)

        assert exc_info.value.message == "Schema validation failed"
        assert any(field in issue["loc"] for issue in exc_info.value.issues)

    @pytest.mark.asyncio
    async def test_non_json_content_raises_schema_error(self, fake_openai, model_classifier):
        fake_openai.reply_content("Sure! The intent is order_status.")

        with pytest.raises(SchemaError):
            await assemble("hello", model_classifier)

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_downgraded(self, fake_openai, model_classifier):
        """Upstream errors never fall back to heuristics"""
        fake_openai.reply_text("rate limited", status_code=429)

        with pytest.raises(UpstreamError) as exc_info:
            await assemble("Where is my order A12345?", model_classifier)

        assert exc_info.value.message == "OpenAI error"
        assert exc_info.value.details == "rate limited"

    @pytest.mark.asyncio
    async def test_empty_content_raises_upstream_error(self, fake_openai, model_classifier):
        fake_openai.reply_content(None)

        with pytest.raises(UpstreamError) as exc_info:
            await assemble("hello", model_classifier)

        assert exc_info.value.message == "No content"


class TestEnforceOrderId:

    @pytest.mark.parametrize("intent", ["cancellation", "technical", "other"])
    def test_clears_for_non_order_intents(self, intent):
        record = TriageRecord(intent=intent, entities=Entities(order_id="A12345"))

        assert enforce_order_id(record, "order A12345").entities.order_id is None

    def test_does_not_mutate_input(self):
        record = TriageRecord(intent="order_status", entities=Entities(order_id="a12345"))

        cleaned = enforce_order_id(record, "")

        assert cleaned.entities.order_id == "A12345"
        assert record.entities.order_id == "a12345"
