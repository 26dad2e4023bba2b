TRIAGE_PROMPT = """
You are a customer support triage assistant. Reply ONLY with JSON that matches this schema exactly:
{
  "intent": "order_status|cancellation|technical|other",
  "urgency": "low|medium|high",
  "entities": { "orderId"?: string, "email"?: string, "name"?: string },
  "language": "de|en",
  "confidence": number
}

Rules:
- Be conservative. Do not hallucinate and do not add fields that are not in the schema.
- "orderId" only when it is clearly present in the message (letters, digits or '-', at least one digit, 5 to 24 characters).
- "language" is the language the customer wrote in: "de" for German, "en" for English.
- "confidence" is a number between 0 and 1.
- The message has been anonymised: placeholders like <email>, <phone> or <iban> are not entities.
"""

TRIAGE_JSON_SCHEMA = {
    "name": "triage_schema",
    "strict": True,
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "intent": {"enum": ["order_status", "cancellation", "technical", "other"]},
            "urgency": {"enum": ["low", "medium", "high"]},
            "entities": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "orderId": {"type": "string"},
                    "email": {"type": "string"},
                    "name": {"type": "string"},
                },
            },
            "language": {"enum": ["de", "en"]},
            "confidence": {"type": "number"},
        },
        "required": ["intent", "urgency", "entities", "language", "confidence"],
    },
}

TRIAGE_RESPONSE_FORMAT = {"type": "json_schema", "json_schema": TRIAGE_JSON_SCHEMA}
