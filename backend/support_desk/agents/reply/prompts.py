import json
from typing import Optional

from support_desk.agents.triage.redaction import redact
from support_desk.schemas.models import OrderStatusInfo, TriageRecord

REPLY_SYSTEM_PROMPT = """You are a support assistant. Respond briefly, politely and in the user's language ({lang}).
- Never invent order numbers, tracking codes or carriers. Use only provided toolContext.
- If no valid orderId is present for order_status intent, ask for it with an example.
- Keep PII out of logs; do not echo emails or phone numbers.
- Prefer bullet-like clarity in 1-2 sentences."""

MISSING_ORDER_NOTE = {
    "de": "Hinweis: Es liegt keine valide Bestellnummer vor. Bitte freundlich nach der Nummer fragen (Beispiel: A12345).",
    "en": "Note: No valid order number present. Politely ask for it (example: A12345).",
}


def tool_context(info: Optional[OrderStatusInfo]) -> str:
    if info is None:
        return ""
    return f"Tool:getOrderStatus => {json.dumps(info.to_wire())}"


def build_reply_messages(
    message: str,
    triage: TriageRecord,
    order_id: Optional[str],
    info: Optional[OrderStatusInfo],
) -> list[dict[str, str]]:
    """
    Assemble the grounded conversation sent to the chat model.

    ``triage`` is echoed with the re-validated ``order_id`` so an id that
    failed validation never reaches the model. The customer message is
    redacted and the email entity is left out.
    """
    lang = triage.language
    grounded = triage.with_order_id(order_id).to_wire()
    grounded["entities"].pop("email", None)
    messages = [
        {"role": "system", "content": REPLY_SYSTEM_PROMPT.format(lang=lang)},
        {"role": "system", "content": f"LANG:{lang}"},
        {"role": "system", "content": f"TRIAGE:{json.dumps(grounded, ensure_ascii=False)}"},
        {"role": "system", "content": tool_context(info)},
        {"role": "user", "content": redact(message)},
    ]
    if triage.intent == "order_status" and not order_id:
        messages.append({"role": "system", "content": MISSING_ORDER_NOTE[lang]})
    return messages
