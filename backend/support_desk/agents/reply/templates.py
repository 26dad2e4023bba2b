"""Canned replies used when the chat model is disabled."""
from typing import Optional

from support_desk.schemas.models import OrderStatusInfo

ACKNOWLEDGEMENT = {
    "de": "Danke für Ihre Anfrage.",
    "en": "Thanks for your message.",
}

ASK_ORDER_NUMBER = {
    "de": "Bitte teilen Sie mir Ihre Bestellnummer mit (z. B. A12345), dann prüfe ich den Status.",
    "en": "Please share your order number (e.g., A12345) so I can check the status.",
}

ORDER_ON_ITS_WAY = {
    "de": (
        "Ihre Bestellung {order_id} ist unterwegs ({carrier}, Tracking: {tracking}). "
        "Voraussichtliche Zustellung in ca. {eta_days} Tagen."
    ),
    "en": (
        "Your order {order_id} is on its way ({carrier}, tracking: {tracking}). "
        "Estimated delivery in ~{eta_days} days."
    ),
}

CANCELLATION = {
    "de": (
        "Ich kann den Widerruf einleiten. Nennen Sie mir bitte (falls vorhanden) "
        "Ihre Bestellnummer und den Grund."
    ),
    "en": "I can start the cancellation. Please share your order number (if available) and the reason.",
}

TECHNICAL = {
    "de": "Bitte beschreiben Sie das technische Problem kurz (Gerät/Browser, Schritt, Fehlermeldung).",
    "en": "Please describe the technical issue briefly (device/browser, step, error message).",
}


def render_reply(
    intent: Optional[str],
    language: str,
    order_id: Optional[str] = None,
    info: Optional[OrderStatusInfo] = None,
) -> str:
    """
    Build the deterministic reply for an intent.

    ``info`` must be the lookup result for ``order_id`` when intent is
    order_status and the id is valid. A missing or unknown intent gets the
    acknowledgement only.
    """
    parts = [ACKNOWLEDGEMENT[language]]
    if intent == "order_status":
        if order_id and info is not None:
            parts.append(ORDER_ON_ITS_WAY[language].format(
                order_id=info.order_id,
                carrier=info.carrier,
                tracking=info.tracking,
                eta_days=info.eta_days,
            ))
        else:
            parts.append(ASK_ORDER_NUMBER[language])
    elif intent == "cancellation":
        parts.append(CANCELLATION[language])
    elif intent == "technical":
        parts.append(TECHNICAL[language])
    return " ".join(parts)
