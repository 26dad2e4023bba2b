"""
Pydantic models shared by the triage and reply stages and the HTTP API.

Wire names are camelCase (``orderId``, ``etaDays``); Python attributes are
snake_case. Serialize with ``by_alias=True, exclude_none=True``.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Intent = Literal["order_status", "cancellation", "technical", "other"]
Urgency = Literal["low", "medium", "high"]
Language = Literal["de", "en"]

INTENTS: tuple[str, ...] = ("order_status", "cancellation", "technical", "other")
URGENCIES: tuple[str, ...] = ("low", "medium", "high")
LANGUAGES: tuple[str, ...] = ("de", "en")


class Entities(BaseModel):
    """Entities pulled out of a support message."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order_id: Optional[str] = Field(default=None, alias="orderId")
    email: Optional[EmailStr] = None
    name: Optional[str] = None


class TriageRecord(BaseModel):
    """Structured classification of one inbound support message."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    intent: Intent
    urgency: Urgency = "low"
    entities: Entities = Field(default_factory=Entities)
    language: Language = "de"
    confidence: float = Field(default=0.6, ge=0, le=1)

    def with_order_id(self, order_id: Optional[str]) -> "TriageRecord":
        """Return a copy whose entities carry ``order_id`` (or none)."""
        entities = self.entities.model_copy(update={"order_id": order_id})
        return self.model_copy(update={"entities": entities})

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OrderStatusInfo(BaseModel):
    """Shipment status returned by the fulfillment lookup."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId")
    status: str
    carrier: str
    tracking: str
    eta_days: int = Field(alias="etaDays")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TriageRequest(BaseModel):
    """Body of POST /api/support/triage."""

    message: str = Field(..., min_length=1, description="Raw customer message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"message": "Where is my order A12345?"}
        }
    )


class ReplyTriage(TriageRecord):
    """
    Triage record as sent back by a client for the reply stage.

    The intent may be missing, empty or unknown; the reply then falls back
    to the plain acknowledgement.
    """

    intent: Optional[str] = None


class ReplyRequest(BaseModel):
    """Body of POST /api/support/reply and /api/support/reply/stream."""

    message: str = Field(..., min_length=1, description="Raw customer message")
    triage: ReplyTriage


class ReplyResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
    issues: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    mode: str
    model: str


class EnvDebugResponse(BaseModel):
    hasKey: bool
    prefix: str
