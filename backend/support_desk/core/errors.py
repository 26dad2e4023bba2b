"""
Error taxonomy for the support desk pipeline.

Every stage raises one of these; the API layer maps them to responses in
`support_desk.orchestrator.guard`.
"""
from typing import Any, Optional


class SupportError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(SupportError):
    """Malformed or missing input."""


class SchemaError(ValidationError):
    """Model output did not conform to the triage schema."""

    def __init__(self, message: str, issues: Optional[Any] = None):
        super().__init__(message, details=issues)
        self.issues = issues


class ConfigurationError(SupportError):
    """A required setting (usually the API credential) is missing."""


class UpstreamError(SupportError):
    """The chat-completion capability failed or returned nothing usable."""


class ParseError(SupportError):
    """A single streamed event line could not be decoded."""
