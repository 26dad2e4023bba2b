import functools
from typing import Any, Optional

from fastapi import status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from support_desk.core.errors import (
    ConfigurationError,
    SchemaError,
    SupportError,
    UpstreamError,
    ValidationError,
)
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_ERROR = "unknown error"


def _status_for(exc: Exception) -> int:
    if isinstance(exc, SchemaError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: Exception) -> dict[str, Any]:
    """JSON error payload: ``{error, details?}`` or ``{error, issues?}``."""
    if isinstance(exc, SchemaError):
        body = {"error": exc.message, "issues": exc.issues}
    elif isinstance(exc, SupportError):
        body = {"error": exc.message, "details": exc.details}
    else:
        body = {"error": str(exc) or UNKNOWN_ERROR}
    return {key: value for key, value in body.items() if value is not None}


def error_text(exc: Exception) -> str:
    """Plain-text error for streaming endpoints, e.g. ``OpenAI error: <body>``."""
    if isinstance(exc, SupportError):
        if isinstance(exc, UpstreamError) and isinstance(exc.details, str):
            return f"{exc.message}: {exc.details}"
        return exc.message
    return str(exc) or UNKNOWN_ERROR


def error_response(exc: Exception, plain_text: bool = False) -> Response:
    code = _status_for(exc)
    if plain_text:
        return PlainTextResponse(error_text(exc), status_code=code)
    return JSONResponse(error_body(exc), status_code=code)


def endpoint_guard(stage: str, plain_text: bool = False):
    """
    Decorator for route handlers of one pipeline stage.

    Converts every failure into a single error response instead of letting
    a stack trace reach the caller. Known pipeline errors keep their
    message and details; anything else becomes a generic 500.
    """
    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except (ValidationError, ConfigurationError) as e:
                logger.warning(f"⚠️ {stage.upper()}: {e.message}")
                return error_response(e, plain_text)
            except SupportError as e:
                logger.error(f"❌ {stage.upper()}: {e.message}")
                return error_response(e, plain_text)
            except Exception as e:
                logger.error(f"❌ {stage.upper()}: unexpected failure: {e}", exc_info=True)
                return error_response(e, plain_text)

        return wrapper
    return decorator
