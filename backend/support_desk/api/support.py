from typing import AsyncIterator, Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from support_desk.agents.triage.agent import assemble
from support_desk.core.config import Settings, get_settings
from support_desk.orchestrator.factory import (
    build_reply_composer,
    build_triage_classifier,
    get_llm_transport,
)
from support_desk.orchestrator.guard import endpoint_guard
from support_desk.schemas.models import (
    ErrorResponse,
    ReplyRequest,
    ReplyResponse,
    TriageRecord,
    TriageRequest,
)
from support_desk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/support", tags=["support"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post(
    "/triage",
    response_model=TriageRecord,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
@endpoint_guard("triage")
async def triage(
    req: TriageRequest,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
):
    """Classify a support message into a TriageRecord."""
    logger.info(f"📨 API /triage: Received request | mode={settings.mode}")
    classifier = build_triage_classifier(settings, transport)
    return await assemble(req.message, classifier)


@router.post("/reply", response_model=ReplyResponse, responses=ERROR_RESPONSES)
@endpoint_guard("reply")
async def reply(
    req: ReplyRequest,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
):
    """Generate the full reply for a triaged message."""
    logger.info(f"📨 API /reply: intent={req.triage.intent} | mode={settings.mode}")
    composer = build_reply_composer(settings, transport)
    text = await composer.compose(req.message, req.triage)
    return ReplyResponse(reply=text)


async def _logged(stream: AsyncIterator[str]) -> AsyncIterator[str]:
    chunks = 0
    try:
        async for chunk in stream:
            chunks += 1
            yield chunk
    except Exception as e:
        logger.error(f"❌ STREAM: aborted after {chunks} chunk(s): {e}")
        raise
    logger.info(f"✅ STREAM: completed with {chunks} chunk(s)")


@router.post("/reply/stream", response_class=StreamingResponse)
@endpoint_guard("reply_stream", plain_text=True)
async def reply_stream(
    req: ReplyRequest,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
):
    """Stream the reply as plain text chunks."""
    logger.info(f"📨 API /reply/stream: intent={req.triage.intent} | mode={settings.mode}")
    composer = build_reply_composer(settings, transport)
    stream = await composer.open_stream(req.message, req.triage)
    return StreamingResponse(_logged(stream), media_type="text/plain; charset=utf-8")
