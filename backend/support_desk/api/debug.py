from fastapi import APIRouter, Depends

from support_desk.core.config import Settings, get_settings
from support_desk.schemas.models import EnvDebugResponse, HealthResponse

router = APIRouter()

KEY_PREFIX_LENGTH = 7


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=settings.APP_VERSION,
        mode=settings.mode,
        model=settings.OPENAI_MODEL,
    )


@router.get("/api/debug/env", response_model=EnvDebugResponse)
async def debug_env(settings: Settings = Depends(get_settings)) -> EnvDebugResponse:
    """Whether an API key is configured, with its non-secret prefix."""
    key = settings.OPENAI_API_KEY or ""
    return EnvDebugResponse(hasKey=bool(key), prefix=key[:KEY_PREFIX_LENGTH])
