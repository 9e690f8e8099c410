from __future__ import annotations

from fastapi import APIRouter

from health_informer.config import settings
from health_informer.models.schemas import ConfigSummaryResponse

router = APIRouter(prefix="/api/debug", tags=["debug"])


@router.get("/config", response_model=ConfigSummaryResponse)
async def config_summary():
    """Which providers are active and whether live search can run. Never exposes keys."""
    return ConfigSummaryResponse(
        use_synthetic_data=settings.use_synthetic_data,
        search_provider=settings.search_provider,
        has_search_api_key=bool(settings.search_api_key),
        search_available=settings.search_available,
        llm_provider=settings.llm_provider,
    )
