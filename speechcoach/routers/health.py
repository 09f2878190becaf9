"""
Health Check Router - Speech Coach Scoring Engine
speechcoach/routers/health.py

Returns service status plus the state of the skill catalogue and Snowflake
configuration. No database round trip.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Dict
from datetime import datetime, timezone

from speechcoach.config import Settings, get_settings
from speechcoach.core.dependencies import get_taxonomy
from speechcoach.scoring.taxonomy import SkillTaxonomy

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health_check(
    settings: Settings = Depends(get_settings),
    taxonomy: SkillTaxonomy = Depends(get_taxonomy),
) -> HealthResponse:
    dependencies = {
        "taxonomy": f"healthy: {len(taxonomy)} skills" if len(taxonomy) else "unhealthy: empty taxonomy",
        "snowflake": "configured" if settings.snowflake_configured else "not configured",
    }
    overall = "healthy" if len(taxonomy) else "degraded"
    return HealthResponse(
        status=overall,
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )
