# Health router.
# Created: 2026-10-17

from __future__ import annotations

from fastapi import APIRouter

from oauthbridge import __version__
from oauthbridge.api.v1.schemas.oauth2 import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def get_health_status():
    return HealthResponse(version=__version__)
