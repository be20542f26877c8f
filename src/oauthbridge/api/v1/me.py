# Me router — identity behind the caller's bearer token.
# Created: 2026-10-17

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from oauthbridge.api.deps import require_token
from oauthbridge.api.oauth2.models import OAuthToken
from oauthbridge.api.v1.schemas.oauth2 import MeResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Identity"])


@router.get("/me", response_model=MeResponse)
async def get_me(token: OAuthToken = Depends(require_token)):
    """Return the GitHub identity the token was issued for.

    The upstream access token stays server-side.
    """
    return MeResponse(
        user_id=token.user_id,
        client_id=token.client_id,
        scope=token.scope,
        login=token.props.get("login", token.user_id),
        name=token.props.get("name"),
        email=token.props.get("email"),
    )
