# OAuth2 router — bridge authorize/callback + downstream token exchange.
# Created: 2026-10-17

from __future__ import annotations

import logging

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import Response

from oauthbridge.api.v1.schemas.oauth2 import TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OAuth2"])


@router.get("/authorize")
async def authorize(request: Request) -> Response:
    """Start a downstream authorization by sending the user to GitHub."""
    from oauthbridge.bridge.handler import get_github_handler

    return await get_github_handler().initiator.initiate(request)


@router.get("/callback")
async def callback(request: Request) -> Response:
    """Finish the GitHub login and redirect back to the downstream client."""
    from oauthbridge.bridge.handler import get_github_handler

    return await get_github_handler().completer.complete(request)


@router.post("/token", response_model=TokenResponse)
async def token_exchange(
    grant_type: str = Form(...),
    code: str = Form(""),
    client_id: str = Form(""),
    code_verifier: str = Form(""),
    redirect_uri: str = Form(""),
):
    """Exchange a downstream authorization code for a bearer token."""
    from oauthbridge.api.oauth2.server import get_oauth_server

    if grant_type != "authorization_code":
        raise HTTPException(status_code=400, detail="unsupported_grant_type")
    if not code or not code_verifier or not client_id:
        raise HTTPException(
            status_code=400,
            detail="code, code_verifier, and client_id are required",
        )

    result, error = get_oauth_server().exchange(
        code=code,
        client_id=client_id,
        code_verifier=code_verifier,
        redirect_uri=redirect_uri,
    )
    if error:
        raise HTTPException(status_code=400, detail=error)

    return result
