# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-17

from __future__ import annotations

from fastapi import HTTPException, Request

from oauthbridge.api.oauth2.models import OAuthToken


async def require_token(request: Request) -> OAuthToken:
    """FastAPI dependency that resolves the caller's downstream bearer token.

    Usage::

        @router.get("/me")
        async def me(token: OAuthToken = Depends(require_token)): ...

    The returned record carries the grant's props (upstream identity and
    upstream access token) issued at callback time.
    """
    from oauthbridge.api.oauth2.server import get_oauth_server

    auth = request.headers.get("authorization", "")
    scheme, _, value = auth.partition(" ")
    if scheme.lower() != "bearer" or not value:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = get_oauth_server().verify_access_token(value.strip())
    if token is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": 'Bearer error="invalid_token"'},
        )
    return token
