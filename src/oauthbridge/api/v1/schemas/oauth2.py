# OAuth2 schemas.
# Created: 2026-10-17

from __future__ import annotations

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """OAuth2 token response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    scope: str


class MeResponse(BaseModel):
    """Identity attached to the caller's bearer token."""

    user_id: str
    client_id: str
    scope: str
    login: str
    name: str | None = None
    email: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
