# OAuth2 data models for the downstream Authorization Provider.
# Created: 2026-10-17

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class OAuthClient:
    """Registered downstream OAuth2 client."""

    client_id: str
    client_name: str
    redirect_uris: list[str] = field(default_factory=list)
    allowed_scopes: list[str] = field(default_factory=lambda: ["read"])


@dataclass
class AuthorizationCode:
    """Short-lived downstream code minted when a grant is completed."""

    code: str
    client_id: str
    redirect_uri: str
    scope: str
    code_challenge: str
    code_challenge_method: str  # "S256"
    user_id: str
    metadata: dict[str, Any] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    used: bool = False


@dataclass
class OAuthToken:
    """Downstream bearer token carrying the grant's props."""

    access_token: str
    client_id: str
    user_id: str
    scope: str
    props: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
