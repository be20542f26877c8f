# Settings — environment-driven configuration for the bridge.
# Created: 2026-10-17
#
# All values come from OAUTHBRIDGE_* environment variables (or a .env file).
# BridgeConfig is the immutable slice injected into the authorize/callback phases.

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DownstreamClient(BaseModel):
    """A downstream OAuth client allowed to request tokens."""

    client_id: str
    client_name: str = ""
    redirect_uris: list[str] = Field(default_factory=list)
    allowed_scopes: list[str] = Field(default_factory=lambda: ["read"])


class Settings(BaseSettings):
    """Bridge settings."""

    model_config = SettingsConfigDict(
        env_prefix="OAUTHBRIDGE_",
        env_file=".env",
        extra="ignore",
    )

    # Upstream (GitHub) OAuth app
    github_client_id: str = ""
    github_client_secret: str = ""
    upstream_authorize_url: str = "https://github.com/login/oauth/authorize"
    upstream_token_url: str = "https://github.com/login/oauth/access_token"
    upstream_api_url: str = "https://api.github.com"
    upstream_scope: str = "read:user"
    upstream_timeout: float = 15.0

    # Routing
    bridge_base_path: str = ""

    # Empty key = unsigned state tokens
    state_signing_key: str = ""

    # Downstream clients, e.g. OAUTHBRIDGE_OAUTH_CLIENTS='[{"client_id": "cli", ...}]'
    oauth_clients: list[DownstreamClient] = Field(default_factory=list)

    api_cors_allowed_origins: list[str] = Field(default_factory=list)
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".oauthbridge")

    host: str = "127.0.0.1"
    port: int = 8787


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_config_dir() -> Path:
    """Get/create the config directory."""
    d = get_settings().config_dir
    d.mkdir(parents=True, exist_ok=True)
    return d


@dataclass(frozen=True)
class BridgeConfig:
    """Upstream credentials and endpoints used by both bridge phases."""

    client_id: str
    client_secret: str
    authorize_url: str
    token_url: str
    scope: str
    callback_path: str = "/callback"
    state_signing_key: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> BridgeConfig:
        base = settings.bridge_base_path.rstrip("/")
        return cls(
            client_id=settings.github_client_id,
            client_secret=settings.github_client_secret,
            authorize_url=settings.upstream_authorize_url,
            token_url=settings.upstream_token_url,
            scope=settings.upstream_scope,
            callback_path=f"{base}/callback",
            state_signing_key=settings.state_signing_key,
        )
