# OAuth2 client, code and token storage.
# Created: 2026-10-17
#
# File-backed token persistence — tokens survive server restarts.
# Auth codes remain in-memory (short-lived, 10 min TTL).

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from oauthbridge.api.oauth2.models import AuthorizationCode, OAuthClient, OAuthToken

logger = logging.getLogger(__name__)


def _default_persist_path() -> Path:
    from oauthbridge.config import get_config_dir

    return get_config_dir() / "oauth_tokens.json"


class OAuthStorage:
    """File-backed OAuth2 storage.

    Auth codes are in-memory only (ephemeral, 10 min TTL).
    Tokens are persisted to disk; they hold upstream credentials in their
    props, so the file is written owner-only.
    """

    def __init__(
        self,
        clients: list[OAuthClient] | None = None,
        persist_path: Path | None = None,
    ):
        self._clients: dict[str, OAuthClient] = {c.client_id: c for c in clients or []}
        self._codes: dict[str, AuthorizationCode] = {}
        self._tokens: dict[str, OAuthToken] = {}  # keyed by access_token
        self._persist_path = persist_path
        self._load_tokens()

    def _get_path(self) -> Path:
        if self._persist_path is not None:
            return self._persist_path
        return _default_persist_path()

    def _load_tokens(self) -> None:
        """Load tokens from disk on startup."""
        path = self._get_path()
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text())
            now = datetime.now(UTC)
            for entry in data:
                token = OAuthToken(
                    access_token=entry["access_token"],
                    client_id=entry["client_id"],
                    user_id=entry["user_id"],
                    scope=entry["scope"],
                    props=entry.get("props", {}),
                    metadata=entry.get("metadata", {}),
                    token_type=entry.get("token_type", "Bearer"),
                    expires_at=datetime.fromisoformat(entry["expires_at"])
                    if entry.get("expires_at")
                    else None,
                    created_at=datetime.fromisoformat(entry["created_at"])
                    if entry.get("created_at")
                    else now,
                )
                self._tokens[token.access_token] = token
            logger.debug("Loaded %d OAuth tokens from %s", len(self._tokens), path)
        except (json.JSONDecodeError, OSError, KeyError, TypeError) as exc:
            logger.warning("Failed to load OAuth tokens from %s: %s", path, exc)

    def _save_tokens(self) -> None:
        """Persist tokens to disk."""
        path = self._get_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        data = []
        for token in self._tokens.values():
            data.append(
                {
                    "access_token": token.access_token,
                    "client_id": token.client_id,
                    "user_id": token.user_id,
                    "scope": token.scope,
                    "props": token.props,
                    "metadata": token.metadata,
                    "token_type": token.token_type,
                    "expires_at": token.expires_at.isoformat() if token.expires_at else None,
                    "created_at": token.created_at.isoformat(),
                }
            )
        # Owner-only from creation; fchmod also tightens a pre-existing file
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        if hasattr(os, "fchmod"):
            try:
                os.fchmod(fd, 0o600)
            except OSError:
                logger.debug("Could not restrict permissions on %s", path)
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(data, indent=2))

    def register_client(self, client: OAuthClient) -> None:
        self._clients[client.client_id] = client

    def get_client(self, client_id: str) -> OAuthClient | None:
        return self._clients.get(client_id)

    def store_code(self, code: AuthorizationCode) -> None:
        self._codes[code.code] = code

    def get_code(self, code: str) -> AuthorizationCode | None:
        return self._codes.get(code)

    def mark_code_used(self, code: str) -> None:
        if code in self._codes:
            self._codes[code].used = True

    def store_token(self, token: OAuthToken) -> None:
        self._tokens[token.access_token] = token
        self._save_tokens()

    def get_token(self, access_token: str) -> OAuthToken | None:
        return self._tokens.get(access_token)

    def cleanup_expired(self) -> None:
        """Remove expired codes and tokens."""
        now = datetime.now(UTC)
        # Codes expire after 10 minutes
        expired_codes = [
            k
            for k, v in self._codes.items()
            if (now - v.created_at).total_seconds() > 600 or v.used
        ]
        for k in expired_codes:
            del self._codes[k]

        # Tokens expire based on expires_at
        expired_tokens = [
            k for k, v in self._tokens.items() if v.expires_at and now > v.expires_at
        ]
        for k in expired_tokens:
            del self._tokens[k]

        if expired_tokens:
            self._save_tokens()
