# OAuth2 Authorization Provider with PKCE support.
# Created: 2026-10-17
#
# Downstream half of the bridge: parses client authorization requests, turns a
# completed upstream login into a one-time code (RFC 7636 PKCE), and swaps that
# code for a bearer token carrying the upstream identity as props.

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode, urlsplit

from starlette.requests import Request

from oauthbridge.api.oauth2.models import AuthorizationCode, OAuthClient, OAuthToken
from oauthbridge.api.oauth2.storage import OAuthStorage
from oauthbridge.bridge.protocol import AuthRequest, Completion, InvalidAuthRequest
from oauthbridge.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Token lifetimes
ACCESS_TOKEN_TTL = timedelta(hours=1)
CODE_TTL = timedelta(minutes=10)


class AuthorizationServer:
    """OAuth2 authorization server with PKCE."""

    def __init__(self, storage: OAuthStorage | None = None):
        self.storage = storage or OAuthStorage()

    async def parse_auth_request(self, request: Request) -> AuthRequest:
        """Validate the downstream ``/authorize`` query.

        A missing client_id yields a request with an empty id so the caller
        can reject it; every other problem raises InvalidAuthRequest.
        """
        params = request.query_params
        client_id = params.get("client_id", "")
        if not client_id:
            return AuthRequest(client_id="")

        client = self.storage.get_client(client_id)
        if client is None:
            raise InvalidAuthRequest("invalid_client")

        response_type = params.get("response_type", "code")
        if response_type != "code":
            raise InvalidAuthRequest("unsupported_response_type")

        redirect_uri = params.get("redirect_uri", "")
        if not redirect_uri and len(client.redirect_uris) == 1:
            redirect_uri = client.redirect_uris[0]
        if redirect_uri not in client.redirect_uris:
            raise InvalidAuthRequest("invalid_redirect_uri")

        scope = params.get("scope") or " ".join(client.allowed_scopes)
        if not set(scope.split()).issubset(client.allowed_scopes):
            raise InvalidAuthRequest("invalid_scope")

        code_challenge = params.get("code_challenge", "")
        code_challenge_method = params.get("code_challenge_method", "S256")
        if not code_challenge:
            raise InvalidAuthRequest("missing_code_challenge")
        if code_challenge_method != "S256":
            raise InvalidAuthRequest("invalid_code_challenge_method")

        return AuthRequest(
            client_id=client_id,
            redirect_uri=redirect_uri,
            scope=scope,
            state=params.get("state", ""),
            response_type=response_type,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
        )

    async def complete_authorization(
        self,
        *,
        request: AuthRequest,
        user_id: str,
        metadata: dict[str, Any],
        scope: str,
        props: dict[str, Any],
    ) -> Completion:
        """Mint a downstream code for *request* and return the client redirect.

        Raises InvalidAuthRequest if the client or its redirect URI is no
        longer registered.
        """
        client = self.storage.get_client(request.client_id)
        if client is None:
            raise InvalidAuthRequest("invalid_client")
        if request.redirect_uri not in client.redirect_uris:
            raise InvalidAuthRequest("invalid_redirect_uri")

        self.storage.cleanup_expired()
        code = secrets.token_urlsafe(32)
        self.storage.store_code(
            AuthorizationCode(
                code=code,
                client_id=request.client_id,
                redirect_uri=request.redirect_uri,
                scope=scope,
                code_challenge=request.code_challenge,
                code_challenge_method=request.code_challenge_method or "S256",
                user_id=user_id,
                metadata=dict(metadata),
                props=dict(props),
            )
        )
        logger.info("Issued authorization code for %s (client %s)", user_id, request.client_id)

        params = {"code": code}
        if request.state:
            params["state"] = request.state
        sep = "&" if urlsplit(request.redirect_uri).query else "?"
        return Completion(redirect_to=f"{request.redirect_uri}{sep}{urlencode(params)}")

    def exchange(
        self,
        code: str,
        client_id: str,
        code_verifier: str,
        redirect_uri: str = "",
    ) -> tuple[dict | None, str | None]:
        """Exchange an authorization code + verifier for a bearer token.

        Returns (token_dict, error).
        """
        auth_code = self.storage.get_code(code)
        if auth_code is None:
            return None, "invalid_code"

        if auth_code.used:
            return None, "code_already_used"

        # Check expiry
        now = datetime.now(UTC)
        if (now - auth_code.created_at) > CODE_TTL:
            return None, "code_expired"

        if auth_code.client_id != client_id:
            return None, "client_mismatch"

        if redirect_uri and auth_code.redirect_uri != redirect_uri:
            return None, "redirect_uri_mismatch"

        # PKCE verification: S256 = BASE64URL(SHA256(code_verifier))
        challenge = (
            base64.urlsafe_b64encode(hashlib.sha256(code_verifier.encode()).digest())
            .rstrip(b"=")
            .decode()
        )
        if not secrets.compare_digest(challenge, auth_code.code_challenge):
            return None, "invalid_code_verifier"

        # Mark code as used
        self.storage.mark_code_used(code)

        access_token = f"bat_{secrets.token_urlsafe(32)}"
        token = OAuthToken(
            access_token=access_token,
            client_id=client_id,
            user_id=auth_code.user_id,
            scope=auth_code.scope,
            props=auth_code.props,
            metadata=auth_code.metadata,
            expires_at=now + ACCESS_TOKEN_TTL,
        )
        self.storage.store_token(token)

        return {
            "access_token": access_token,
            "token_type": "Bearer",
            "expires_in": int(ACCESS_TOKEN_TTL.total_seconds()),
            "scope": auth_code.scope,
        }, None

    def verify_access_token(self, access_token: str) -> OAuthToken | None:
        """Verify an access token and return the token record if valid."""
        token = self.storage.get_token(access_token)
        if token is None:
            return None
        if token.expires_at and datetime.now(UTC) > token.expires_at:
            return None
        return token


def _clients_from_settings(settings: Settings) -> list[OAuthClient]:
    return [
        OAuthClient(
            client_id=c.client_id,
            client_name=c.client_name or c.client_id,
            redirect_uris=list(c.redirect_uris),
            allowed_scopes=list(c.allowed_scopes),
        )
        for c in settings.oauth_clients
    ]


# Singleton
_server: AuthorizationServer | None = None


def get_oauth_server(settings: Settings | None = None) -> AuthorizationServer:
    global _server
    if _server is None:
        settings = settings or get_settings()
        _server = AuthorizationServer(
            OAuthStorage(
                clients=_clients_from_settings(settings),
                persist_path=settings.config_dir / "oauth_tokens.json",
            )
        )
    return _server


def reset_oauth_server() -> None:
    global _server
    _server = None
