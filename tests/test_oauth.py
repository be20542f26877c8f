# Tests for integrations/oauth.py and integrations/github.py
# Created: 2026-10-17

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from oauthbridge.bridge.protocol import Identity, IdentityFetchError
from oauthbridge.integrations.github import GitHubClient
from oauthbridge.integrations.oauth import UpstreamOAuth

TOKEN_URL = "https://github.com/login/oauth/access_token"


def _oauth(handler) -> UpstreamOAuth:
    return UpstreamOAuth(transport=httpx.MockTransport(handler))


def _github(handler) -> GitHubClient:
    return GitHubClient(transport=httpx.MockTransport(handler))


async def _fetch(oauth: UpstreamOAuth, code: str | None = "abc"):
    return await oauth.fetch_token(
        upstream_url=TOKEN_URL,
        client_id="id",
        client_secret="secret",
        code=code,
        redirect_uri="https://bridge.example/callback",
    )


# ---------------------------------------------------------------------------
# UpstreamOAuth
# ---------------------------------------------------------------------------


class TestAuthorizeUrl:
    def test_get_authorize_url(self):
        url = UpstreamOAuth().get_authorize_url(
            upstream_url="https://github.com/login/oauth/authorize",
            client_id="test-client-id",
            redirect_uri="https://bridge.example/callback",
            scope="read:user",
            state="eyJjbGllbnRfaWQiOiJhYmMifQ",
        )
        parts = urlsplit(url)
        assert parts.netloc == "github.com"
        assert parse_qs(parts.query) == {
            "client_id": ["test-client-id"],
            "redirect_uri": ["https://bridge.example/callback"],
            "scope": ["read:user"],
            "state": ["eyJjbGllbnRfaWQiOiJhYmMifQ"],
        }

    def test_appends_to_existing_query(self):
        url = UpstreamOAuth().get_authorize_url(
            upstream_url="https://idp.example/authorize?tenant=x",
            client_id="c",
            redirect_uri="https://bridge.example/callback",
            scope="s",
            state="st",
        )
        assert url.startswith("https://idp.example/authorize?tenant=x&client_id=c")


class TestFetchToken:
    async def test_json_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"access_token": "gho_123", "scope": "read:user"})

        token, error = await _fetch(_oauth(handler))
        assert token == "gho_123"
        assert error is None
        assert seen[0].method == "POST"
        assert seen[0].headers["accept"] == "application/json"
        assert parse_qs(seen[0].content.decode())["code"] == ["abc"]

    async def test_form_encoded_success(self):
        def handler(request):
            return httpx.Response(
                200,
                content=b"access_token=gho_456&token_type=bearer",
                headers={"content-type": "application/x-www-form-urlencoded"},
            )

        token, error = await _fetch(_oauth(handler))
        assert token == "gho_456"
        assert error is None

    async def test_missing_code_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        token, error = await _fetch(_oauth(handler), code=None)
        assert token is None
        assert error.status_code == 400
        assert error.body == b"Missing code"

    async def test_http_error_forwarded_verbatim(self):
        def handler(request):
            return httpx.Response(
                503, content=b"<html>down</html>", headers={"content-type": "text/html"}
            )

        token, error = await _fetch(_oauth(handler))
        assert token is None
        assert error.status_code == 503
        assert error.body == b"<html>down</html>"
        assert error.content_type == "text/html"

    async def test_error_payload(self):
        def handler(request):
            return httpx.Response(200, json={"error": "bad_verification_code"})

        token, error = await _fetch(_oauth(handler))
        assert token is None
        assert error.status_code == 400
        assert b"bad_verification_code" in error.body

    async def test_missing_access_token(self):
        def handler(request):
            return httpx.Response(200, json={"token_type": "bearer"})

        token, error = await _fetch(_oauth(handler))
        assert token is None
        assert error.body == b"Missing access token"

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        token, error = await _fetch(_oauth(handler))
        assert token is None
        assert error.status_code == 502


# ---------------------------------------------------------------------------
# GitHubClient
# ---------------------------------------------------------------------------


class TestGitHubClient:
    async def test_fetch_identity(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200, json={"login": "alice", "name": "Alice", "email": "a@x.com", "id": 1}
            )

        user = await _github(handler).fetch_identity("gho_123")
        assert user == Identity(login="alice", name="Alice", email="a@x.com")
        assert str(seen[0].url) == "https://api.github.com/user"
        assert seen[0].headers["authorization"] == "Bearer gho_123"

    async def test_optional_fields_absent(self):
        def handler(request):
            return httpx.Response(200, json={"login": "bob", "name": None})

        user = await _github(handler).fetch_identity("t")
        assert user == Identity(login="bob")

    async def test_non_2xx(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Bad credentials"})

        with pytest.raises(IdentityFetchError) as exc_info:
            await _github(handler).fetch_identity("t")
        assert exc_info.value.status_code == 401

    async def test_missing_login(self):
        def handler(request):
            return httpx.Response(200, json={"name": "No Login"})

        with pytest.raises(IdentityFetchError, match="no login"):
            await _github(handler).fetch_identity("t")

    async def test_empty_login(self):
        def handler(request):
            return httpx.Response(200, json={"login": "", "name": "Blank"})

        with pytest.raises(IdentityFetchError, match="no login"):
            await _github(handler).fetch_identity("t")

    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"not json")

        with pytest.raises(IdentityFetchError):
            await _github(handler).fetch_identity("t")

    async def test_custom_base_url(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"login": "carol"})

        client = GitHubClient(
            base_url="https://ghe.example/api/v3/", transport=httpx.MockTransport(handler)
        )
        await client.fetch_identity("t")
        assert str(seen[0].url) == "https://ghe.example/api/v3/user"
