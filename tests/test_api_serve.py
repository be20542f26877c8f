"""Tests for the ``oauthbridge`` application factory."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from oauthbridge.bridge.handler import GitHubHandler
from oauthbridge.bridge.protocol import AuthRequest, IdentityFetchError
from oauthbridge.bridge.state import encode_state
from oauthbridge.config import BridgeConfig, Settings
from oauthbridge.integrations.oauth import UpstreamOAuth

# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path):
    return Settings(
        github_client_id="gh-client",
        github_client_secret="gh-secret",
        bridge_base_path="/oauth",
        config_dir=tmp_path,
        api_cors_allowed_origins=["http://localhost:6274"],
    )


@pytest.fixture
def api_app(settings):
    from oauthbridge.api.serve import create_api_app

    return create_api_app(settings)


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


class TestAPIAppStructure:
    def test_openapi_json(self, client):
        resp = client.get("/api/v1/openapi.json")
        assert resp.status_code == 200
        data = resp.json()
        assert data["info"]["title"] == "oauthbridge"
        assert "/oauth/authorize" in data["paths"]
        assert "/oauth/callback" in data["paths"]
        assert "/oauth/token" in data["paths"]

    def test_docs_page(self, client):
        assert client.get("/api/v1/docs").status_code == 200

    def test_health_endpoint(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_cors_preflight(self, client):
        resp = client.options(
            "/oauth/token",
            headers={
                "Origin": "http://localhost:6274",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.headers["access-control-allow-origin"] == "http://localhost:6274"


# ---------------------------------------------------------------------------
# Bridge under a base path
# ---------------------------------------------------------------------------


@pytest.fixture
def stubbed(settings, monkeypatch):
    import oauthbridge.bridge.handler as mod

    provider = AsyncMock()
    provider.parse_auth_request.return_value = AuthRequest(client_id="abc", scope="read")
    identity = AsyncMock()
    identity.fetch_identity.side_effect = IdentityFetchError("GitHub /user returned 500", 500)

    def token_endpoint(request):
        return httpx.Response(200, json={"access_token": "T"})

    handler = GitHubHandler(
        BridgeConfig.from_settings(settings),
        provider,
        upstream=UpstreamOAuth(transport=httpx.MockTransport(token_endpoint)),
        identity=identity,
    )
    monkeypatch.setattr(mod, "_handler", handler)
    return provider


class TestBridgeRoutes:
    def test_callback_url_uses_base_path(self, client, stubbed):
        resp = client.get("/oauth/authorize?client_id=abc", follow_redirects=False)
        assert resp.status_code == 302
        assert "redirect_uri=http%3A%2F%2Ftestserver%2Foauth%2Fcallback" in resp.headers[
            "location"
        ]

    def test_identity_failure_maps_to_502(self, client, stubbed):
        state = encode_state(AuthRequest(client_id="abc", scope="read"))
        resp = client.get("/oauth/callback", params={"state": state, "code": "c"})
        assert resp.status_code == 502
        assert resp.text == "Failed to fetch user identity"
        stubbed.complete_authorization.assert_not_called()
