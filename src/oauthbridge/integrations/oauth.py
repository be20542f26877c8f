# Upstream OAuth — authorize URL building + authorization code exchange.
# Created: 2026-10-17
#
# The bridge is a confidential client of the upstream provider: it builds the
# browser redirect and swaps the returned code for an access token server-side.

from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


@dataclass
class UpstreamError:
    """An upstream failure to be handed back to the browser unchanged."""

    status_code: int
    body: bytes
    content_type: str = "text/plain; charset=utf-8"


class UpstreamOAuth:
    """OAuth 2.0 authorization code client for the upstream provider."""

    def __init__(
        self,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._transport = transport

    def get_authorize_url(
        self,
        upstream_url: str,
        client_id: str,
        redirect_uri: str,
        scope: str,
        state: str,
    ) -> str:
        """Generate the upstream authorization URL.

        Args:
            upstream_url: Upstream authorize endpoint.
            client_id: This bridge's upstream client ID.
            redirect_uri: The bridge's own callback URL.
            scope: Space-delimited scopes to request.
            state: Opaque round-trip state token.

        Returns:
            URL to redirect the user to.
        """
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "scope": scope,
            "state": state,
        }
        sep = "&" if urllib.parse.urlsplit(upstream_url).query else "?"
        return f"{upstream_url}{sep}{urllib.parse.urlencode(params)}"

    async def fetch_token(
        self,
        upstream_url: str,
        client_id: str,
        client_secret: str,
        code: str | None,
        redirect_uri: str,
    ) -> tuple[str | None, UpstreamError | None]:
        """Exchange an authorization code for an upstream access token.

        ``redirect_uri`` must be identical to the one sent on the authorize
        redirect, or the upstream will refuse the exchange.

        Returns (access_token, error). If error is not None, access_token is None.
        """
        if not code:
            return None, UpstreamError(400, b"Missing code")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    upstream_url,
                    data={
                        "client_id": client_id,
                        "client_secret": client_secret,
                        "code": code,
                        "redirect_uri": redirect_uri,
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.warning("Upstream token exchange failed: %s", e)
            return None, UpstreamError(502, b"Failed to fetch access token")

        content_type = resp.headers.get("content-type", "text/plain; charset=utf-8")
        if resp.is_error:
            logger.info("Upstream token endpoint returned %d", resp.status_code)
            return None, UpstreamError(resp.status_code, resp.content, content_type)

        data = _parse_token_body(resp)
        if data.get("error"):
            # GitHub reports bad codes as 200 + {"error": ...}
            logger.info("Upstream token endpoint rejected code: %s", data["error"])
            return None, UpstreamError(400, resp.content, content_type)

        access_token = data.get("access_token")
        if not access_token:
            return None, UpstreamError(400, b"Missing access token")

        return str(access_token), None


def _parse_token_body(resp: httpx.Response) -> dict:
    """Parse a token response that may be JSON or form-encoded."""
    if "json" in resp.headers.get("content-type", ""):
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    return dict(urllib.parse.parse_qsl(resp.text))
