# Authorize Initiator — downstream /authorize → upstream authorize redirect.
# Created: 2026-10-17

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from oauthbridge.bridge.protocol import AuthorizationProvider, InvalidAuthRequest
from oauthbridge.bridge.state import encode_state
from oauthbridge.bridge.urls import callback_url_for
from oauthbridge.config import BridgeConfig
from oauthbridge.integrations.oauth import UpstreamOAuth

logger = logging.getLogger(__name__)


class AuthorizeInitiator:
    """Validates a downstream authorization request and sends the user upstream.

    The whole downstream request travels in the upstream ``state`` parameter;
    nothing is written server-side.
    """

    def __init__(
        self,
        config: BridgeConfig,
        provider: AuthorizationProvider,
        upstream: UpstreamOAuth | None = None,
    ):
        self.config = config
        self.provider = provider
        self.upstream = upstream or UpstreamOAuth()

    async def initiate(self, request: Request) -> Response:
        try:
            auth_request = await self.provider.parse_auth_request(request)
        except InvalidAuthRequest as e:
            logger.info("Rejected authorization request: %s", e)
            return PlainTextResponse("Invalid request", status_code=400)

        if not auth_request.client_id:
            logger.info("Rejected authorization request without client_id")
            return PlainTextResponse("Invalid request", status_code=400)

        url = self.upstream.get_authorize_url(
            upstream_url=self.config.authorize_url,
            client_id=self.config.client_id,
            redirect_uri=callback_url_for(request, self.config.callback_path),
            scope=self.config.scope,
            state=encode_state(auth_request, self.config.state_signing_key),
        )
        logger.info("Redirecting client %s to upstream login", auth_request.client_id)
        return RedirectResponse(url, status_code=302)
