# Callback Completer — upstream /callback → downstream grant → client redirect.
# Created: 2026-10-17
#
# Each callback is one linear attempt:
#   START → STATE_DECODED → TOKEN_EXCHANGED → IDENTITY_FETCHED
#         → GRANT_COMPLETED → REDIRECTED
# Any failure ends in FAILED. Nothing is retried, and callbacks that share a
# state token are not deduplicated here; the Authorization Provider owns that.

from __future__ import annotations

import logging
from enum import Enum

from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from oauthbridge.bridge.protocol import (
    AuthorizationProvider,
    IdentityFetcher,
    InvalidStateError,
)
from oauthbridge.bridge.state import decode_state
from oauthbridge.bridge.urls import callback_url_for
from oauthbridge.config import BridgeConfig
from oauthbridge.integrations.github import GitHubClient
from oauthbridge.integrations.oauth import UpstreamOAuth

logger = logging.getLogger(__name__)


class CallbackStage(str, Enum):
    """Progress of a single callback request."""

    START = "start"
    STATE_DECODED = "state_decoded"
    TOKEN_EXCHANGED = "token_exchanged"
    IDENTITY_FETCHED = "identity_fetched"
    GRANT_COMPLETED = "grant_completed"
    REDIRECTED = "redirected"
    FAILED = "failed"


class CallbackCompleter:
    """Finishes the upstream round trip and completes the downstream grant."""

    def __init__(
        self,
        config: BridgeConfig,
        provider: AuthorizationProvider,
        upstream: UpstreamOAuth | None = None,
        identity: IdentityFetcher | None = None,
    ):
        self.config = config
        self.provider = provider
        self.upstream = upstream or UpstreamOAuth()
        self.identity = identity or GitHubClient()

    async def complete(self, request: Request) -> Response:
        stage = CallbackStage.START
        try:
            try:
                auth_request = decode_state(
                    request.query_params.get("state"), self.config.state_signing_key
                )
            except InvalidStateError as e:
                logger.info("Rejected callback: %s", e)
                return self._failed(stage, PlainTextResponse("Invalid state", status_code=400))
            stage = CallbackStage.STATE_DECODED

            access_token, error = await self.upstream.fetch_token(
                upstream_url=self.config.token_url,
                client_id=self.config.client_id,
                client_secret=self.config.client_secret,
                code=request.query_params.get("code"),
                redirect_uri=callback_url_for(request, self.config.callback_path),
            )
            if error is not None:
                return self._failed(
                    stage,
                    Response(
                        content=error.body,
                        status_code=error.status_code,
                        media_type=error.content_type,
                    ),
                )
            stage = CallbackStage.TOKEN_EXCHANGED

            user = await self.identity.fetch_identity(access_token)
            stage = CallbackStage.IDENTITY_FETCHED

            completion = await self.provider.complete_authorization(
                request=auth_request,
                user_id=user.login,
                metadata={"label": user.name},
                scope=auth_request.scope,
                props={
                    "login": user.login,
                    "name": user.name,
                    "email": user.email,
                    "access_token": access_token,
                },
            )
            stage = CallbackStage.GRANT_COMPLETED
        except Exception:
            logger.warning("OAuth callback failed at stage %s", stage.value)
            raise

        logger.info(
            "Completed authorization for %s (client %s)", user.login, auth_request.client_id
        )
        return RedirectResponse(completion.redirect_to, status_code=302)

    @staticmethod
    def _failed(stage: CallbackStage, response: Response) -> Response:
        logger.debug(
            "Callback %s after stage %s (HTTP %d)",
            CallbackStage.FAILED.value,
            stage.value,
            response.status_code,
        )
        return response
