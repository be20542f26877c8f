# GitHub handler — wires both bridge phases to settings and the OAuth server.
# Created: 2026-10-17

from __future__ import annotations

from oauthbridge.bridge.authorize import AuthorizeInitiator
from oauthbridge.bridge.callback import CallbackCompleter
from oauthbridge.bridge.protocol import AuthorizationProvider, IdentityFetcher
from oauthbridge.config import BridgeConfig, Settings, get_settings
from oauthbridge.integrations.github import GitHubClient
from oauthbridge.integrations.oauth import UpstreamOAuth


class GitHubHandler:
    """The two bridge phases sharing one config, provider and upstream client."""

    def __init__(
        self,
        config: BridgeConfig,
        provider: AuthorizationProvider,
        upstream: UpstreamOAuth | None = None,
        identity: IdentityFetcher | None = None,
    ):
        upstream = upstream or UpstreamOAuth()
        self.initiator = AuthorizeInitiator(config, provider, upstream)
        self.completer = CallbackCompleter(config, provider, upstream, identity)

    @classmethod
    def from_settings(
        cls, settings: Settings, provider: AuthorizationProvider
    ) -> GitHubHandler:
        return cls(
            BridgeConfig.from_settings(settings),
            provider,
            upstream=UpstreamOAuth(timeout=settings.upstream_timeout),
            identity=GitHubClient(
                base_url=settings.upstream_api_url, timeout=settings.upstream_timeout
            ),
        )


# Singleton
_handler: GitHubHandler | None = None


def get_github_handler(settings: Settings | None = None) -> GitHubHandler:
    global _handler
    if _handler is None:
        from oauthbridge.api.oauth2.server import get_oauth_server

        settings = settings or get_settings()
        _handler = GitHubHandler.from_settings(settings, get_oauth_server(settings))
    return _handler


def reset_github_handler() -> None:
    global _handler
    _handler = None
