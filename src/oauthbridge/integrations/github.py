# GitHub Client — fetches the authenticated user's identity.
# Created: 2026-10-17

from __future__ import annotations

import logging

import httpx

from oauthbridge.bridge.protocol import Identity, IdentityFetchError

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"


class GitHubClient:
    """HTTP client for the GitHub REST API ``/user`` endpoint."""

    def __init__(
        self,
        base_url: str = _GITHUB_API,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch_identity(self, access_token: str) -> Identity:
        """Get login, name and email for the token's user.

        Raises IdentityFetchError on transport failure, a non-2xx response,
        or a body without a login.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(
                    f"{self._base_url}/user",
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/vnd.github+json",
                        "X-GitHub-Api-Version": "2022-11-28",
                    },
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise IdentityFetchError(
                f"GitHub /user returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise IdentityFetchError(f"GitHub /user request failed: {e}") from e
        except ValueError as e:
            raise IdentityFetchError("GitHub /user returned invalid JSON") from e

        login = data.get("login") if isinstance(data, dict) else None
        if not isinstance(login, str) or not login:
            raise IdentityFetchError("GitHub /user response has no login")

        logger.debug("Fetched GitHub identity for %s", login)
        return Identity(login=login, name=data.get("name"), email=data.get("email"))
