# Bridge protocol — data types and collaborator interfaces for the bridge.
# Created: 2026-10-17
#
# The bridge only talks to the Authorization Provider and the upstream identity
# API through the protocols below, so either can be swapped or stubbed.

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Protocol

from starlette.requests import Request


class InvalidAuthRequest(ValueError):
    """Raised by an Authorization Provider for a malformed downstream request."""


class InvalidStateError(ValueError):
    """Raised when a round-trip state token cannot be decoded."""


class IdentityFetchError(RuntimeError):
    """Raised when the upstream identity endpoint fails or returns junk."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class AuthRequest:
    """Downstream client's pending authorization request."""

    client_id: str
    redirect_uri: str = ""
    scope: str = ""  # space-delimited
    state: str = ""  # the downstream client's own state, echoed back on completion
    response_type: str = "code"
    code_challenge: str = ""
    code_challenge_method: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthRequest:
        """Build from a decoded mapping. Unknown keys are ignored.

        Raises ValueError if a known field is not a string.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for key, value in values.items():
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string")
        if "client_id" not in values:
            raise ValueError("client_id is required")
        return cls(**values)


@dataclass
class Identity:
    """Upstream-asserted user identity. ``login`` is the stable handle."""

    login: str
    name: str | None = None
    email: str | None = None


@dataclass
class Completion:
    """Result of completing a downstream authorization."""

    redirect_to: str


class AuthorizationProvider(Protocol):
    """Owns pending-request parsing and downstream grant issuance."""

    async def parse_auth_request(self, request: Request) -> AuthRequest:
        """Parse a downstream authorization request.

        Raises InvalidAuthRequest on bad input.
        """
        ...

    async def complete_authorization(
        self,
        *,
        request: AuthRequest,
        user_id: str,
        metadata: dict[str, Any],
        scope: str,
        props: dict[str, Any],
    ) -> Completion:
        """Issue the downstream grant and return where to send the client."""
        ...


class IdentityFetcher(Protocol):
    """Fetches the authenticated user's identity from the upstream API."""

    async def fetch_identity(self, access_token: str) -> Identity: ...
