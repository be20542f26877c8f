"""Round-trip state tokens.

The downstream client's authorization request is carried through the upstream
redirect inside the OAuth ``state`` parameter, so no server-side session store
is needed between ``/authorize`` and ``/callback``.

Token format: ``{payload}`` or, when a signing key is set, ``{payload}.{hex_hmac}``

``payload`` is unpadded URL-safe base64 of the request's compact JSON. Neither
the base64url alphabet nor ``.`` needs escaping inside a query parameter.

Unsigned tokens are not integrity protected: anyone who sees the redirect can
rewrite them. Configure ``state_signing_key`` to reject tampered tokens.
"""

import base64
import binascii
import hashlib
import hmac
import json

from oauthbridge.bridge.protocol import AuthRequest, InvalidStateError

__all__ = ["encode_state", "decode_state"]

# Upper bound on an incoming token; real requests encode to well under 1 KiB.
MAX_STATE_LENGTH = 8192


def encode_state(auth_request: AuthRequest, signing_key: str = "") -> str:
    """Encode *auth_request* as an opaque, URL-safe state token."""
    raw = json.dumps(auth_request.to_dict(), separators=(",", ":"), sort_keys=True)
    payload = base64.urlsafe_b64encode(raw.encode()).rstrip(b"=").decode()
    if signing_key:
        return f"{payload}.{_sign(signing_key, payload)}"
    return payload


def decode_state(token: str | None, signing_key: str = "") -> AuthRequest:
    """Decode a state token back into the original request.

    Raises InvalidStateError if the token is missing, tampered with,
    undecodable, or does not describe a request with a client id.
    """
    if not token:
        raise InvalidStateError("missing state")
    if len(token) > MAX_STATE_LENGTH:
        raise InvalidStateError("state too large")

    payload = token
    if signing_key:
        payload, _, sig = token.partition(".")
        if not sig or not hmac.compare_digest(sig, _sign(signing_key, payload)):
            raise InvalidStateError("bad state signature")

    try:
        raw = base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4))
        data = json.loads(raw)
    except (binascii.Error, ValueError, RecursionError) as exc:
        raise InvalidStateError("undecodable state") from exc

    if not isinstance(data, dict):
        raise InvalidStateError("state is not an object")

    try:
        auth_request = AuthRequest.from_dict(data)
    except ValueError as exc:
        raise InvalidStateError(str(exc)) from exc

    if not auth_request.client_id:
        raise InvalidStateError("state has no client_id")
    return auth_request


def _sign(key: str, message: str) -> str:
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()
