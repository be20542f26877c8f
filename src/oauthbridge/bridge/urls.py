# Shared URL helpers for the bridge phases.
# Created: 2026-10-17

from __future__ import annotations

from starlette.requests import Request


def callback_url_for(request: Request, callback_path: str) -> str:
    """Absolute callback URL on the origin that served *request*.

    Built from the request's own scheme and host, never from query input,
    so the authorize redirect and the token exchange always agree.
    """
    return str(request.url.replace(path=callback_path, query="", fragment=""))
