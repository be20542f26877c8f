"""Server for ``oauthbridge``.

Builds the FastAPI application: OAuth bridge routes under the configured base
path, the ``/api/v1/`` REST routers, CORS, and the error mapping for upstream
identity failures.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from oauthbridge import __version__
from oauthbridge.bridge.protocol import IdentityFetchError
from oauthbridge.config import Settings, get_settings

logger = logging.getLogger(__name__)


async def _identity_error_handler(request: Request, exc: IdentityFetchError):
    logger.warning("Identity fetch failed: %s", exc)
    return PlainTextResponse("Failed to fetch user identity", status_code=502)


def create_api_app(settings: Settings | None = None) -> FastAPI:
    """Build the bridge FastAPI application."""
    from oauthbridge.api.oauth2.server import reset_oauth_server
    from oauthbridge.api.v1 import mount_v1_routers
    from oauthbridge.bridge.handler import get_github_handler, reset_github_handler

    settings = settings or get_settings()

    # Rebuild the provider + bridge from these settings
    reset_oauth_server()
    reset_github_handler()
    get_github_handler(settings)

    app = FastAPI(
        title="oauthbridge",
        description="OAuth authorization-code bridge backed by GitHub login.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    # --- CORS -----------------------------------------------------------
    if settings.api_cors_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api_cors_allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.add_exception_handler(IdentityFetchError, _identity_error_handler)

    mount_v1_routers(app, base_path=settings.bridge_base_path)

    if not settings.github_client_id or not settings.github_client_secret:
        logger.warning(
            "GitHub OAuth app not configured. Set OAUTHBRIDGE_GITHUB_CLIENT_ID "
            "and OAUTHBRIDGE_GITHUB_CLIENT_SECRET."
        )

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = 8787,
    dev: bool = False,
) -> None:
    """Start the bridge server."""
    import uvicorn

    logger.info("oauthbridge listening on http://%s:%d", host, port)

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "oauthbridge.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_api_app()
        uvicorn.run(app, host=host, port=port)
