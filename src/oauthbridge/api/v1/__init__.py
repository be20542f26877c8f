# API v1 router aggregation.
# Created: 2026-10-17
#
# mount_v1_routers(app) registers the REST routers at /api/v1/ and the OAuth
# bridge routes under the configured base path.

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

# (module_path, attr_name, tag)
_V1_ROUTERS: list[tuple[str, str, str]] = [
    ("oauthbridge.api.v1.health", "router", "Health"),
    ("oauthbridge.api.v1.me", "router", "Identity"),
]


def mount_v1_routers(app: FastAPI, base_path: str = "") -> None:
    """Mount the bridge routes at *base_path* and REST routers at ``/api/v1``."""
    from oauthbridge.api.v1.oauth2 import router as oauth2_router

    app.include_router(oauth2_router, prefix=base_path.rstrip("/"))

    for module_path, attr_name, tag in _V1_ROUTERS:
        router = getattr(importlib.import_module(module_path), attr_name)
        app.include_router(router, prefix="/api/v1")
        logger.debug("Mounted v1 router: %s (%s)", module_path, tag)
