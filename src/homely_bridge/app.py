"""Liveness application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from homely_bridge.version import __version__ as HOMELY_BRIDGE_VERSION

logger = logging.getLogger(__name__)

ALIVE_BODY = "I'm alive!"


def create_app() -> FastAPI:
    """Create the FastAPI app that answers orchestration health checks.

    The health route has no dependency on the event pipeline, so it answers
    before authentication has completed and while the stream is connected.
    """
    app = FastAPI(
        title="homely-bridge",
        description="Liveness endpoint for the Homely event bridge",
        version=HOMELY_BRIDGE_VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route(
        "/healthz",
        methods=["GET", "HEAD"],
        response_class=PlainTextResponse,
        summary="Liveness",
        description="Always 200 while the process is running.",
    )
    def healthz() -> str:
        logger.debug("liveness check answered")
        return ALIVE_BODY

    return app
