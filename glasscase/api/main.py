from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.responses import Response

from .. import __version__
from ..logging import configure_logging, request_id_middleware
from .routes import health, market, monitor


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORS handling whose preflight answers carry no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        resp = super().preflight_response(request_headers)
        headers = {
            k: v
            for k, v in resp.headers.items()
            if k.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=resp.status_code, headers=headers)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="GlassCase Market", version=__version__)

    app.add_middleware(
        EmptyPreflightCORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_id_middleware)

    app.include_router(health.router)
    app.include_router(market.router)
    app.include_router(monitor.router)

    return app


app = create_app()
