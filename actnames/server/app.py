from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from actnames import __version__
from actnames.logging import configure_logging, get_logger
from actnames.server.routers.places import router as places_router
from actnames.server.routers.settings import router as settings_router
from actnames.server.runtime import Runtime
from actnames.sources.arcgis import ArcGISError

_logger = get_logger(__name__)


async def _arcgis_error_handler(request: Request, exc: ArcGISError) -> JSONResponse:
    _logger.warning("upstream query failed", error=str(exc))
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def create_app(runtime: Runtime | None = None) -> FastAPI:
    """Build the API around ``runtime``; one is created from config at startup when omitted."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.runtime is None:
            app.state.runtime = Runtime()
        configure_logging(app.state.runtime.config.log_level)
        yield
        app.state.runtime.clear_dataset()

    app = FastAPI(
        title="actnames",
        description="Search and explore ACT Government place names",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "PATCH"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ArcGISError, _arcgis_error_handler)

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        return await call_next(request)

    app.include_router(places_router)
    app.include_router(settings_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
