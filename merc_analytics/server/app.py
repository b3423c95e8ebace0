"""FastAPI application exposing the analytics endpoints."""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..api import ProviderSet
from ..assemblers import ENDPOINTS, Endpoint
from ..config import Config, default_config

logger = logging.getLogger(__name__)


def _route(path: str, endpoint: Endpoint):
    async def handler(request: Request) -> JSONResponse:
        state = request.app.state
        try:
            payload = await endpoint.assemble(state.providers, state.config)
        except Exception as e:
            logger.error(f"GET {path} failed: {e}", exc_info=True)
            return JSONResponse(endpoint.failure_payload(), status_code=500)
        return JSONResponse(payload)

    return handler


def create_router() -> APIRouter:
    router = APIRouter()

    for path, endpoint in ENDPOINTS.items():
        router.add_api_route(path, _route(path, endpoint), methods=["GET"], name=path.rsplit("/", 1)[-1])

    @router.get("/health")
    async def health():
        return {"status": "ok"}

    return router


def create_app(config: Config | None = None, providers: ProviderSet | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        config: Application configuration (defaults plus environment keys if omitted)
        providers: Pre-built provider clients; created from ``config`` on startup if omitted
    """
    config = config or default_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_providers = app.state.providers is None
        if owns_providers:
            app.state.providers = ProviderSet.from_config(config)
        logger.info(f"Serving {len(ENDPOINTS)} endpoints for {config.token.symbol}")
        yield
        if owns_providers:
            await app.state.providers.close()
            app.state.providers = None
            logger.info("Provider clients closed")

    app = FastAPI(
        title="MERC Analytics",
        description="Holder, transfer and liquidity analytics for the MERC token",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.providers = providers
    app.include_router(create_router())
    return app
