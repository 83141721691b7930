"""corsgate FastAPI application factory.

This module implements:
  - create_app() — testable application factory; the CORS policy is parsed
                   here, once, and shared by reference with the filter
  - lifespan     — startup/shutdown logging and app.state.ready
  - /health      — liveness probe (subject to the CORS filter like any route)
  - app = create_app() — module-level instance for uvicorn

Downstream applications add their own routers to the returned app; every
route sits behind CORSFilterMiddleware.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from corsgate.config import Config, load_config
from corsgate.filter.middleware import CORSFilterMiddleware
from corsgate.policy.engine import PolicyEngine
from corsgate.utils.logger import configure_logging, get_logger, level_name

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = level_name(os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG"))
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health(request: Request) -> JSONResponse:
    """Liveness probe; 503 until the lifespan has marked the app ready."""
    ready = getattr(request.app.state, "ready", False)
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ok" if ready else "starting"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "corsgate starting up",
        allow_any_origin=app.state.policy.allow_any_origin,
        allow_generic_http_requests=app.state.policy.allow_generic_http_requests,
    )
    app.state.ready = True

    yield

    app.state.ready = False
    logger.info("corsgate shutdown complete")


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create the corsgate FastAPI application.

    Args:
        config: Loaded configuration. ``load_config()`` is called when omitted.

    Returns:
        FastAPI application with the CORS filter installed in front of all routes.

    Raises:
        SystemExit(1): On an invalid config file or CORS policy.
    """
    if config is None:
        config = load_config()

    policy = config.policy()
    engine = PolicyEngine(policy)

    application = FastAPI(
        title="corsgate",
        description="CORS policy enforcement filter",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    application.state.ready = False
    application.state.config = config
    application.state.policy = policy

    application.add_middleware(CORSFilterMiddleware, engine=engine)

    application.include_router(health_router)

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────
#   uvicorn corsgate.main:app --host 127.0.0.1 --port 8080

app = create_app()
