from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from app.api.errors.handlers import register_exception_handlers
from app.api.routes import auth as auth_router
from app.api.routes import health
from app.core.config import get_settings
from app.core.logging import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    app_settings = get_settings()
    configure_logging(app_settings)
    logger = get_logger(__name__)
    logger.info("startup.begin", extra={"event": "startup"})
    yield
    logger.info("shutdown.complete", extra={"event": "shutdown"})


def create_app() -> FastAPI:
    app_settings = get_settings()
    app = FastAPI(
        title="SessionGuard API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(health.router)
    app.include_router(auth_router.router, prefix="/api/v1/auth")
    app.mount("/metrics", make_asgi_app())
    return app


app = create_app()
