# app/main.py
from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Logging unificado (JSON/UTC, mask de segredos, correlation id)
from app.common.logging_setup import get_logger, setup_logging

# Middleware de correlação (garante X-Request-Id de entrada/saída)
from app.common.middlewares import CorrelationIdMiddleware
from app.routers.shopify_tracking import router as shopify_tracking_router


# -----------------------------------------------------------------------------
# Inicialização de logging
# -----------------------------------------------------------------------------
def _init_logging() -> None:
    # Lê envs: LOG_LEVEL, LOG_JSON, LOG_FILE, LOG_MASK_SECRETS, APP_NAME, APP_VERSION, APP_ENV
    setup_logging()

    logger = get_logger(__name__)
    logger.info(
        "app_startup",
        extra={"app": os.getenv("APP_NAME", "tracking-sync"), "version": os.getenv("APP_VERSION", "0.1.0")},
    )


# -----------------------------------------------------------------------------
# Criação do app
# -----------------------------------------------------------------------------
def create_app() -> FastAPI:
    _init_logging()

    app = FastAPI(title="Tracking Sync")

    app.add_middleware(CorrelationIdMiddleware)

    # CORS — em produção, restrinja as origens
    cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(shopify_tracking_router)

    @app.get("/health", tags=["Health"])
    def health() -> dict[str, bool]:
        return {"ok": True}

    return app


# Instância utilizada pelo servidor (uvicorn/gunicorn)
app = create_app()
