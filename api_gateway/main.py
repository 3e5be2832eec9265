"""API Gateway FastAPI entrypoint."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.utils.env import load_env

# ensure .env is loaded for uvicorn direct run
load_env()

from common.utils.config import get_settings  # noqa: E402

from .deps import get_ingestion  # noqa: E402
from .routers import admin, diagnostics, webhook  # noqa: E402
from .schemas import utc_timestamp  # noqa: E402

SERVICE_NAME = "TeamTailor Social Agent"
SERVICE_VERSION = "0.1.0"

logger = logging.getLogger("api_gateway")
settings = get_settings()


def _load_allowed_origins() -> tuple[list[str], bool, str | None]:
    """Read allowed origins for the admin portal; default to open."""

    raw = os.getenv("ADMIN_PORTAL_ORIGINS", "")
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    if not origins:
        return ["*"], False, ".*"
    return origins, True, None


def _configure_logging() -> None:
    """stdout by default, optional rotating file."""

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)
    if settings.log_file_path:
        Path(settings.log_file_path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            settings.log_file_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        if not any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers):
            root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())


_configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s started (env=%s)", SERVICE_NAME, settings.app_env)
    yield
    if get_ingestion.cache_info().currsize:
        await get_ingestion().announcer.generator.aclose()
    logger.info("%s stopped", SERVICE_NAME)


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)
allow_origins, allow_credentials, allow_origin_regex = _load_allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=allow_origin_regex,
)

app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
app.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
if settings.is_development:
    app.include_router(diagnostics.router, prefix="/v1/test", tags=["diagnostics"])


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.is_development else "Internal server error"
    return JSONResponse(status_code=500, content={"error": message, "timestamp": utc_timestamp()})


@app.get("/")
async def root() -> dict:
    return {"message": SERVICE_NAME, "status": "running", "timestamp": utc_timestamp()}


@app.get("/healthz")
async def health_check() -> dict:
    """Liveness probe."""

    return {
        "status": "ok",
        "version": SERVICE_VERSION,
        "environment": settings.app_env,
        "timestamp": utc_timestamp(),
    }
