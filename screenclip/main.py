"""ScreenClip backend - FastAPI application."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from screenclip.api.router import api_router
from screenclip.config import Settings
from screenclip.errors import ScreenClipError
from screenclip.services import Services, build_services

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. Pass ``services`` to skip wiring from the environment."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app_settings = settings or Settings()
            configure_logging(app_settings.log_level)
            logger.info("Starting ScreenClip backend on port %s", app_settings.port)
            logger.info("Storage backend: %s", app_settings.storage_backend)
            logger.info("Email provider: %s", app_settings.email_provider)
            app.state.services = build_services(app_settings)

        problems = app.state.services.notification_config_errors()
        if problems:
            logger.warning("Notifications disabled until fixed: %s", "; ".join(problems))

        yield

        logger.info("Shutting down ScreenClip backend")

    app = FastAPI(
        title="ScreenClip",
        description="Screen recording upload, sharing and notification service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app_settings = services.settings if services else settings or Settings()
    origins = app_settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ScreenClipError)
    async def screenclip_error_handler(request: Request, exc: ScreenClipError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {fields}"})

    app.include_router(api_router)

    if app_settings.storage_backend == "local":
        # Stands in for the bucket's public object URLs during local development.
        files_path = urlparse(app_settings.local_public_base_url).path.rstrip("/") or "/files"
        os.makedirs(app_settings.local_storage_dir, exist_ok=True)
        app.mount(files_path, StaticFiles(directory=app_settings.local_storage_dir), name="files")

    return app


app = create_app()
