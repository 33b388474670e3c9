"""FastAPI application factory for the listings API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from estate360.config import Settings
from estate360.db import PropertyRepository
from estate360.exceptions import InvalidInputError, StorageUnavailableError
from estate360.logging import configure_logging, get_logger

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses, and no-store to JSON ones."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
        return response


async def _invalid_input_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("invalid_input", path=request.url.path, error=str(exc))
    return JSONResponse({"error": str(exc)}, status_code=400)


async def _storage_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("storage_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse({"error": "Storage unavailable", "detail": str(exc)}, status_code=503)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings. Loaded from env if not provided.
    """
    if settings is None:
        settings = Settings()

    configure_logging(
        json_output=settings.json_logs,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )

    uploads = settings.build_upload_manager()
    repository = PropertyRepository(settings.build_store(), uploads)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.repository = repository
        app.state.settings = settings
        logger.info(
            "web_server_started",
            storage_backend=settings.storage_backend,
            uploads_dir=settings.uploads_dir,
        )

        yield

        await repository.close()
        logger.info("web_server_stopped")

    app = FastAPI(title="Estate360", lifespan=lifespan)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_exception_handler(InvalidInputError, _invalid_input_handler)
    app.add_exception_handler(StorageUnavailableError, _storage_unavailable_handler)

    # Serve uploaded media; the directory must exist before StaticFiles checks it
    uploads_dir = Path(settings.uploads_dir)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.get_url_prefix(), StaticFiles(directory=uploads_dir), name="uploads")

    from estate360.web.routes import router

    app.include_router(router)

    return app
