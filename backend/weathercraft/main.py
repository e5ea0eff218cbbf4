"""
Weathercraft Reports - FastAPI application.
CORS, API versioning (/api/v1), health check, error handling, uploaded photos.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest

from weathercraft import __version__
from weathercraft.api.v1.routes import api_router
from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import WeathercraftError
from weathercraft.services.upload_storage import UPLOADS_URL_PREFIX

# Ensure app logs (including request logs) appear in deploy logs
_log_handler = logging.StreamHandler(sys.stdout)
_log_handler.setLevel(logging.INFO)
_log_handler.setFormatter(logging.Formatter("%(levelname)s:     %(name)s: %(message)s"))
_root_logger = logging.getLogger("weathercraft")
_root_logger.setLevel(logging.INFO)
if not _root_logger.handlers:
    _root_logger.addHandler(_log_handler)

logger = logging.getLogger(__name__)

# Load settings once at import so CORS list is available to middleware
_settings = get_settings()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request (method + path + status)."""

    async def dispatch(self, request: StarletteRequest, call_next: Callable) -> Response:
        response = await call_next(request)
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    logger.info("Starting Weathercraft Reports API (%s)", _settings.ENVIRONMENT)
    if _settings.ENVIRONMENT == "production":
        _settings.validate_for_production()
    logger.info("Storage backend: %s", _settings.STORAGE_BACKEND)
    logger.info("CORS_ORIGINS=%s", _settings.cors_origins)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Weathercraft Reports API",
    version=__version__,
    description="Community weather reports with Minecraft account verification.",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WeathercraftError)
async def weathercraft_error_handler(request: Request, exc: WeathercraftError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=400, content={"error": "validation_error", "message": message})


# Error handling middleware
@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Internal server error"},
        )


@app.get("/")
def root():
    return {
        "message": "Weathercraft Reports API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/v1/auth",
            "verify": "/api/v1/verify",
            "reports": "/api/v1/reports",
            "uploads": UPLOADS_URL_PREFIX,
        },
    }


@app.get("/health")
def health():
    return {"status": "healthy"}


app.include_router(api_router, prefix="/api/v1")

os.makedirs(_settings.UPLOADS_DIR, exist_ok=True)
app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=_settings.UPLOADS_DIR), name="uploads")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "3000"))
    uvicorn.run("weathercraft.main:app", host="0.0.0.0", port=port)
