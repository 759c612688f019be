"""FastAPI application entry point for the Survey Taker service.

This module initializes the FastAPI application, sets up logging,
registers routers, and handles global exception handling.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from survey_app.config import get_settings
from survey_app.logging_config import setup_logging, get_logger
from survey_app.routes import health, responses, surveys

logger = get_logger(__name__)

SERVICE_NAME = "Survey Taker"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging on startup and logs shutdown.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    settings = get_settings()
    setup_logging()

    logger.info(
        f"{SERVICE_NAME} starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"API prefix: {settings.api_prefix}, "
        f"CORS origins: {settings.get_allowed_origins_list()}"
    )

    yield

    logger.info(f"{SERVICE_NAME} shutting down")


settings = get_settings()

app = FastAPI(
    title=SERVICE_NAME,
    description="Survey document validation and survey response API",
    version=VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict:
    """Root endpoint with basic API information.

    Returns:
        dict: API information and status
    """
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "environment": get_settings().environment,
        "status": "operational"
    }


app.include_router(health.router, tags=["Health"])
app.include_router(surveys.router, tags=["Surveys"])
app.include_router(responses.router, prefix=settings.api_prefix, tags=["Survey Responses"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors in the API's ``success``/``error`` envelope."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions.

    Logs all unhandled exceptions. Outside production the message is
    returned to ease debugging.

    Args:
        request: FastAPI request object
        exc: Exception that was raised

    Returns:
        JSONResponse: Error response
    """
    logger.error(
        f"Unhandled exception for {request.method} {request.url}: {exc}",
        exc_info=True
    )

    message = "Internal server error" if get_settings().is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": message}
    )
