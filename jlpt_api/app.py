"""Main FastAPI application with modularized routes."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from jlpt_api.config import CORS_ORIGINS, LOG_LEVEL
from jlpt_api.database import init_db
from jlpt_api.errors import InvalidInputError, TrainerError
from jlpt_api.logging_setup import setup_console_logging
from jlpt_api.routes import admin, catalog, sessions

setup_console_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="JLPT N2 Trainer API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, kind: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "kind": kind})


# Error handlers
@app.exception_handler(TrainerError)
def handle_trainer_error(request: Request, exc: TrainerError) -> JSONResponse:
    """Render service errors as {error, kind}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.kind)


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are plain invalid input for our clients."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = InvalidInputError.default_message
    return error_response(400, message, InvalidInputError.kind)


@app.exception_handler(SQLAlchemyError)
def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected store failures."""
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(500, "Internal server error", "internal")


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and seed question types on startup."""
    init_db()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Include routers
app.include_router(catalog.router)
app.include_router(admin.router)
app.include_router(sessions.router)
