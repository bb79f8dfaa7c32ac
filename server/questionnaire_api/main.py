"""Questionnaire API - FastAPI application entry point."""
import logging
import sqlite3

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .database import DatabaseManager
from .middleware import TimingMiddleware
from .routes import questionnaire

log = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query"))
        msg = str(error.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = _validation_message(exc)
    log.warning(f"[API] Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


async def database_exception_handler(request: Request, exc: sqlite3.Error):
    log.error(f"[API] Database error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its own settings and database manager."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Daily Questionnaire API",
        description="Storage for completed daily crash questionnaires",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.db_manager = DatabaseManager(settings)

    app.add_middleware(TimingMiddleware)

    # Configure CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(sqlite3.Error, database_exception_handler)

    app.include_router(questionnaire.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for the API."""
        return {"status": "healthy", "service": "questionnaire-api"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "server.questionnaire_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
