from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError

from catalys.config import settings
from catalys.db.base import engine, init_db
from catalys.routers import (
    co_founders,
    invitations,
    onboarding,
    startups,
    user_profiles,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Catalys API", default_response_class=ORJSONResponse, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProgrammingError)
    async def schema_mismatch_handler(request: Request, exc: ProgrammingError) -> ORJSONResponse:
        logger.error("Database schema mismatch", extra={"path": request.url.path}, exc_info=exc)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database schema is out of date. Run migrations and retry."},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.error("Unhandled error", extra={"path": request.url.path}, exc_info=exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error."},
        )

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/health/db")
    def health_db() -> dict[str, str]:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return {"db": "ok"}
        except Exception as exc:  # pragma: no cover - simple runtime check
            return {"db": f"error: {exc}"}

    app.include_router(startups.router)
    app.include_router(co_founders.router)
    app.include_router(user_profiles.router)
    app.include_router(onboarding.router)
    app.include_router(invitations.router)

    return app


app = create_app()
