import logging
import os
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, text
from starlette.exceptions import HTTPException as StarletteHTTPException

from fantasy12.config import ALLOWED_ORIGINS, APP_ENV, DATABASE_URL, IS_PRODUCTION, LOG_FILE
from fantasy12.database import create_db_and_tables, get_session
from fantasy12.exceptions import ApiError, RateLimited
from fantasy12.rate_limit import RateLimiter, client_identity
from fantasy12.routers import auth, logs, payments, pools, rankings, rounds, store, tickets, users
from fantasy12.utils.logging import setup_logger

API_VERSION = "1.0.0"

logger = logging.getLogger("fantasy12.app")
http_logger = logging.getLogger("fantasy12.http")

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Fantasy12 API ({APP_ENV})")
    create_db_and_tables()
    logger.info(f"Database ready: {DATABASE_URL.split('@')[-1]}")
    yield
    logger.info("Shutting down")


def error_response(status_code: int, message: str, headers: dict = None, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RateLimited)
    async def rate_limited_handler(request: Request, exc: RateLimited):
        return error_response(
            exc.status_code, exc.message, headers=exc.headers, retry_after=exc.retry_after
        )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(
            exc.status_code, exc.message, headers=getattr(request.state, "rate_limit_headers", None)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
        else:
            message = "Invalid request"
        return error_response(400, message)

    @app.exception_handler(IntegrityError)
    async def integrity_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return error_response(409, "Resource already exists")

    @app.exception_handler(SQLAlchemyError)
    async def database_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return internal_error(exc)

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return internal_error(exc)


def internal_error(exc: Exception) -> JSONResponse:
    if IS_PRODUCTION:
        return error_response(500, "Internal server error")
    return error_response(
        500,
        "Internal server error",
        detail=str(exc),
        stack="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )


def create_app(rate_limiter: RateLimiter = None) -> FastAPI:
    setup_logger("fantasy12", LOG_FILE)

    app = FastAPI(title="Fantasy12 API", version=API_VERSION, lifespan=lifespan)
    app.state.rate_limiter = rate_limiter or RateLimiter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        """Tag the request with an id, apply the general rate limit and log it."""
        request_id = uuid.uuid4().hex[:12]
        started = time.perf_counter()

        decision = app.state.rate_limiter.allow(client_identity(request), "general")
        if decision.allowed:
            response = await call_next(request)
            for name, value in decision.headers().items():
                response.headers.setdefault(name, value)
        else:
            response = error_response(
                429,
                app.state.rate_limiter.rules["general"].message,
                headers=decision.headers(),
                retry_after=decision.retry_after,
            )

        response.headers["X-Request-Id"] = request_id
        duration_ms = (time.perf_counter() - started) * 1000
        level = logging.INFO
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        http_logger.log(
            level,
            f"{request.method} {request.url.path} {response.status_code} - {duration_ms:.0f}ms",
            extra={"request_id": request_id},
        )
        return response

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(rounds.router)
    app.include_router(tickets.router)
    app.include_router(rankings.router)
    app.include_router(pools.router)
    app.include_router(logs.router)
    app.include_router(payments.router)
    app.include_router(store.router)

    @app.get("/")
    def api_info():
        return {
            "name": "Fantasy12 API",
            "version": API_VERSION,
            "environment": APP_ENV,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "auth": "/auth",
                "users": "/users",
                "rounds": "/rounds",
                "tickets": "/tickets",
                "rankings": "/rankings",
                "pools": "/pools",
                "logs": "/logs",
                "payments": "/payments",
                "store": "/store",
            },
        }

    @app.get("/health")
    def health(session: Session = Depends(get_session)):
        """API and database status."""
        started = time.perf_counter()
        try:
            session.connection().execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.error("Health check failed", exc_info=True)
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "api": "ok",
                    "database": "error",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )
        return {
            "status": "healthy",
            "api": "ok",
            "database": "ok",
            "db_latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "uptime_seconds": round(time.monotonic() - STARTED_AT, 1),
            "environment": APP_ENV,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
