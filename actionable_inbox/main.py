from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.errors import ServiceError
from .core.logging import setup_logging
from .core.middleware import BodySizeLimitMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware
from .db.session import Database

logger = logging.getLogger(__name__)

PROCESS_STARTED = time.monotonic()

INTERNAL_ERROR = {"error": "Internal server error"}


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _format_validation_errors(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Nothing in the API raises a 404 itself, so this is an unmatched route.
        message = "Route not found" if exc.status_code == 404 else exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # The one database handle for this process; released on shutdown
        # (uvicorn turns SIGINT/SIGTERM into a lifespan shutdown).
        db = Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        db.create_all()
        app.state.db = db
        logger.info("%s ready", settings.PROJECT_NAME)
        try:
            yield
        finally:
            logger.info("Shutting down gracefully...")
            db.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Task management API ordering work by what needs attention first",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    # Last added runs first: security headers wrap everything, then
    # compression, the rate limiter, the body cap and finally CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.RATE_LIMIT_MAX,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health")
    def health_check():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - PROCESS_STARTED,
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    setup_logging(level=default_settings.LOG_LEVEL, log_file=default_settings.LOG_FILE)
    logger.info("API server running on http://localhost:%s", default_settings.PORT)
    logger.info("Health check available at http://localhost:%s/health", default_settings.PORT)
    # log_config=None keeps uvicorn's loggers on the handlers configured above.
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
