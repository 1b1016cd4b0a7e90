import logging
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from apps.dashboard.router import router as dashboard_router
from apps.extraction.extractor import RegexFieldExtractor
from apps.invoices.router import router as invoices_router
from apps.orders.router import router as orders_router
from apps.storage.service import DocumentStorage
from common.exceptions import PersistenceError, StorageError
from common.responses import error_response
from models.base import create_tables, make_engine, make_session_factory
from settings.config import Settings, get_settings
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _default_limit(settings: Settings) -> str:
    # Build a default limit string from settings, using common time units
    req = settings.RATE_LIMIT_REQUESTS
    win = settings.RATE_LIMIT_WINDOW_SECONDS
    if win == 1:
        return f"{req}/second"
    if win == 60:
        return f"{req}/minute"
    if win == 3600:
        return f"{req}/hour"
    if win == 86400:
        return f"{req}/day"
    # Fallback: human-friendly seconds window
    return f"{req} per {win} seconds"


def create_app(settings: Optional[Settings] = None, s3_client=None) -> FastAPI:
    """
    Application factory to build a FastAPI app with all middlewares and routers.
    The database engine and session factory are created here and kept on
    `app.state`; every request-scoped service is built from them.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version="1.0.0",
    )

    engine = make_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.document_storage = DocumentStorage(settings, client=s3_client)
    app.state.field_extractor = RegexFieldExtractor()

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # Security headers middleware (helmet-like)
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains; preload"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        return response

    # Optional SlowAPI rate limiter
    if settings.ENABLE_RATE_LIMITER:
        limiter = Limiter(
            key_func=get_remote_address,
            default_limits=[_default_limit(settings)],
            storage_uri=settings.RATE_LIMIT_STORAGE_URI or None,
        )
        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
        app.add_middleware(SlowAPIMiddleware)

    # Reads propagate store failures; writes already fold them into ServiceResult
    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_response(exc.message),
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        code = status.HTTP_400_BAD_REQUEST if exc.rejected else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(status_code=code, content=error_response(exc.message))

    # Routers
    app.include_router(orders_router)
    app.include_router(invoices_router)
    app.include_router(dashboard_router)

    # Ensure tables exist (for local/dev). In prod, use Alembic migrations.
    @app.on_event("startup")
    async def on_startup():
        if settings.DB_CREATE_ALL:
            await create_tables(engine)
        logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
