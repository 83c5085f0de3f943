"""Main FastAPI application for the formproof API."""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from formproof import __version__
from formproof.api.rate_limit import limiter
from formproof.api.v1.proofs import router as proofs_router
from formproof.api.v1.referral import router as referral_router
from formproof.auth.tokens import TokenService
from formproof.errors import ProofError
from formproof.ledger.service import LedgerService
from formproof.logging_config import configure_logging, get_logger
from formproof.ocr.client import ClarifaiOCRClient
from formproof.referral.service import ReferralService
from formproof.settings import Settings, settings as default_settings
from formproof.storage.db import Database, get_database
from formproof.verification.service import VerificationService

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevent clickjacking - don't allow embedding in iframes
        response.headers["X-Frame-Options"] = "DENY"

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Referrer Policy - don't leak URLs to other sites
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("app_starting", env=app.state.settings.env)

    app.state.db.create_tables()

    yield

    # Shutdown
    logger.info("app_shutting_down")


def create_app(
    database: Database | None = None,
    settings: Settings | None = None,
    ocr_client_factory: Callable[[str], ClarifaiOCRClient] | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        database: Datastore to use (defaults to one built from settings)
        settings: Settings override
        ocr_client_factory: OCR client factory override

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings
    database = database or get_database()

    # Hide API docs in production
    is_production = settings.env == "production"

    app = FastAPI(
        title="formproof API",
        description="Proof-of-completion verification and points ledger",
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
        openapi_url=None if is_production else "/api/openapi.json",
        lifespan=lifespan,
    )

    # Services
    ledger = LedgerService(database)
    app.state.settings = settings
    app.state.db = database
    app.state.ledger = ledger
    app.state.referrals = ReferralService(database)
    app.state.tokens = TokenService(settings)
    app.state.verification = VerificationService(
        ledger,
        settings=settings,
        ocr_client_factory=ocr_client_factory,
    )

    # Security Headers middleware (must be added before CORS)
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - SECURITY: Never allow wildcard in production
    allowed_origins = [
        origin.strip()
        for origin in settings.allowed_origins.split(",")
        if origin.strip()
    ]

    if is_production and "*" in allowed_origins:
        logger.error("cors_wildcard_blocked", message="Wildcard CORS not allowed in production")
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        max_age=3600,
    )

    # Rate limiting (shared instance from rate_limit module)
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please try again later."},
        )

    @app.exception_handler(ProofError)
    async def proof_error_handler(request: Request, exc: ProofError):
        logger.info("request_failed", path=request.url.path, code=exc.code.value, message=exc.message)
        return JSONResponse(
            status_code=exc.code.http_status,
            content={"error": exc.to_dict()},
        )

    # Include v1 API routers
    app.include_router(proofs_router, prefix="/api/v1")
    app.include_router(referral_router, prefix="/api/v1")

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "env": settings.env,
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "formproof API",
            "version": __version__,
            "docs": "/api/docs",
        }

    return app


def build_app() -> FastAPI:
    """Factory for ``uvicorn --factory``."""
    configure_logging()
    return create_app()
