"""Gym Portal API - FastAPI Application Entry Point.

Membership, pricing plan and payment transaction management with:
- Admin key and member bearer token authorization
- Request ID tracking
- Security headers
- Uniform JSON error envelope
- Error sanitization
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.trustedhost import TrustedHostMiddleware

from gym_portal.config import (
    ADMIN_API_KEY,
    ADMIN_API_KEY_HEADER,
    ALLOW_QUERY_API_KEY,
    ALLOWED_HOSTS,
    CORS_ORIGINS,
    DEBUG,
    logger,
)
from gym_portal.core.firebase_client import get_firestore_client
from gym_portal.core.responses import register_exception_handlers
from gym_portal.middleware import (
    ErrorSanitizationMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from gym_portal.routers import auth, members, pricing_plans, transactions
from gym_portal.schemas import HealthResponse
from gym_portal.version import __version__


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting Gym Portal API v%s", __version__)
    if not ADMIN_API_KEY:
        logger.warning("ADMIN_API_KEY is not set; admin endpoints will reject every request")
    if ALLOW_QUERY_API_KEY:
        logger.warning(
            "Admin key accepted in the api_key query parameter; "
            "set ALLOW_QUERY_API_KEY=false once clients send %s",
            ADMIN_API_KEY_HEADER,
        )
    yield
    logger.info("Shutting down Gym Portal API")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Gym Portal API",
        version=__version__,
        lifespan=lifespan,
        # Disable docs in production for security
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    # -------------------------------------------------------------------------
    # Middleware Stack (order matters - first added = last executed)
    # -------------------------------------------------------------------------

    # 1. Error sanitization (outermost - catches all errors)
    app.add_middleware(ErrorSanitizationMiddleware)

    # 2. Request logging
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths={"/health", "/healthz", "/ready"},
    )

    # 3. Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # 4. Request ID injection
    app.add_middleware(RequestIDMiddleware)

    # 5. Trusted hosts (prevents host header attacks)
    if ALLOWED_HOSTS and ALLOWED_HOSTS != ["*"]:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=ALLOWED_HOSTS,
        )

    # 6. CORS (innermost middleware for preflight handling)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", ADMIN_API_KEY_HEADER],
        expose_headers=["X-Request-ID"],
        max_age=600,  # Cache preflight for 10 minutes
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    register_exception_handlers(app)

    # -------------------------------------------------------------------------
    # Health Check Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    @app.get("/healthz", response_model=HealthResponse, include_in_schema=False)
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers and orchestrators."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        """Readiness check - verifies the Firestore client can be created."""
        try:
            get_firestore_client()
        except (RuntimeError, FileNotFoundError, ValueError) as e:
            logger.warning("Readiness check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "not_ready"})
        return {"status": "ready"}

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    app.include_router(members.router)
    app.include_router(pricing_plans.router)
    app.include_router(transactions.router)
    app.include_router(auth.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "gym_portal.main:app",
        host="0.0.0.0",
        port=8000,
        reload=DEBUG,
        limit_concurrency=100,
        limit_max_requests=10000,
    )
