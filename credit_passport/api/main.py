"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from credit_passport.api.middleware import RequestIDMiddleware, MetricsMiddleware
from credit_passport.api.v1 import payments, generation, runs, diagnostics
from credit_passport.infrastructure.observability.logging import setup_logging
from credit_passport.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="SME Credit Passport",
        description="Fundability scoring, risk profile and paid passport runs for SMEs",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "narrative_provider": "enabled" if settings.narrative_provider_enabled else "disabled",
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers; payments first so /config is not taken for a run id
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(generation.router, prefix="/v1", tags=["generation"])
    app.include_router(runs.router, prefix="/v1", tags=["runs"])
    app.include_router(diagnostics.router, prefix="/v1", tags=["diagnostics"])

    return app


app = create_app()
