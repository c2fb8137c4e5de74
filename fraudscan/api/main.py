"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fraudscan.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fraudscan.api.v1 import analyses, scoring, persistence
from fraudscan.infrastructure.observability.logging import setup_logging
from fraudscan.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fraudscan",
        description="Transaction outlier detection with LLM fraud scoring",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(analyses.router, prefix="/v1", tags=["analyses"])
    app.include_router(scoring.router, prefix="/v1", tags=["scoring"])
    app.include_router(persistence.router, prefix="/v1", tags=["persistence"])

    return app


app = create_app()
