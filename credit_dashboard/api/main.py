"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from credit_dashboard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from credit_dashboard.api.v1 import accounts, summary, links
from credit_dashboard.infrastructure.observability.logging import setup_logging
from credit_dashboard.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Credit Dashboard",
        description="Credit-card balances, utilization and upcoming payments",
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
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(summary.router, prefix="/v1", tags=["summary"])
    app.include_router(links.router, prefix="/v1", tags=["bank-link"])

    return app


app = create_app()
