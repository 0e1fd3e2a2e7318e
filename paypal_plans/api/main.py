"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from paypal_plans.api.middleware import RequestIDMiddleware, MetricsMiddleware
from paypal_plans.api.v1 import payments, plans, subscriptions
from paypal_plans.infrastructure.observability.logging import setup_logging
from paypal_plans.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="PayPal Plans",
        description="One-time payments, subscriptions and installment plans over PayPal",
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
        return {"status": "ok", "service": settings.service_name, "mode": settings.paypal_mode}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(plans.router, prefix="/v1", tags=["plans"])
    app.include_router(subscriptions.router, prefix="/v1", tags=["subscriptions"])

    return app


app = create_app()
