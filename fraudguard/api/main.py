"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fraudguard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fraudguard.api.v1 import analytics, blacklist, feedback, realtime, recommendations, thresholds
from fraudguard.config import settings
from fraudguard.infrastructure.backend.rest import RestBackend
from fraudguard.infrastructure.database.repositories import SqlBackend
from fraudguard.infrastructure.database.session import get_session_factory
from fraudguard.infrastructure.observability.logging import setup_logging
from fraudguard.infrastructure.realtime import RealtimeService
from fraudguard.infrastructure.thresholds import ThresholdStore
from fraudguard.services.views import Dashboard

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the long-lived dashboard and wire case updates to its refresh"""
    if settings.backend_mode == "sql":
        data = SqlBackend(get_session_factory())
    else:
        data = RestBackend()

    app.state.dashboard = Dashboard.build(data, ThresholdStore())
    app.state.realtime.start(on_case_change=app.state.dashboard.refresh)
    try:
        yield
    finally:
        await app.state.realtime.stop()
        app.state.realtime.hub.close_all()
        await data.aclose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FraudGuard",
        description="Blacklist recommendations and channel risk analytics for fraud case management",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.realtime = RealtimeService()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "backend": settings.backend_mode}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(recommendations.router, prefix="/v1", tags=["recommendations"])
    app.include_router(thresholds.router, prefix="/v1", tags=["thresholds"])
    app.include_router(blacklist.router, prefix="/v1", tags=["blacklist"])
    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])
    app.include_router(feedback.router, prefix="/v1", tags=["feedback"])
    app.include_router(realtime.router, prefix="/v1", tags=["realtime"])

    return app


app = create_app()
