"""Dependency injection for FastAPI endpoints"""

import logging
from typing import AsyncIterator

from fastapi import HTTPException, Request

from fraudguard.config import settings
from fraudguard.domain.exceptions import DataAccessError
from fraudguard.infrastructure.backend.base import DataAccess
from fraudguard.infrastructure.backend.rest import RestBackend
from fraudguard.infrastructure.database.repositories import SqlBackend
from fraudguard.infrastructure.database.session import get_session_factory
from fraudguard.infrastructure.realtime import RealtimeService
from fraudguard.infrastructure.thresholds import ThresholdStore
from fraudguard.services.views import Dashboard

ERROR_STATUS = {
    "conflict": 409,
    "network": 503,
    "validation": 502,
    "unknown": 500,
}

ERROR_DETAIL = {
    "conflict": "Conflicting record",
    "network": "Backend service unavailable",
    "validation": "Backend returned invalid data",
    "unknown": "Backend error",
}


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


async def get_data_access() -> AsyncIterator[DataAccess]:
    """Provide the configured backend for one request"""
    if settings.backend_mode == "sql":
        yield SqlBackend(get_session_factory())
    else:
        yield RestBackend()


def get_threshold_store() -> ThresholdStore:
    return ThresholdStore()


def get_realtime(request: Request) -> RealtimeService:
    return request.app.state.realtime


def get_dashboard(request: Request) -> Dashboard:
    dashboard = getattr(request.app.state, "dashboard", None)
    if dashboard is None:
        raise HTTPException(status_code=503, detail="Dashboard not started")
    return dashboard


def data_error(e: DataAccessError, request_id: str) -> HTTPException:
    """Log a backend failure and map it to an HTTP error by kind"""
    log = logging.warning if e.kind == "conflict" else logging.error
    log(f"Backend error: {e}", extra={"request_id": request_id, "kind": e.kind, "table": e.table})
    return HTTPException(status_code=ERROR_STATUS.get(e.kind, 500), detail=ERROR_DETAIL.get(e.kind, "Backend error"))
