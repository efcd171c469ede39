"""/v1/analytics - Channel rankings, fraud hotspots and risk explanations"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from fraudguard.api.dependencies import data_error, get_dashboard, get_data_access, get_request_id
from fraudguard.api.v1.schemas import (
    ChannelRankingResponse,
    ChannelRankingSchema,
    DashboardResponse,
    HotspotsResponse,
    RepeatCustomerSchema,
    RepeatCustomersResponse,
    RiskExplanationResponse,
    RuleHitSchema,
    ViewSnapshotSchema,
)
from fraudguard.domain.exceptions import DataAccessError
from fraudguard.domain.rankings import DATE_WINDOWS
from fraudguard.infrastructure.backend.base import DataAccess
from fraudguard.services.analytics import AnalyticsService
from fraudguard.services.views import Dashboard, SnapshotView

router = APIRouter()


@router.get("/analytics/channels", response_model=ChannelRankingResponse)
async def channel_ranking(
    request: Request,
    window: str = Query("all", description="7days | 30days | all"),
    by_severity: bool = Query(False, description="Group by linked case severity as well"),
    data: DataAccess = Depends(get_data_access),
):
    """
    Rank channels by suspicious transaction volume.

    Returns:
        Rows sorted by suspicious count, then average risk score
    """
    if window not in DATE_WINDOWS:
        raise HTTPException(status_code=422, detail=f"window must be one of {sorted(DATE_WINDOWS)}")

    service = AnalyticsService(data)
    try:
        if by_severity:
            rows = await service.channel_severity_ranking(window)
        else:
            rows = await service.channel_ranking(window)
    except DataAccessError as e:
        raise data_error(e, get_request_id(request))

    return ChannelRankingResponse(
        window=window,
        by_severity=by_severity,
        rows=[ChannelRankingSchema.model_validate(r) for r in rows],
        total_txn=sum(r.total_txn for r in rows),
        total_suspicious=sum(r.suspicious_txn for r in rows),
    )


@router.get("/analytics/hotspots", response_model=HotspotsResponse)
async def hotspots(
    request: Request,
    top_n: int = Query(10, ge=1, le=100),
    data: DataAccess = Depends(get_data_access),
):
    try:
        result = await AnalyticsService(data).hotspots(top_n=top_n)
    except DataAccessError as e:
        raise data_error(e, get_request_id(request))
    return HotspotsResponse.model_validate(result)


@router.get("/analytics/repeat-customers", response_model=RepeatCustomersResponse)
async def repeat_customers(
    request: Request,
    min_cases: int = Query(2, ge=2, description="Fewest fraud cases for a customer to be listed"),
    data: DataAccess = Depends(get_data_access),
):
    """Customers involved in several fraud cases, most cases first"""
    try:
        rows = await AnalyticsService(data).repeat_customers(min_cases=min_cases)
    except DataAccessError as e:
        raise data_error(e, get_request_id(request))
    return RepeatCustomersResponse(
        min_cases=min_cases,
        customers=[RepeatCustomerSchema.model_validate(r) for r in rows],
    )


@router.get("/analytics/transactions/{txn_id}/risk", response_model=RiskExplanationResponse)
async def risk_explanation(
    txn_id: int,
    request: Request,
    data: DataAccess = Depends(get_data_access),
):
    """Why a transaction was flagged (provisional rule points)"""
    try:
        explanation = await AnalyticsService(data).risk_explanation(txn_id)
    except DataAccessError as e:
        raise data_error(e, get_request_id(request))

    if explanation is None:
        raise HTTPException(status_code=404, detail="Transaction has no risk evaluation")

    risk, label, rules = explanation
    return RiskExplanationResponse(
        txn_id=risk.txn_id,
        risk_score=risk.risk_score,
        risk_level=risk.risk_level,
        display_label=label,
        rules=[RuleHitSchema.model_validate(rule) for rule in rules],
    )


def _snapshot(view: SnapshotView) -> ViewSnapshotSchema:
    return ViewSnapshotSchema(
        rows=[asdict(row) for row in view.snapshot.rows],
        error=view.snapshot.error,
        sequence=view.snapshot.sequence,
    )


def _dashboard_response(dashboard: Dashboard) -> DashboardResponse:
    return DashboardResponse(
        recommendations=_snapshot(dashboard.recommendations),
        channels=_snapshot(dashboard.channels),
        channel_severity=_snapshot(dashboard.severity),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard_snapshot(dashboard: Dashboard = Depends(get_dashboard)):
    """Latest snapshots; loads them once if never refreshed"""
    if any(view.snapshot.sequence == 0 for view in dashboard.views):
        await dashboard.refresh()
    return _dashboard_response(dashboard)


@router.post("/dashboard/refresh", response_model=DashboardResponse)
async def refresh_dashboard(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.refresh()
    return _dashboard_response(dashboard)
