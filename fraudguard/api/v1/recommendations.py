"""GET /v1/recommendations - Blacklist recommendations for recipient accounts"""

import time
from fastapi import APIRouter, Depends, HTTPException, Request

from fraudguard.api.dependencies import data_error, get_data_access, get_request_id, get_threshold_store
from fraudguard.api.v1.schemas import (
    RecipientRecommendationResponse,
    RecommendationListResponse,
    RecommendationSchema,
    ThresholdsResponse,
)
from fraudguard.domain.exceptions import DataAccessError
from fraudguard.infrastructure.backend.base import DataAccess
from fraudguard.infrastructure.observability.logging import log_evaluation
from fraudguard.infrastructure.observability.metrics import evaluation_counter
from fraudguard.infrastructure.thresholds import ThresholdStore
from fraudguard.services.recommendations import RecommendationService

router = APIRouter()


@router.get("/recommendations", response_model=RecommendationListResponse)
async def list_recommendations(
    request: Request,
    data: DataAccess = Depends(get_data_access),
    store: ThresholdStore = Depends(get_threshold_store),
):
    """
    Evaluate every recipient against the current thresholds.

    Returns:
        Recommendations, most reasons first, ties by larger reported amount
    """
    start_time = time.time()
    request_id = get_request_id(request)
    thresholds = store.get()

    try:
        recommendations = await RecommendationService(data).evaluate_all(thresholds)
    except DataAccessError as e:
        evaluation_counter.labels(scope="all", outcome="failed").inc()
        raise data_error(e, request_id)

    log_evaluation(request_id, "all", len(recommendations), (time.time() - start_time) * 1000)

    return RecommendationListResponse(
        thresholds=ThresholdsResponse(
            min_complaints=thresholds.min_complaints,
            high_amount_threshold=thresholds.high_amount_threshold,
        ),
        recommendations=[RecommendationSchema.model_validate(r) for r in recommendations],
    )


@router.get("/recommendations/{recipient}", response_model=RecipientRecommendationResponse)
async def get_recommendation(
    recipient: str,
    request: Request,
    data: DataAccess = Depends(get_data_access),
    store: ThresholdStore = Depends(get_threshold_store),
):
    """Evaluate a single recipient; recommendation is null when no rule fires"""
    start_time = time.time()
    request_id = get_request_id(request)

    if not recipient.strip():
        raise HTTPException(status_code=400, detail="Recipient must not be empty")

    try:
        recommendation = await RecommendationService(data).evaluate_one(recipient, store.get())
    except DataAccessError as e:
        evaluation_counter.labels(scope="one", outcome="failed").inc()
        raise data_error(e, request_id)

    log_evaluation(
        request_id,
        "one",
        1 if recommendation else 0,
        (time.time() - start_time) * 1000,
        recipient=recipient,
    )

    return RecipientRecommendationResponse(
        recipient_account=recipient,
        recommended=recommendation is not None,
        recommendation=RecommendationSchema.model_validate(recommendation) if recommendation else None,
    )
