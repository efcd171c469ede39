"""GET/PUT /v1/thresholds - Recommendation threshold settings"""

import logging
from fastapi import APIRouter, Depends, Request

from fraudguard.api.dependencies import get_request_id, get_threshold_store
from fraudguard.api.v1.schemas import ThresholdsResponse, ThresholdsSchema
from fraudguard.domain.models import Thresholds
from fraudguard.infrastructure.thresholds import ThresholdStore

router = APIRouter()


@router.get("/thresholds", response_model=ThresholdsResponse)
def get_thresholds(store: ThresholdStore = Depends(get_threshold_store)):
    thresholds = store.get()
    return ThresholdsResponse(
        min_complaints=thresholds.min_complaints,
        high_amount_threshold=thresholds.high_amount_threshold,
    )


@router.put("/thresholds", response_model=ThresholdsResponse)
def update_thresholds(
    body: ThresholdsSchema,
    request: Request,
    store: ThresholdStore = Depends(get_threshold_store),
):
    """Persist thresholds; they apply to the next evaluation only"""
    store.set(Thresholds(min_complaints=body.min_complaints, high_amount_threshold=body.high_amount_threshold))
    logging.info(
        "Thresholds updated",
        extra={
            "request_id": get_request_id(request),
            "min_complaints": body.min_complaints,
            "high_amount_threshold": str(body.high_amount_threshold),
        },
    )
    return body
