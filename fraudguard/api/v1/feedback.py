"""POST /v1/feedback - Investigator feedback and investigator ratings"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from fraudguard.api.dependencies import data_error, get_data_access, get_request_id
from fraudguard.api.v1.schemas import CaseFeedbackRequest, RatingRequest, SubmissionResponse
from fraudguard.domain.exceptions import DataAccessError, FeedbackValidationError
from fraudguard.domain.feedback import CaseFeedback, InvestigatorRating
from fraudguard.infrastructure.backend.base import DataAccess
from fraudguard.services.feedback import FeedbackService

router = APIRouter()


@router.post("/feedback/case", response_model=SubmissionResponse, status_code=201)
async def submit_case_feedback(
    body: CaseFeedbackRequest,
    request: Request,
    data: DataAccess = Depends(get_data_access),
):
    request_id = get_request_id(request)
    try:
        record = await FeedbackService(data).submit_case_feedback(CaseFeedback(**body.model_dump()))
    except FeedbackValidationError as e:
        logging.warning(f"Feedback rejected: {e}", extra={"request_id": request_id, "field": e.field})
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})
    except DataAccessError as e:
        raise data_error(e, request_id)
    return SubmissionResponse(record=record)


@router.post("/feedback/rating", response_model=SubmissionResponse, status_code=201)
async def submit_rating(
    body: RatingRequest,
    request: Request,
    data: DataAccess = Depends(get_data_access),
):
    request_id = get_request_id(request)
    try:
        record = await FeedbackService(data).submit_rating(InvestigatorRating(**body.model_dump()))
    except FeedbackValidationError as e:
        logging.warning(f"Rating rejected: {e}", extra={"request_id": request_id, "field": e.field})
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})
    except DataAccessError as e:
        raise data_error(e, request_id)
    return SubmissionResponse(record=record)
