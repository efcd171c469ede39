"""/v1/blacklist - Add, list and remove blacklisted recipients"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from fraudguard.api.dependencies import data_error, get_data_access, get_request_id
from fraudguard.api.v1.schemas import BlacklistCreateRequest, BlacklistEntrySchema, BlacklistListResponse
from fraudguard.domain.exceptions import DataAccessError
from fraudguard.infrastructure.backend.base import DataAccess
from fraudguard.infrastructure.observability.logging import log_blacklist_change
from fraudguard.services.blacklist import BlacklistService

router = APIRouter()


@router.get("/blacklist", response_model=BlacklistListResponse)
async def list_blacklist(request: Request, data: DataAccess = Depends(get_data_access)):
    try:
        entries = await BlacklistService(data).list_entries()
    except DataAccessError as e:
        raise data_error(e, get_request_id(request))
    return BlacklistListResponse(entries=[BlacklistEntrySchema.model_validate(e) for e in entries])


@router.post("/blacklist", response_model=BlacklistEntrySchema, status_code=201)
async def add_to_blacklist(
    body: BlacklistCreateRequest,
    request: Request,
    data: DataAccess = Depends(get_data_access),
):
    """
    Blacklist a recipient.

    Returns 409 "Already blacklisted" when the recipient is already present.
    """
    request_id = get_request_id(request)
    try:
        outcome = await BlacklistService(data).add(body.recipient_value, body.reason, body.created_by)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DataAccessError as e:
        raise data_error(e, request_id)

    log_blacklist_change(request_id, "add", outcome.outcome, body.recipient_value)
    if not outcome.added:
        raise HTTPException(status_code=409, detail=outcome.message)
    return BlacklistEntrySchema.model_validate(outcome.entry)


@router.delete("/blacklist/{entry_id}", status_code=204)
async def remove_from_blacklist(
    entry_id: int,
    request: Request,
    data: DataAccess = Depends(get_data_access),
):
    request_id = get_request_id(request)
    try:
        removed = await BlacklistService(data).remove(entry_id)
    except DataAccessError as e:
        raise data_error(e, request_id)

    log_blacklist_change(request_id, "remove", "removed" if removed else "missing", None)
    if not removed:
        raise HTTPException(status_code=404, detail="Blacklist entry not found")
    return Response(status_code=204)
