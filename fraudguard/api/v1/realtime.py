"""/v1/realtime - Database webhook ingest and live case message logs"""

from fastapi import APIRouter, Depends

from fraudguard.api.dependencies import get_realtime
from fraudguard.api.v1.schemas import CaseMessagesResponse, ChangeEventRequest, ChangeEventResponse
from fraudguard.infrastructure.realtime import ChangeEvent, RealtimeService

router = APIRouter()


@router.post("/realtime/events", response_model=ChangeEventResponse, status_code=202)
async def ingest_change_event(
    body: ChangeEventRequest,
    realtime: RealtimeService = Depends(get_realtime),
):
    delivered = await realtime.hub.publish(
        ChangeEvent(
            table=body.table,
            type=body.type.upper(),
            record=body.record or {},
            old_record=body.old_record,
        )
    )
    return ChangeEventResponse(delivered=delivered)


@router.get("/realtime/cases/{case_id}/messages", response_model=CaseMessagesResponse)
def case_messages(case_id: int, realtime: RealtimeService = Depends(get_realtime)):
    """Messages received for a case since it was first followed"""
    log = realtime.follow_case(case_id)
    return CaseMessagesResponse(case_id=case_id, messages=log.messages)
