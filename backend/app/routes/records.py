"""
ProgressLog Backend — Records Route Handlers
==============================================

What:  The five /api/records endpoints.
How:   Each handler takes a session from get_db_session, delegates to
       RecordService and wraps the result in the response envelope the
       front-end expects ({"message": ..., "data": ...}).

Endpoints:
    GET    /api/records             → {"message": "success", "data": [Record, ...]}
    POST   /api/records             → {"message": "success", "data": {"id": n}}
    PUT    /api/records/{id}        → {"message": "success", "changes": n}
    DELETE /api/records/{id}        → {"message": "deleted"}
    POST   /api/records/{id}/like   → {"message": "liked"}

Errors are raised as exceptions and rendered by the handlers in main.py.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.record import (
    CreatedId,
    ErrorResponse,
    MessageResponse,
    RecordCreatedResponse,
    RecordListResponse,
    RecordPayload,
    RecordUpdatedResponse,
)
from app.services.record_service import record_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Records"])

_ERROR_RESPONSES = {
    400: {"description": "Malformed body or id", "model": ErrorResponse},
    500: {"description": "Database error", "model": ErrorResponse},
}


@router.get(
    "/records",
    response_model=RecordListResponse,
    responses={500: _ERROR_RESPONSES[500]},
    summary="List all records, newest first",
)
async def list_records(
    db: AsyncSession = Depends(get_db_session),
) -> RecordListResponse:
    records = await record_service.list_records(db)
    return RecordListResponse(message="success", data=records)


@router.post(
    "/records",
    response_model=RecordCreatedResponse,
    responses=_ERROR_RESPONSES,
    summary="Create a record",
    description=(
        "Inserts a record. timestamp defaults to now (epoch ms), unit is derived "
        "from frequency when omitted, kind defaults to 'record' and likes always "
        "starts at 0."
    ),
)
async def create_record(
    payload: RecordPayload,
    db: AsyncSession = Depends(get_db_session),
) -> RecordCreatedResponse:
    record_id = await record_service.create_record(db, payload)
    return RecordCreatedResponse(message="success", data=CreatedId(id=record_id))


@router.put(
    "/records/{record_id}",
    response_model=RecordUpdatedResponse,
    responses=_ERROR_RESPONSES,
    summary="Replace a record",
    description=(
        "Overwrites every field except id and likes. Omitted fields are cleared. "
        "Succeeds with changes=0 when the id does not exist."
    ),
)
async def update_record(
    record_id: int,
    payload: RecordPayload,
    db: AsyncSession = Depends(get_db_session),
) -> RecordUpdatedResponse:
    changes = await record_service.update_record(db, record_id, payload)
    return RecordUpdatedResponse(message="success", changes=changes)


@router.delete(
    "/records/{record_id}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a record",
)
async def delete_record(
    record_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await record_service.delete_record(db, record_id)
    return MessageResponse(message="deleted")


@router.post(
    "/records/{record_id}/like",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Add one like to a record",
)
async def like_record(
    record_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await record_service.like_record(db, record_id)
    return MessageResponse(message="liked")
