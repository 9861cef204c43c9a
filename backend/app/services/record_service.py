"""
ProgressLog Backend — Record Service
======================================

What:  The five record operations: list, create, update, delete, like.
How:   Each operation applies the defaulting rules (record_defaults) and
       issues exactly one SQL statement through the request's AsyncSession.
       Writes are committed before the method returns, so the HTTP response
       is only built once the row is durable; a failed commit becomes a 500.
Who:   Called by the route handlers in app/routes/records.py.

Error Handling:
    Any SQLAlchemyError is logged and re-raised as DatabaseError carrying
    the driver's message, which the global handler turns into a 500.
    A missing id is not an error for update, delete or like: the statement
    simply matches no rows.

Design Decision:
    RecordService is stateless; it receives the session for each call, so a
    single module-level instance is shared by all requests.
"""

import logging
from typing import List

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.record import Record
from app.schemas.record import RecordOut, RecordPayload
from app.services.record_defaults import (
    resolve_kind,
    resolve_quantity,
    resolve_timestamp,
    resolve_unit,
)

logger = logging.getLogger(__name__)


class RecordService:
    """
    Business logic layer for record operations.

    Responsibilities:
        - list_records(): every row, newest timestamp first
        - create_record(): insert with defaults, likes forced to 0
        - update_record(): full overwrite of everything but id and likes
        - delete_record(): remove by id
        - like_record(): likes = likes + 1 in a single statement
    """

    async def list_records(self, db: AsyncSession) -> List[RecordOut]:
        """
        SELECT * FROM records ORDER BY timestamp DESC

        No pagination: the full table is returned on every call.
        """
        try:
            result = await db.execute(select(Record).order_by(desc(Record.timestamp)))
            records = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing records: %s", str(e))
            raise DatabaseError.wrap(e, "list")

        return [RecordOut.model_validate(record) for record in records]

    async def create_record(self, db: AsyncSession, payload: RecordPayload) -> int:
        """
        Insert a record and return the id the database assigned.

        Defaults:
            timestamp → now (epoch ms), unit → from frequency,
            quantity → 0, kind → "record". likes is always 0.
        """
        record = Record(
            name=payload.name,
            quantity=resolve_quantity(payload.quantity),
            quantity_text=payload.quantity_text,
            unit=resolve_unit(payload.unit, payload.frequency),
            score=payload.score,
            evaluation=payload.evaluation,
            notes=payload.notes,
            frequency=payload.frequency,
            attendance=payload.attendance,
            likes=0,
            timestamp=resolve_timestamp(payload.timestamp),
            kind=resolve_kind(payload.kind),
        )
        try:
            db.add(record)
            await db.flush()  # INSERT ... RETURNING id
            record_id = record.id
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error adding record: %s", str(e))
            raise DatabaseError.wrap(e, "create")

        logger.info("Record %s created (kind=%s)", record_id, record.kind)
        return record_id

    async def update_record(
        self, db: AsyncSession, record_id: int, payload: RecordPayload
    ) -> int:
        """
        Overwrite every field except id and likes; return rows affected.

        Omitted fields become NULL, except unit (derived from frequency) and
        kind ("record"). No existence check: a missing id yields 0.
        """
        stmt = (
            update(Record)
            .where(Record.id == record_id)
            .values(
                name=payload.name,
                quantity=payload.quantity,
                quantity_text=payload.quantity_text,
                unit=resolve_unit(payload.unit, payload.frequency),
                score=payload.score,
                evaluation=payload.evaluation,
                notes=payload.notes,
                frequency=payload.frequency,
                attendance=payload.attendance,
                timestamp=payload.timestamp,
                kind=resolve_kind(payload.kind),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            changes = result.rowcount or 0
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating record %s: %s", record_id, str(e))
            raise DatabaseError.wrap(e, "update")

        logger.debug("Record %s updated (%d row(s))", record_id, changes)
        return changes

    async def delete_record(self, db: AsyncSession, record_id: int) -> int:
        """DELETE FROM records WHERE id = :id; returns rows affected (0 or 1)."""
        stmt = (
            delete(Record)
            .where(Record.id == record_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            deleted = result.rowcount or 0
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting record %s: %s", record_id, str(e))
            raise DatabaseError.wrap(e, "delete")

        if deleted:
            logger.info("Record %s deleted", record_id)
        return deleted

    async def like_record(self, db: AsyncSession, record_id: int) -> int:
        """
        UPDATE records SET likes = likes + 1 WHERE id = :id

        The increment happens inside the database, so concurrent likes on the
        same row are serialized by the engine's row lock and none are lost.
        """
        stmt = (
            update(Record)
            .where(Record.id == record_id)
            .values(likes=Record.likes + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            liked = result.rowcount or 0
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error liking record %s: %s", record_id, str(e))
            raise DatabaseError.wrap(e, "like")

        return liked


# ── Singleton Instance ────────────────────────────────────────────────────
record_service = RecordService()
