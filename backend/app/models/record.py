"""
ProgressLog Backend — Record SQLAlchemy Model
===============================================

What:  ORM model representing the `records` table.
How:   Inherits from the shared DeclarativeBase; `Database.init_schema`
       creates the table from this definition when it is missing.
Who:   Used by RecordService for every CRUD statement.

Table Design:
    - id: integer primary key assigned by the database (SERIAL on PostgreSQL)
    - quantity / quantity_text: numeric and textual forms, kept independently
    - unit: defaulted from frequency by the service layer, not by the database
    - likes: counter, only changed through `likes = likes + 1`
    - timestamp: epoch milliseconds supplied by the caller or the service;
      the list endpoint orders by it descending
    - kind: "record" for normal entries, anything else marks a separator row

Index on timestamp DESC:
    Backs the only read query, "all records, newest first".
"""

from typing import Optional

from sqlalchemy import BigInteger, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEFAULT_KIND = "record"


class Record(Base):
    """
    One attendance/progress entry, or a separator row.

    Lifecycle:
        1. Inserted by POST /api/records (likes = 0, id assigned)
        2. Overwritten by PUT /api/records/{id} (every field but id and likes)
        3. likes bumped by POST /api/records/{id}/like
        4. Removed by DELETE /api/records/{id}
    """

    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    quantity: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        default=0,
        server_default=text("0"),
    )
    quantity_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # No bounds; the front-end decides what a score means
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    evaluation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    frequency: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attendance: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    likes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # Epoch milliseconds overflow a 32-bit INTEGER
    timestamp: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    kind: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=DEFAULT_KIND,
        server_default=text(f"'{DEFAULT_KIND}'"),
    )

    def __repr__(self) -> str:
        return (
            f"<Record(id={self.id}, name={self.name!r}, kind={self.kind!r}, "
            f"timestamp={self.timestamp})>"
        )


# Backs the list query: ORDER BY timestamp DESC
Index("idx_records_timestamp", Record.timestamp.desc())
