"""
ProgressLog Backend — Pydantic Request/Response Schemas
=========================================================

What:  Pydantic models defining the API contract for the records endpoints.
How:   FastAPI validates request bodies against `RecordPayload` before the
       handler runs, serializes `RecordOut` rows, and builds the OpenAPI docs
       from these models.

Payload rules:
    - Every field is optional; defaults are applied by the service layer.
    - Unknown keys are ignored, so a client echoing back a full record
      (including `id` and `likes`) is accepted without those values being used.
    - Wrong types are rejected (400) instead of being passed to the database.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RecordPayload(BaseModel):
    """Body of POST /api/records and PUT /api/records/{id}."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, description="Subject name")
    quantity: Optional[int] = Field(default=None, description="Numeric quantity")
    quantity_text: Optional[str] = Field(
        default=None,
        description="Textual quantity, stored as given",
    )
    unit: Optional[str] = Field(
        default=None,
        description="Unit of the quantity; derived from frequency when omitted",
    )
    score: Optional[int] = Field(default=None, description="Score, unbounded")
    evaluation: Optional[str] = Field(default=None, description="Evaluation label")
    notes: Optional[str] = Field(default=None, description="Free-form notes")
    frequency: Optional[str] = Field(default=None, description="e.g. daily, monthly")
    attendance: Optional[str] = Field(default=None, description="Attendance marker")
    timestamp: Optional[int] = Field(
        default=None,
        description="Epoch milliseconds; current time when omitted on create",
    )
    kind: Optional[str] = Field(
        default=None,
        description="'record' for entries, another tag for separators",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class RecordOut(BaseModel):
    """Full representation of a stored record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    quantity: Optional[int] = None
    quantity_text: Optional[str] = None
    unit: Optional[str] = None
    score: Optional[int] = None
    evaluation: Optional[str] = None
    notes: Optional[str] = None
    frequency: Optional[str] = None
    attendance: Optional[str] = None
    likes: int = 0
    timestamp: Optional[int] = None
    kind: Optional[str] = None


class RecordListResponse(BaseModel):
    """GET /api/records."""
    message: str = "success"
    data: List[RecordOut]


class CreatedId(BaseModel):
    id: int


class RecordCreatedResponse(BaseModel):
    """POST /api/records."""
    message: str = "success"
    data: CreatedId


class RecordUpdatedResponse(BaseModel):
    """
    PUT /api/records/{id}.

    `changes` is the number of rows the UPDATE touched: 1, or 0 when the id
    does not exist. The request succeeds either way.
    """
    message: str = "success"
    changes: int


class MessageResponse(BaseModel):
    """DELETE and like responses: {"message": "deleted"} / {"message": "liked"}."""
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body returned by every exception handler.

    Example:
        {
            "error": "relation \"records\" does not exist",
            "code": "database_error",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error kind")
    details: Optional[Dict[str, Any]] = Field(default=None)
    request_id: Optional[str] = Field(default=None)


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
