"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from colonoscopy_scheduler.models import Appointment, ConversationState


def _now() -> datetime:
    return datetime.now(UTC)


class ChatRequest(BaseModel):
    """Incoming chat message plus the frontend's booking state."""

    message: str = Field(..., min_length=1, description="The user's message")
    context: ConversationState = Field(
        default_factory=ConversationState,
        description="Booking progress and candidate appointments held by the frontend",
    )


class ChatResponse(BaseModel):
    """Assistant reply, optionally paired with appointments to render."""

    model_config = ConfigDict(populate_by_name=True)

    response: str = Field(..., description="The assistant's reply")
    success: bool = True
    timestamp: datetime = Field(default_factory=_now)
    show_appointments: bool = Field(False, alias="showAppointments")
    filtered_dates: list[Appointment] = Field(default_factory=list, alias="filteredDates")


class ErrorResponse(BaseModel):
    error: str
    success: bool = False
    timestamp: datetime = Field(default_factory=_now)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "colonoscopy-scheduler"
