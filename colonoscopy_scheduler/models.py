"""Domain models shared by the filter, the prompt assembler and the API.

Everything here is built from the inbound request payload and discarded once
the response is sent.  The client speaks camelCase, so fields carry aliases
and accept either spelling on input.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Period(str, Enum):
    """Half-day block an appointment falls in."""

    AM = "AM"
    PM = "PM"


class Doctor(str, Enum):
    """Physicians who perform procedures at the unit."""

    KELLY = "Dr. Kelly"
    LOVEITT = "Dr. Loveitt"
    LEMIEUR = "Dr. LeMieur"
    ROBERTS = "Dr. Roberts"


class Appointment(BaseModel):
    """A single bookable slot offered by the frontend.

    Extra keys (``id``, ``time``, ...) are kept so they round-trip back to
    the client untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    date: dt.date
    period: Period
    doctor: Doctor


class PatientInfo(BaseModel):
    """Details collected from the patient so far.  ``None`` means not yet given."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    phone: str | None = None
    email: str | None = None

    def missing_fields(self) -> list[str]:
        return [
            field for field in ("name", "phone", "email")
            if not getattr(self, field)
        ]


class ConversationState(BaseModel):
    """Caller-maintained booking progress, echoed into the prompt as-is."""

    model_config = ConfigDict(populate_by_name=True)

    current_step: str = Field("initial", alias="currentStep")
    patient_info: PatientInfo = Field(default_factory=PatientInfo, alias="patientInfo")
    selected_date: Appointment | None = Field(None, alias="selectedDate")
    available_dates: list[Appointment] = Field(
        default_factory=list, alias="availableDates",
    )
