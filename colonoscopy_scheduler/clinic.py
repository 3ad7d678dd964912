"""Static clinic data: physician schedules, facility blurb and contact details.

These are literal constants for this deployment.  They are frozen so the
prompt assembler can take them as plain arguments and tests can swap in
their own profile.
"""

from __future__ import annotations

from dataclasses import dataclass

from colonoscopy_scheduler.models import Doctor

MIN_LEAD_TIME_DAYS = 3


@dataclass(frozen=True)
class PhysicianSchedule:
    """When a physician operates and how densely their blocks are booked."""

    doctor: Doctor
    blocks: str
    minutes_per_procedure: int
    max_per_block: int

    def describe(self) -> str:
        return (
            f"{self.doctor.value}: {self.blocks}, "
            f"{self.minutes_per_procedure} mins per procedure, "
            f"max {self.max_per_block} per block"
        )


@dataclass(frozen=True)
class ClinicProfile:
    name: str
    schedules: tuple[PhysicianSchedule, ...]
    facility_description: str
    preparation_note: str
    contact_phone: str
    contact_hours: str
    min_lead_time_days: int = MIN_LEAD_TIME_DAYS


DEFAULT_SCHEDULES: tuple[PhysicianSchedule, ...] = (
    PhysicianSchedule(Doctor.LEMIEUR, "Monday/Wednesday/Friday AM (7:30-12:00)", 25, 6),
    PhysicianSchedule(Doctor.LOVEITT, "Monday PM/Thursday AM/Friday AM", 20, 10),
    PhysicianSchedule(Doctor.KELLY, "Tuesday PM/Wednesday PM/Friday PM (12:00-5:00)", 20, 8),
    PhysicianSchedule(Doctor.ROBERTS, "Tuesday AM/Thursday PM/Friday PM", 15, 10),
)

DEFAULT_CLINIC = ClinicProfile(
    name="the hospital's Endoscopy Unit",
    schedules=DEFAULT_SCHEDULES,
    facility_description=(
        "Colonoscopies are performed in the hospital's dedicated Endoscopy Unit "
        "by board-certified gastroenterologists. Procedures are done under "
        "sedation and patients recover in the unit before going home the same day."
    ),
    preparation_note=(
        "Patients receive bowel-preparation instructions after booking and must "
        "arrange for an adult to drive them home after the procedure."
    ),
    contact_phone="(555) 010-4200",
    contact_hours="Monday to Friday, 8:00-16:30",
)
