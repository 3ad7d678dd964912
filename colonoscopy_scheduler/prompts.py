"""System prompt assembly for the scheduling assistant.

The prompt is rebuilt on every request from three inputs: the filtered
appointment list, the caller's conversation state and the static clinic
profile.  Sections always appear in the same order.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date

from colonoscopy_scheduler.clinic import DEFAULT_CLINIC, ClinicProfile
from colonoscopy_scheduler.models import Appointment, ConversationState

PREAMBLE_TEMPLATE = """You are a friendly, professional colonoscopy scheduling assistant for {clinic_name}.
Today is {today} ({weekday})."""

RULES_TEMPLATE = """SCHEDULING RULES:
- Appointments must be scheduled at least {lead_days} days in advance
{schedules}"""

FACILITY_TEMPLATE = """ABOUT THE FACILITY:
{description}
{preparation}
Contact: {phone} ({hours})"""

APPOINTMENTS_TEMPLATE = """FILTERED AVAILABLE APPOINTMENTS BASED ON USER REQUEST:
{appointments}"""

STATE_TEMPLATE = """CURRENT CONVERSATION STATE:
- Booking step: {step}
- Patient info collected: {patient_info}
- Patient info still missing: {missing}
- Selected appointment: {selected}"""

DIRECTIVES_TEMPLATE = """IMPORTANT INSTRUCTIONS:
1. If the user asks for a specific doctor, month, or time preference, ONLY show appointments that match their request
2. If the filtered list above is empty, say so plainly and suggest another doctor, month, or time of day
3. If the user has already provided their name, phone, and email, do NOT ask for this information again
4. If they have selected an appointment and provided all info, offer to confirm the booking
5. Never offer a date less than {lead_days} days from today
6. Be direct and helpful - don't repeat questions unnecessarily

CONVERSATION FLOW:
1. User asks for appointments → Show appropriate filtered appointments
2. User selects appointment → Collect missing info (name, phone, email)
3. All info collected → Offer confirmation
4. User confirms → Appointment is booked

Be conversational but efficient. If the user has given you what you need, move to the next step."""


def _to_json(value, *, indent: int | None = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False)


def serialize_appointments(appointments: Sequence[Appointment]) -> str:
    """Pretty-print *appointments* the way the frontend sends them."""
    return _to_json([a.model_dump(mode="json") for a in appointments], indent=2)


def _state_section(state: ConversationState) -> str:
    patient_info = state.patient_info.model_dump(mode="json", exclude_none=True)
    missing = state.patient_info.missing_fields()
    selected = state.selected_date.model_dump(mode="json") if state.selected_date else None
    return STATE_TEMPLATE.format(
        step=state.current_step,
        patient_info=_to_json(patient_info),
        missing=", ".join(missing) if missing else "none",
        selected=_to_json(selected),
    )


def build_system_prompt(
    appointments: Sequence[Appointment],
    state: ConversationState,
    clinic: ClinicProfile = DEFAULT_CLINIC,
    *,
    today: date | None = None,
    include_facility: bool = True,
) -> str:
    """Assemble the system prompt for one turn of the conversation."""
    today = today or date.today()
    sections = [
        PREAMBLE_TEMPLATE.format(
            clinic_name=clinic.name,
            today=today.isoformat(),
            weekday=today.strftime("%A"),
        ),
        RULES_TEMPLATE.format(
            lead_days=clinic.min_lead_time_days,
            schedules="\n".join(f"- {s.describe()}" for s in clinic.schedules),
        ),
    ]
    if include_facility:
        sections.append(
            FACILITY_TEMPLATE.format(
                description=clinic.facility_description,
                preparation=clinic.preparation_note,
                phone=clinic.contact_phone,
                hours=clinic.contact_hours,
            )
        )
    sections += [
        APPOINTMENTS_TEMPLATE.format(appointments=serialize_appointments(appointments)),
        _state_section(state),
        DIRECTIVES_TEMPLATE.format(lead_days=clinic.min_lead_time_days),
    ]
    return "\n\n".join(sections)
