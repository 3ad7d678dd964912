"""Decide whether a model reply should be paired with appointment data.

This is a phrase heuristic: the frontend renders the appointment cards only
when the reply reads like it is presenting options.  Misses in both
directions are accepted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from colonoscopy_scheduler.models import Appointment

DEFAULT_TRIGGER_PHRASES: tuple[str, ...] = (
    "available",
    "appointments",
    "here are",
    "options",
)


@dataclass(frozen=True)
class ReplyClassification:
    show_appointments: bool
    appointments: list[Appointment] = field(default_factory=list)


def classify_reply(
    reply: str,
    appointments: Sequence[Appointment],
    triggers: tuple[str, ...] = DEFAULT_TRIGGER_PHRASES,
) -> ReplyClassification:
    """Attach *appointments* only if there are some and the reply mentions them."""
    if isinstance(triggers, str):
        triggers = (triggers,)
    if not appointments:
        return ReplyClassification(show_appointments=False)

    lowered = reply.lower()
    if any(phrase in lowered for phrase in triggers):
        return ReplyClassification(show_appointments=True, appointments=list(appointments))
    return ReplyClassification(show_appointments=False)
