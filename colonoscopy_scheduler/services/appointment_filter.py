"""Keyword-based narrowing of the candidate appointment list.

The patient's latest message is scanned for a doctor name, a month and a
time-of-day preference, in that order.  Each stage narrows the output of the
previous one:

* **doctor**: exclusive. The first keyword in table order wins and no other
  doctor is considered, even if several names appear in the message.
* **month** / **period**: every rule is an independent pass.  A message that
  names both September and October therefore yields an empty list.

Matching is plain substring containment on the lower-cased message, so
``"am"`` also fires inside ``"name"`` and ``"pm"`` inside ``"appointments"``.
An empty result is a valid answer and is passed on as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from colonoscopy_scheduler.models import Appointment, Doctor, Period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterRules:
    """Immutable keyword tables driving :func:`filter_appointments`."""

    doctor_keywords: tuple[tuple[str, Doctor], ...]
    month_keywords: tuple[tuple[tuple[str, ...], int], ...]
    period_keywords: tuple[tuple[tuple[str, ...], Period], ...]


DEFAULT_FILTER_RULES = FilterRules(
    doctor_keywords=(
        ("kelly", Doctor.KELLY),
        ("loveitt", Doctor.LOVEITT),
        ("lemieur", Doctor.LEMIEUR),
        ("roberts", Doctor.ROBERTS),
    ),
    month_keywords=(
        (("september", "sept"), 9),
        (("october", "oct"), 10),
    ),
    period_keywords=(
        (("morning", "am"), Period.AM),
        (("afternoon", "evening", "pm"), Period.PM),
    ),
)


def _mentions(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _keep(
    appointments: list[Appointment], predicate: Callable[[Appointment], bool],
) -> list[Appointment]:
    return [a for a in appointments if predicate(a)]


def match_doctor(message: str, rules: FilterRules = DEFAULT_FILTER_RULES) -> Doctor | None:
    """Return the doctor named first (in table order) in *message*, if any."""
    lowered = message.lower()
    for keyword, doctor in rules.doctor_keywords:
        if keyword in lowered:
            return doctor
    return None


def filter_appointments(
    message: str,
    appointments: Sequence[Appointment],
    rules: FilterRules = DEFAULT_FILTER_RULES,
) -> list[Appointment]:
    """Narrow *appointments* to those matching the preferences in *message*.

    Relative order is preserved and the input sequence is never modified.
    """
    lowered = message.lower()
    result = list(appointments)

    doctor = match_doctor(lowered, rules)
    if doctor is not None:
        result = _keep(result, lambda a: a.doctor == doctor)
        logger.debug("Doctor filter %s kept %d", doctor.value, len(result))

    for keywords, month in rules.month_keywords:
        if _mentions(lowered, keywords):
            result = _keep(result, lambda a, m=month: a.date.month == m)
            logger.debug("Month filter %d kept %d", month, len(result))

    for keywords, period in rules.period_keywords:
        if _mentions(lowered, keywords):
            result = _keep(result, lambda a, p=period: a.period == p)
            logger.debug("Period filter %s kept %d", period.value, len(result))

    return result
