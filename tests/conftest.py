"""Shared test fixtures for the Colonoscopy Scheduler test suite."""

from __future__ import annotations

import os
from datetime import date

import pytest


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-123")
    os.environ.setdefault("METRICS_ENABLED", "false")


@pytest.fixture
def make_appointment():
    """Factory fixture for appointments: ``make_appointment("2024-09-10", "AM", "Dr. Kelly")``."""
    from colonoscopy_scheduler.models import Appointment

    def _make(day: str, period: str, doctor: str, **extra):
        return Appointment(date=date.fromisoformat(day), period=period, doctor=doctor, **extra)

    return _make


@pytest.fixture
def sample_appointments(make_appointment):
    """A spread of slots across both months, both periods and all doctors."""
    return [
        make_appointment("2024-09-10", "AM", "Dr. Kelly"),
        make_appointment("2024-10-05", "PM", "Dr. Roberts"),
        make_appointment("2024-09-11", "PM", "Dr. Kelly"),
        make_appointment("2024-09-13", "AM", "Dr. LeMieur"),
        make_appointment("2024-10-07", "PM", "Dr. Loveitt"),
        make_appointment("2024-10-10", "AM", "Dr. Loveitt"),
        make_appointment("2024-10-15", "AM", "Dr. Roberts"),
    ]


class FakeCompletion:
    """In-memory completion collaborator that records every call."""

    def __init__(self, reply: str = "Here are the available appointments.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def complete(self, system_prompt: str, user_message: str) -> str:
        self.calls.append((system_prompt, user_message))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def completion_factory():
    """Factory fixture: ``completion_factory(reply=...)`` or ``completion_factory(error=...)``."""
    return FakeCompletion
