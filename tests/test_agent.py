"""Tests for the scheduling pipeline.

Covers:
  - Node behaviour (filter, assistant, classify) in isolation
  - End-to-end pipeline runs with a fake completion collaborator
"""

from __future__ import annotations

import pytest

from colonoscopy_scheduler.agent import (
    _make_assistant_node,
    _make_filter_node,
    classify_node,
    create_scheduling_agent,
)
from colonoscopy_scheduler.clinic import DEFAULT_CLINIC
from colonoscopy_scheduler.models import ConversationState, Doctor, PatientInfo
from colonoscopy_scheduler.services.appointment_filter import DEFAULT_FILTER_RULES
from colonoscopy_scheduler.services.completion import CompletionError, ErrorCategory


# ── Nodes ────────────────────────────────────────────────────────────


class TestFilterNode:
    def test_filters_available_dates(self, sample_appointments):
        node = _make_filter_node(DEFAULT_FILTER_RULES)
        state = {
            "message": "kelly please",
            "context": ConversationState(available_dates=sample_appointments),
        }
        result = node(state)
        assert list(result) == ["filtered"]
        assert {a.doctor for a in result["filtered"]} == {Doctor.KELLY}

    def test_does_not_touch_context(self, sample_appointments):
        node = _make_filter_node(DEFAULT_FILTER_RULES)
        context = ConversationState(available_dates=sample_appointments)
        node({"message": "roberts", "context": context})
        assert context.available_dates == sample_appointments


class TestAssistantNode:
    def test_prompt_embeds_filtered_list_and_raw_message(self, make_appointment, completion_factory):
        completion = completion_factory(reply="Sure!")
        node = _make_assistant_node(completion, DEFAULT_CLINIC)
        slot = make_appointment("2024-09-10", "AM", "Dr. Kelly", id="slot-9")
        state = {
            "message": "Kelly in the morning?",
            "context": ConversationState(current_step="selecting"),
            "filtered": [slot],
        }

        assert node(state) == {"reply": "Sure!"}
        [(prompt, user_message)] = completion.calls
        assert user_message == "Kelly in the morning?"
        assert '"id": "slot-9"' in prompt
        assert "Booking step: selecting" in prompt

    def test_propagates_completion_error(self, completion_factory):
        completion = completion_factory(error=CompletionError(ErrorCategory.QUOTA))
        node = _make_assistant_node(completion, DEFAULT_CLINIC)
        state = {"message": "hi", "context": ConversationState(), "filtered": []}
        with pytest.raises(CompletionError):
            node(state)


class TestClassifyNode:
    def test_attaches_filtered_when_reply_presents_options(self, sample_appointments):
        result = classify_node({"reply": "Here are your options", "filtered": sample_appointments})
        assert result["show_appointments"] is True
        assert result["attached"] == sample_appointments

    def test_nothing_attached_for_empty_filter(self):
        result = classify_node({"reply": "Here are your options", "filtered": []})
        assert result == {"show_appointments": False, "attached": []}


# ── End-to-end ───────────────────────────────────────────────────────


class TestSchedulingPipeline:
    def test_full_turn_with_matching_appointments(self, make_appointment, completion_factory):
        first = make_appointment("2024-09-10", "AM", "Dr. Kelly")
        second = make_appointment("2024-10-05", "PM", "Dr. Roberts")
        completion = completion_factory(reply="Here are the available times with Dr. Kelly.")
        agent = create_scheduling_agent(completion)

        result = agent.invoke(
            {
                "message": "looking for kelly in the morning",
                "context": ConversationState(available_dates=[first, second]),
            }
        )

        assert result["filtered"] == [first]
        assert result["reply"] == "Here are the available times with Dr. Kelly."
        assert result["show_appointments"] is True
        assert result["attached"] == [first]
        assert len(completion.calls) == 1

    def test_reply_without_trigger_attaches_nothing(self, sample_appointments, completion_factory):
        completion = completion_factory(reply="What is your phone number?")
        agent = create_scheduling_agent(completion)

        result = agent.invoke(
            {
                "message": "I pick the first one",
                "context": ConversationState(
                    current_step="collecting_info",
                    patient_info=PatientInfo(name="Ana"),
                    available_dates=sample_appointments,
                ),
            }
        )

        assert result["show_appointments"] is False
        assert result["attached"] == []

    def test_empty_filter_result_is_still_sent_to_model(self, make_appointment, completion_factory):
        completion = completion_factory(reply="No appointments are available then.")
        agent = create_scheduling_agent(completion)

        result = agent.invoke(
            {
                "message": "september appointments",
                "context": ConversationState(
                    available_dates=[make_appointment("2024-10-05", "PM", "Dr. Roberts")],
                ),
            }
        )

        assert result["filtered"] == []
        assert result["show_appointments"] is False
        [(prompt, _)] = completion.calls
        assert "BASED ON USER REQUEST:\n[]" in prompt

    def test_completion_error_escapes_invoke(self, sample_appointments, completion_factory):
        completion = completion_factory(error=CompletionError(ErrorCategory.CREDENTIALS))
        agent = create_scheduling_agent(completion)

        with pytest.raises(CompletionError) as excinfo:
            agent.invoke(
                {"message": "hi", "context": ConversationState(available_dates=sample_appointments)}
            )
        assert excinfo.value.category == ErrorCategory.CREDENTIALS

    def test_pipeline_is_reusable_across_requests(self, sample_appointments, completion_factory):
        completion = completion_factory()
        agent = create_scheduling_agent(completion)
        context = ConversationState(available_dates=sample_appointments)

        kelly = agent.invoke({"message": "kelly", "context": context})
        roberts = agent.invoke({"message": "roberts", "context": context})

        assert {a.doctor for a in kelly["filtered"]} == {Doctor.KELLY}
        assert {a.doctor for a in roberts["filtered"]} == {Doctor.ROBERTS}
