"""LangGraph pipeline for one scheduling turn.

Architecture:
  A straight-line StateGraph with three nodes:

    1. **filter**    : narrows ``availableDates`` by the keywords in the
                        patient's message
    2. **assistant** : builds the system prompt and makes the single
                        completion call
    3. **classify**  : decides whether the reply should carry the
                        filtered appointments back to the frontend

  Routing:
    filter → assistant → classify → END

  There is no checkpointer.  The frontend owns the conversation state and
  sends it with every message, so each invocation starts from scratch.
  Completion failures propagate out of ``invoke`` as ``CompletionError``.
"""

from __future__ import annotations

import logging

from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from colonoscopy_scheduler.clinic import DEFAULT_CLINIC, ClinicProfile
from colonoscopy_scheduler.models import Appointment, ConversationState
from colonoscopy_scheduler.prompts import build_system_prompt
from colonoscopy_scheduler.services.appointment_filter import (
    DEFAULT_FILTER_RULES,
    FilterRules,
    filter_appointments,
)
from colonoscopy_scheduler.services.completion import AnthropicCompletion, CompletionClient
from colonoscopy_scheduler.services.metrics import metrics
from colonoscopy_scheduler.services.reply_classifier import classify_reply

logger = logging.getLogger(__name__)


class SchedulingState(TypedDict, total=False):
    """Values flowing through the pipeline.

    ``message`` and ``context`` are the inputs; every node adds its own
    outputs and nothing is ever overwritten.
    """

    message: str
    context: ConversationState
    filtered: list[Appointment]
    reply: str
    show_appointments: bool
    attached: list[Appointment]


# ── Nodes ────────────────────────────────────────────────────────────


def _make_filter_node(rules: FilterRules):
    def filter_node(state: SchedulingState) -> dict:
        candidates = state["context"].available_dates
        filtered = filter_appointments(state["message"], candidates, rules)
        metrics.record_filter(candidates=len(candidates), kept=len(filtered))
        logger.debug("Filter kept %d of %d appointments", len(filtered), len(candidates))
        return {"filtered": filtered}

    return filter_node


def _make_assistant_node(completion: CompletionClient, clinic: ClinicProfile):
    def assistant_node(state: SchedulingState) -> dict:
        prompt = build_system_prompt(state["filtered"], state["context"], clinic)
        reply = completion.complete(prompt, state["message"])
        return {"reply": reply}

    return assistant_node


def classify_node(state: SchedulingState) -> dict:
    result = classify_reply(state["reply"], state["filtered"])
    return {
        "show_appointments": result.show_appointments,
        "attached": result.appointments,
    }


# ── Graph assembly ───────────────────────────────────────────────────


def create_scheduling_agent(
    completion: CompletionClient | None = None,
    *,
    rules: FilterRules = DEFAULT_FILTER_RULES,
    clinic: ClinicProfile = DEFAULT_CLINIC,
):
    """Build and compile the scheduling pipeline.

    Returns a compiled graph that can be invoked with:
        graph.invoke({"message": "...", "context": ConversationState(...)})
    """
    graph = StateGraph(SchedulingState)

    graph.add_node("filter", _make_filter_node(rules))
    graph.add_node("assistant", _make_assistant_node(completion or AnthropicCompletion(), clinic))
    graph.add_node("classify", classify_node)

    graph.set_entry_point("filter")
    graph.add_edge("filter", "assistant")
    graph.add_edge("assistant", "classify")
    graph.add_edge("classify", END)

    compiled = graph.compile()
    logger.debug("Scheduling pipeline compiled")
    return compiled
