"""FastAPI route definitions for the scheduling API."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from colonoscopy_scheduler.api.schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse
from colonoscopy_scheduler.services.completion import USER_MESSAGES, classify_upstream_error

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_agent(request: Request):
    """Retrieve the compiled scheduling pipeline from app state (set in the lifespan)."""
    agent = getattr(request.app.state, "agent", None)
    if agent is None:
        raise HTTPException(
            status_code=503,
            detail="The scheduler is still starting up. Please try again in a moment.",
        )
    return agent


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ErrorResponse}},
)
async def chat(request: ChatRequest, http_request: Request):
    """Answer one patient message, filtering the offered appointments first.

    The pipeline is synchronous (it blocks on the completion call), so it
    runs in the default thread pool via ``asyncio.to_thread``.
    """
    agent = _get_agent(http_request)
    request_id = getattr(http_request.state, "request_id", "?")
    context = request.context

    logger.info("[%s] Chat turn at step %r", request_id, context.current_step)
    logger.debug(
        "[%s] Message: %r; patient info: %s",
        request_id, request.message, context.patient_info.model_dump(exclude_none=True),
    )

    try:
        result = await asyncio.to_thread(
            agent.invoke, {"message": request.message, "context": context},
        )
    except Exception as exc:
        category = classify_upstream_error(exc)
        # Full traceback stays server-side; the client only sees the friendly text.
        logger.exception("[%s] Chat request failed (%s)", request_id, category.value)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=USER_MESSAGES[category]).model_dump(mode="json"),
        )

    logger.debug("[%s] Reply: %r", request_id, result["reply"])
    return ChatResponse(
        response=result["reply"],
        show_appointments=result["show_appointments"],
        filtered_dates=result["attached"],
    )
