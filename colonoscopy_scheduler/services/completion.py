"""Completion collaborator: one system prompt + one user message in, reply text out.

The Anthropic chat model is reached through ``langchain_anthropic``.  A
request is sent exactly once; the SDK's own retry loop is disabled so a
failure surfaces immediately as a :class:`CompletionError` with a category
the API layer can turn into a user-facing message.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Protocol

import anthropic
from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage

from colonoscopy_scheduler.config import ANTHROPIC_API_KEY, MODEL_NAME
from colonoscopy_scheduler.services.metrics import metrics

logger = logging.getLogger(__name__)

# ── Sampling parameters (fixed, not tunable per request) ─────────────
MAX_OUTPUT_TOKENS = 500
TEMPERATURE = 0.7


class ErrorCategory(str, Enum):
    CREDENTIALS = "credentials"
    RATE_LIMIT = "rate_limit"
    QUOTA = "quota"
    UNCLASSIFIED = "unclassified"


USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.CREDENTIALS: "API configuration error. Please contact support.",
    ErrorCategory.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
    ErrorCategory.QUOTA: "Service temporarily unavailable. Please try again later.",
    ErrorCategory.UNCLASSIFIED: "Sorry, I had trouble processing that. Please try again.",
}

# Error codes as reported by the provider, in either the Anthropic
# ``error.type`` form or the OpenAI-style ``code`` form.
_CODE_CATEGORIES: dict[str, ErrorCategory] = {
    "invalid_api_key": ErrorCategory.CREDENTIALS,
    "authentication_error": ErrorCategory.CREDENTIALS,
    "rate_limit_exceeded": ErrorCategory.RATE_LIMIT,
    "rate_limit_error": ErrorCategory.RATE_LIMIT,
    "insufficient_quota": ErrorCategory.QUOTA,
    "billing_error": ErrorCategory.QUOTA,
}


class CompletionError(Exception):
    """Raised when the completion call fails, tagged with an :class:`ErrorCategory`."""

    def __init__(self, category: ErrorCategory, message: str | None = None):
        self.category = category
        super().__init__(message or category.value)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.category]


class CompletionClient(Protocol):
    def complete(self, system_prompt: str, user_message: str) -> str: ...


def _error_code(exc: BaseException) -> str | None:
    """Pull a provider error code off *exc* (``code`` attr or JSON body)."""
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code

    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict):
            for key in ("code", "type"):
                if isinstance(error.get(key), str):
                    return error[key]
    return None


def classify_upstream_error(exc: BaseException) -> ErrorCategory:
    """Map an upstream exception onto the error taxonomy."""
    if isinstance(exc, CompletionError):
        return exc.category
    if isinstance(exc, anthropic.AuthenticationError):
        return ErrorCategory.CREDENTIALS
    if isinstance(exc, anthropic.RateLimitError):
        return ErrorCategory.RATE_LIMIT

    code = _error_code(exc)
    if code in _CODE_CATEGORIES:
        return _CODE_CATEGORIES[code]
    if "credit balance" in str(exc).lower():
        return ErrorCategory.QUOTA
    return ErrorCategory.UNCLASSIFIED


def _reply_text(content: Any) -> str:
    """Flatten a chat-model message content (str or block list) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def _build_llm() -> ChatAnthropic:
    return ChatAnthropic(
        model=MODEL_NAME,
        api_key=ANTHROPIC_API_KEY,
        temperature=TEMPERATURE,
        max_tokens=MAX_OUTPUT_TOKENS,
        max_retries=0,
    )


class AnthropicCompletion:
    """:class:`CompletionClient` backed by an Anthropic chat model."""

    def __init__(self, llm: ChatAnthropic | None = None) -> None:
        self._llm = llm or _build_llm()

    def complete(self, system_prompt: str, user_message: str) -> str:
        t0 = time.perf_counter()
        try:
            response = self._llm.invoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=user_message)]
            )
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            category = classify_upstream_error(exc)
            metrics.record_completion_failure(category.value, latency_ms=elapsed)
            logger.warning(
                "Completion failed after %.0fms (%s: %s)",
                elapsed, category.value, type(exc).__name__,
            )
            raise CompletionError(category, str(exc)) from exc

        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_completion(latency_ms=elapsed)
        logger.debug("Completion returned in %.0fms", elapsed)
        return _reply_text(response.content)
