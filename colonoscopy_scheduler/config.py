"""Centralized configuration for the Colonoscopy Scheduler API.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/colonoscopy-scheduler/<VARIABLE_NAME>``.
Clinic data (schedules, keyword tables) lives in code, not here.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))
_SSM_PREFIX = "/colonoscopy-scheduler"


def _ssm_path(name: str) -> str:
    return f"{_SSM_PREFIX}/{name}"


def _get_ssm_parameter(name: str) -> str | None:
    """Read a decrypted SecureString from Parameter Store; ``None`` on any failure."""
    try:
        import boto3  # noqa: PLC0415 (only needed on AWS)

        parameter = boto3.client("ssm").get_parameter(Name=_ssm_path(name), WithDecryption=True)
    except Exception:
        logger.debug("No SSM value for %s at %s", name, _ssm_path(name))
        return None
    return parameter["Parameter"]["Value"]


def _is_placeholder(value: str | None) -> bool:
    # .env.example ships values like "your_anthropic_key_here"
    return not value or value.startswith("your_")


def _require_env(name: str) -> str:
    """Resolve *name* from the environment, then SSM on AWS, else raise ``OSError``."""
    value = os.getenv(name)
    if _is_placeholder(value) and _ON_AWS:
        value = _get_ssm_parameter(name)
        if value:
            logger.info("Loaded %s from SSM", name)
    if _is_placeholder(value):
        raise OSError(
            f"{name} is not configured: set it in .env for local runs "
            f"or as SSM parameter {_ssm_path(name)} on AWS."
        )
    return value


# ── LLM ─────────────────────────────────────────────────────────────
ANTHROPIC_API_KEY: str = _require_env("ANTHROPIC_API_KEY")
MODEL_NAME: str = os.getenv("MODEL_NAME", "claude-haiku-4-5")

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", os.getenv("PORT", "3001")))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,https://peaceful-khapse-24ced0.netlify.app",
).split(",")
# Preview deployments get a fresh subdomain each time.
CORS_ORIGIN_REGEX: str = os.getenv(
    "CORS_ORIGIN_REGEX", r"https://.*\.(netlify\.app|onrender\.com)",
)
