"""FastAPI server for the Colonoscopy Scheduler API.

Run with:
    uv run uvicorn colonoscopy_scheduler.server:app --reload --host 0.0.0.0 --port 3001
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from colonoscopy_scheduler.agent import create_scheduling_agent
from colonoscopy_scheduler.api.routes import router
from colonoscopy_scheduler.config import CORS_ORIGIN_REGEX, CORS_ORIGINS, SERVER_HOST, SERVER_PORT

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: build the pipeline once ────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Compile the scheduling pipeline and keep it in app state.

    The pipeline holds no per-request data, so one instance serves every
    request for the lifetime of the process.
    """
    logger.info("Compiling scheduling pipeline…")
    application.state.agent = create_scheduling_agent()
    logger.info("Scheduler ready.")
    yield


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Colonoscopy Scheduler API",
    description=(
        "Chat relay that filters the offered colonoscopy appointments and "
        "lets an LLM walk the patient through booking."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_origin_regex=CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Tag every request with an ID, echoed in ``X-Request-ID`` and the logs."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("[%s] Unhandled error on %s", request_id, request.url.path)
        response = _error(500, "Internal server error")
    response.headers["X-Request-ID"] = request_id
    return response


# ── Error envelopes ──────────────────────────────────────────────────
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "success": False,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error(404, "Endpoint not found")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _error(500, "Internal server error")


# ── Register routes ──────────────────────────────────────────────────
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Liveness check with pointers to the docs and health endpoint."""
    return {
        "message": "Colonoscopy Scheduler API is running!",
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    logger.info("Starting Colonoscopy Scheduler API on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "colonoscopy_scheduler.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
