"""CloudWatch metrics for the scheduling relay, batched in the background.

Three things are measured:

* completion latency for every successful model call,
* completion failures, dimensioned by error category,
* how far the keyword filter narrowed the candidate list.

Data points are buffered under a lock and pushed by a daemon thread every
``FLUSH_INTERVAL_SECONDS`` when ``METRICS_ENABLED=true``.  Otherwise they are
only logged at DEBUG and never buffered.

>>> from colonoscopy_scheduler.services.metrics import metrics
>>> metrics.record_filter(candidates=12, kept=3)
>>> metrics.record_completion_failure("rate_limit", latency_ms=410.0)
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "ColonoscopyScheduler"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # PutMetricData limit


class MetricsClient:
    """Buffered CloudWatch publisher for scheduling metrics."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Recording ─────────────────────────────────────────────────────

    def record_completion(self, latency_ms: float) -> None:
        """Record a successful completion call."""
        self._point("Completion/Count", 1, "Count", Status="success")
        self._point("Completion/Latency", latency_ms, "Milliseconds")
        logger.debug("Metric: completion success latency=%.1fms", latency_ms)

    def record_completion_failure(self, category: str, latency_ms: float = 0) -> None:
        """Record a failed completion call under its error *category*."""
        self._point("Completion/Count", 1, "Count", Status="failure")
        self._point("Completion/Errors", 1, "Count", ErrorCategory=category)
        if latency_ms > 0:
            self._point("Completion/Latency", latency_ms, "Milliseconds")
        logger.debug(
            "Metric: completion failure category=%s latency=%.1fms", category, latency_ms,
        )

    def record_filter(self, candidates: int, kept: int) -> None:
        """Record one filter run: candidate list size vs. entries kept."""
        self._point("Filter/Candidates", candidates, "Count")
        self._point("Filter/Kept", kept, "Count")
        if candidates and not kept:
            self._point("Filter/EmptyResults", 1, "Count")
        logger.debug("Metric: filter kept %d of %d", kept, candidates)

    # ── Flushing ──────────────────────────────────────────────────────

    def flush(self) -> int:
        """Push buffered points to CloudWatch.  Returns the number sent."""
        with self._lock:
            batch, self._buffer = self._buffer, []

        if not batch:
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._buffer)

    # ── Internal ──────────────────────────────────────────────────────

    def _point(self, name: str, value: float, unit: str, **dimensions: str) -> None:
        # Nothing drains the buffer when disabled, so never fill it.
        if not self._enabled:
            return
        data: dict[str, Any] = {
            "MetricName": name,
            "Timestamp": datetime.now(UTC),
            "Value": value,
            "Unit": unit,
        }
        if dimensions:
            data["Dimensions"] = [{"Name": k, "Value": v} for k, v in dimensions.items()]
        with self._lock:
            self._buffer.append(data)

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        threading.Thread(target=_loop, daemon=True, name="metrics-flush").start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


metrics = MetricsClient()
