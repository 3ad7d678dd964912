"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from colonoscopy_scheduler.services.metrics import MetricsClient


def _make_client(*, enabled: bool = True) -> MetricsClient:
    with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}):
        client = MetricsClient()
    client._cw_client = MagicMock()
    return client


def _names(client: MetricsClient) -> list[str]:
    return [m["MetricName"] for m in client._buffer]


def _dims(metric: dict) -> dict[str, str]:
    return {d["Name"]: d["Value"] for d in metric.get("Dimensions", [])}


class TestMetricsRecording:
    def test_completion_success_records_count_and_latency(self):
        client = _make_client()
        client.record_completion(latency_ms=812.5)
        assert _names(client) == ["Completion/Count", "Completion/Latency"]
        assert _dims(client._buffer[0]) == {"Status": "success"}
        assert client._buffer[1]["Value"] == 812.5

    def test_completion_failure_is_dimensioned_by_category(self):
        client = _make_client()
        client.record_completion_failure("rate_limit")
        assert _names(client) == ["Completion/Count", "Completion/Errors"]
        assert _dims(client._buffer[0]) == {"Status": "failure"}
        assert _dims(client._buffer[1]) == {"ErrorCategory": "rate_limit"}

    def test_completion_failure_with_latency_adds_latency_point(self):
        client = _make_client()
        client.record_completion_failure("quota", latency_ms=300.0)
        assert "Completion/Latency" in _names(client)

    def test_filter_records_candidates_and_kept(self):
        client = _make_client()
        client.record_filter(candidates=7, kept=2)
        values = {m["MetricName"]: m["Value"] for m in client._buffer}
        assert values == {"Filter/Candidates": 7, "Filter/Kept": 2}

    def test_filter_that_empties_the_list_is_flagged(self):
        client = _make_client()
        client.record_filter(candidates=7, kept=0)
        assert "Filter/EmptyResults" in _names(client)

    def test_empty_input_is_not_flagged(self):
        client = _make_client()
        client.record_filter(candidates=0, kept=0)
        assert "Filter/EmptyResults" not in _names(client)


class TestMetricsDisabled:
    def test_disabled_client_never_buffers(self):
        client = _make_client(enabled=False)
        for _ in range(50):
            client.record_filter(candidates=4, kept=1)
            client.record_completion(latency_ms=120.0)
            client.record_completion_failure("quota", latency_ms=80.0)
        assert client.pending == 0

    def test_disabled_flush_does_not_call_cloudwatch(self):
        client = _make_client(enabled=False)
        client.record_completion(latency_ms=100.0)
        assert client.flush() == 0
        client._cw_client.put_metric_data.assert_not_called()


class TestMetricsFlush:
    def test_flush_calls_put_metric_data_and_clears(self):
        client = _make_client()
        client.record_completion(latency_ms=100.0)
        assert client.flush() == 2
        assert client.pending == 0

        client._cw_client.put_metric_data.assert_called_once()
        kwargs = client._cw_client.put_metric_data.call_args[1]
        assert kwargs["Namespace"] == "ColonoscopyScheduler"
        assert len(kwargs["MetricData"]) == 2

    def test_flush_empty_buffer_returns_zero(self):
        client = _make_client()
        assert client.flush() == 0

    def test_flush_failure_is_logged_not_raised(self):
        client = _make_client()
        client._cw_client.put_metric_data.side_effect = RuntimeError("throttled")
        client.record_filter(candidates=3, kept=1)
        assert client.flush() == 0
