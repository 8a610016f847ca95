"""Tests for metrics module."""

from roome.metrics import (
    COMPONENT_RENDERS_TOTAL,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    normalize_path,
    record_render,
    record_tracking_failure,
    record_usage_event,
)


class TestMetricsOutput:
    """Tests for metrics output generation."""

    def test_get_metrics_returns_bytes(self):
        assert isinstance(get_metrics(), bytes)

    def test_get_metrics_content_type(self):
        content_type = get_metrics_content_type()
        assert "text/plain" in content_type or "openmetrics" in content_type

    def test_get_metrics_contains_custom_metrics(self):
        output = get_metrics().decode("utf-8")
        assert "roome_http_requests_total" in output
        assert "roome_component_renders_total" in output


class TestNormalizePath:
    """Tests for endpoint label normalization."""

    def test_uuid(self):
        path = "/api/ui-components/550e8400-e29b-41d4-a716-446655440000/analytics"
        assert normalize_path(path) == "/api/ui-components/{id}/analytics"

    def test_component_name(self):
        assert normalize_path("/api/ui-components/name/promo-banner") == (
            "/api/ui-components/name/{name}"
        )

    def test_static_path(self):
        assert normalize_path("/api/ui-components/track-usage") == "/api/ui-components/track-usage"

    def test_exclude_paths(self):
        assert "/metrics" in MetricsMiddleware.EXCLUDE_PATHS
        assert "/api/health" in MetricsMiddleware.EXCLUDE_PATHS
        assert "/api/ready" in MetricsMiddleware.EXCLUDE_PATHS


class TestComponentMetrics:
    """Tests for component metric recording functions."""

    def test_record_render_increments(self):
        counter = COMPONENT_RENDERS_TOTAL.labels(branch="card", outcome="ok")
        before = counter._value.get()
        record_render("card", "ok")
        assert counter._value.get() == before + 1

    def test_record_usage_event(self):
        # Should not raise
        record_usage_event()

    def test_record_tracking_failure(self):
        # Should not raise
        record_tracking_failure()


class TestMetricLabels:
    """Tests for metric label validation."""

    def test_request_count_labels(self):
        assert REQUEST_COUNT._labelnames == ("method", "endpoint", "status_code")

    def test_request_latency_labels(self):
        assert REQUEST_LATENCY._labelnames == ("method", "endpoint")

    def test_render_labels(self):
        assert COMPONENT_RENDERS_TOTAL._labelnames == ("branch", "outcome")
