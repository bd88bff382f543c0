"""Tests for Prometheus metrics."""

from __future__ import annotations

from prometheus_client import REGISTRY

from s3_ilm_operator.metrics import (
    api_call_duration_seconds,
    api_call_total,
    drift_detected_total,
    lifecycle_operations_total,
    lifecycle_rules,
    lifecycle_rules_written_total,
    reconcile_duration_seconds,
    reconcile_total,
    throttled_calls_total,
)


class TestMetricsDefinitions:
    """Test that metrics are registered under the operator prefix."""

    def test_counter_names(self):
        """Test counter names (the _total suffix is added on exposition)."""
        assert reconcile_total._name == "s3_ilm_operator_reconcile"
        assert drift_detected_total._name == "s3_ilm_operator_drift_detected"
        assert lifecycle_operations_total._name == "s3_ilm_operator_lifecycle_operations"
        assert lifecycle_rules_written_total._name == "s3_ilm_operator_lifecycle_rules_written"
        assert api_call_total._name == "s3_ilm_operator_api_call"
        assert throttled_calls_total._name == "s3_ilm_operator_throttled_calls"

    def test_gauge_and_histogram_names(self):
        """Test gauge and histogram names."""
        assert lifecycle_rules._name == "s3_ilm_operator_lifecycle_rules"
        assert reconcile_duration_seconds._name == "s3_ilm_operator_reconcile_duration_seconds"
        assert api_call_duration_seconds._name == "s3_ilm_operator_api_call_duration_seconds"

    def test_label_names(self):
        """Test the labels of each labelled metric."""
        assert reconcile_total._labelnames == ("result",)
        assert drift_detected_total._labelnames == ("namespace", "policy")
        assert lifecycle_operations_total._labelnames == ("operation", "result")
        assert lifecycle_rules._labelnames == ("namespace", "policy")
        assert api_call_total._labelnames == ("api_type", "operation", "result")
        assert api_call_duration_seconds._labelnames == ("api_type", "operation")
        assert throttled_calls_total._labelnames == ("api_type",)


class TestMetricsRecording:
    """Test that recorded values are exposed through the default registry."""

    def test_gauge_per_policy(self):
        """Test that the rule gauge is kept per namespace and policy."""
        lifecycle_rules.labels(namespace="metrics-test", policy="p1").set(3)
        lifecycle_rules.labels(namespace="metrics-test", policy="p2").set(1)

        assert REGISTRY.get_sample_value(
            "s3_ilm_operator_lifecycle_rules", {"namespace": "metrics-test", "policy": "p1"}
        ) == 3
        assert REGISTRY.get_sample_value(
            "s3_ilm_operator_lifecycle_rules", {"namespace": "metrics-test", "policy": "p2"}
        ) == 1

    def test_throttled_counter(self):
        """Test that throttled calls are counted per API."""
        labels = {"api_type": "metrics-test"}
        before = REGISTRY.get_sample_value("s3_ilm_operator_throttled_calls_total", labels) or 0

        throttled_calls_total.labels(**labels).inc()

        assert REGISTRY.get_sample_value("s3_ilm_operator_throttled_calls_total", labels) == before + 1
