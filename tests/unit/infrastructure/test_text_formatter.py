"""Unit tests for PrometheusTextFormatter."""

import io

import pytest
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from prombridge.domain.exceptions import ExpositionError
from prombridge.domain.models.metric_snapshot import MetricFamily, Sample
from prombridge.infrastructure.monitoring.registry_provider import (
    RegistrySnapshotProvider,
)
from prombridge.infrastructure.monitoring.text_formatter import (
    PrometheusTextFormatter,
    to_prometheus_metric,
)

OPENMETRICS = "application/openmetrics-text"


class TestContentNegotiation:
    """Tests for choose_content_type."""

    @pytest.mark.parametrize("accept", [None, "", "text/plain", "*/*"])
    def test_defaults_to_text_format(self, accept: str | None) -> None:
        """Test anything but OpenMetrics gets the classic text format."""
        assert PrometheusTextFormatter().choose_content_type(accept).startswith("text/plain")

    def test_openmetrics_requested(self) -> None:
        """Test the OpenMetrics media type is honoured."""
        content_type = PrometheusTextFormatter().choose_content_type(
            "application/openmetrics-text; version=1.0.0,text/plain;q=0.5"
        )

        assert content_type.startswith(OPENMETRICS)


class TestWrite:
    """Tests for serialization."""

    def test_text_format(self, snapshot: list[MetricFamily]) -> None:
        """Test the classic text format lists every series."""
        out = io.BytesIO()

        PrometheusTextFormatter().write(CONTENT_TYPE_LATEST, out, snapshot)

        text = out.getvalue().decode("utf-8")
        assert "# TYPE jobs_total counter" in text
        assert 'jobs_total{queue="default"} 2.0' in text
        assert "temperature 21.5" in text

    def test_openmetrics_format(self, snapshot: list[MetricFamily]) -> None:
        """Test OpenMetrics output carries its terminator."""
        formatter = PrometheusTextFormatter()
        content_type = formatter.choose_content_type(OPENMETRICS)
        out = io.BytesIO()

        formatter.write(content_type, out, snapshot)

        text = out.getvalue().decode("utf-8")
        assert "# TYPE jobs counter" in text
        assert text.endswith("# EOF\n")

    def test_matches_registry_exposition(self, registry: CollectorRegistry) -> None:
        """Test a registry snapshot renders exactly as the registry itself."""
        snapshot = RegistrySnapshotProvider(registry).collect()
        out = io.BytesIO()

        PrometheusTextFormatter().write(CONTENT_TYPE_LATEST, out, snapshot)

        assert out.getvalue() == generate_latest(registry)

    def test_empty_snapshot(self) -> None:
        """Test an empty snapshot renders an empty body."""
        out = io.BytesIO()

        PrometheusTextFormatter().write(CONTENT_TYPE_LATEST, out, [])

        assert out.getvalue() == b""

    def test_invalid_family_raises_exposition_error(self) -> None:
        """Test encoder failures surface as ExpositionError."""
        bogus = [MetricFamily(name="x", help_text="", type="bogus")]

        with pytest.raises(ExpositionError) as exc_info:
            PrometheusTextFormatter().write(CONTENT_TYPE_LATEST, io.BytesIO(), bogus)

        assert exc_info.value.content_type == CONTENT_TYPE_LATEST


class TestToPrometheusMetric:
    """Tests for to_prometheus_metric."""

    def test_copies_family_and_samples(self) -> None:
        """Test name, type, help and samples are carried over."""
        family = MetricFamily(
            name="temperature",
            help_text="Temperature",
            type="gauge",
            samples=(Sample.from_labels("temperature", {"room": "a"}, 20.0, timestamp=5.0),),
        )

        metric = to_prometheus_metric(family)

        assert (metric.name, metric.type, metric.documentation) == (
            "temperature",
            "gauge",
            "Temperature",
        )
        (sample,) = metric.samples
        assert sample.labels == {"room": "a"}
        assert sample.value == 20.0
        assert sample.timestamp == 5.0
