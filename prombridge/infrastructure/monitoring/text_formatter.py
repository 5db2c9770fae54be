"""Exposition formatter adapter for prometheus_client's text encoders.

Negotiation and serialization are delegated to prometheus_client:
``choose_encoder`` picks OpenMetrics when the ``Accept`` header asks for
``application/openmetrics-text`` and the classic text format 0.0.4
otherwise.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

from prometheus_client import Metric
from prometheus_client.exposition import choose_encoder

from prombridge.domain.exceptions import ExpositionError
from prombridge.domain.models.metric_snapshot import MetricFamily, Snapshot


def to_prometheus_metric(family: MetricFamily) -> Metric:
    """Convert a snapshot family back into a prometheus_client Metric."""
    metric = Metric(family.name, family.help_text, family.type, family.unit)
    for sample in family.samples:
        metric.add_sample(
            sample.name,
            sample.labels,
            sample.value,
            timestamp=sample.timestamp,
            exemplar=sample.exemplar,
        )
    return metric


class _SnapshotCollector:
    """Registry-shaped view over a snapshot, as the encoders expect."""

    def __init__(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot

    def collect(self) -> Iterator[Metric]:
        for family in self._snapshot:
            yield to_prometheus_metric(family)


class PrometheusTextFormatter:
    """ExpositionFormatter backed by prometheus_client encoders."""

    def choose_content_type(self, accept_header: str | None) -> str:
        _, content_type = choose_encoder(accept_header or "")
        return content_type

    def write(self, content_type: str, out: BinaryIO, snapshot: Snapshot) -> None:
        # A negotiated content type selects the same encoder it came from.
        encoder, _ = choose_encoder(content_type)
        try:
            out.write(encoder(_SnapshotCollector(snapshot)))  # type: ignore[arg-type]
        except (ValueError, TypeError, KeyError) as e:
            raise ExpositionError(content_type, str(e)) from e
