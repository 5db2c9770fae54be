"""Ports to the external collaborators of the export pipeline."""

from prombridge.application.ports.exposition_formatter import ExpositionFormatter
from prombridge.application.ports.metric_snapshot_provider import (
    MetricSnapshotProvider,
)

__all__: list[str] = ["ExpositionFormatter", "MetricSnapshotProvider"]
