"""Adapters to the metric registry, the text formatter and the push collector."""

from prombridge.infrastructure.monitoring.push_encoder import PushEncoder
from prombridge.infrastructure.monitoring.registry_provider import (
    RegistrySnapshotProvider,
)
from prombridge.infrastructure.monitoring.text_formatter import (
    PrometheusTextFormatter,
    to_prometheus_metric,
)

__all__ = [
    "PrometheusTextFormatter",
    "PushEncoder",
    "RegistrySnapshotProvider",
    "to_prometheus_metric",
]
