"""Snapshot provider backed by a prometheus_client registry."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry

from prombridge.domain.models.metric_snapshot import MetricFamily, Sample, Snapshot
from prombridge.domain.models.name_filter import NamePredicate


class RegistrySnapshotProvider:
    """Reads snapshots from a ``CollectorRegistry``.

    ``CollectorRegistry.collect`` is thread safe, so one provider can be
    shared by the pull workers and the push task.

    Filtering is applied per sample (series name). A family whose
    samples are all rejected is left out of the snapshot; without a
    filter, families are reported even when they have no samples yet.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the provider.

        Args:
            registry: Registry to read; defaults to prometheus_client's
                process registry.
        """
        self._registry = registry if registry is not None else REGISTRY

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def collect(self, name_filter: NamePredicate | None = None) -> Snapshot:
        snapshot: Snapshot = []
        for metric in self._registry.collect():
            samples = tuple(
                Sample.from_labels(
                    name=sample.name,
                    labels=sample.labels,
                    value=sample.value,
                    timestamp=sample.timestamp,
                    exemplar=sample.exemplar,
                )
                for sample in metric.samples
                if name_filter is None or name_filter.accepts(sample.name)
            )
            if not samples and name_filter is not None:
                continue
            snapshot.append(
                MetricFamily(
                    name=metric.name,
                    help_text=metric.documentation,
                    type=metric.type,
                    samples=samples,
                    unit=metric.unit,
                )
            )
        return snapshot
