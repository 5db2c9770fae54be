"""Metric snapshot provider port."""

from __future__ import annotations

from typing import Protocol

from prombridge.domain.models.metric_snapshot import Snapshot
from prombridge.domain.models.name_filter import NamePredicate


class MetricSnapshotProvider(Protocol):
    """Protocol for reading the current metric snapshot.

    Implementations must be safe to call concurrently from the pull
    workers and the push task. Each call returns a fresh snapshot.
    """

    def collect(self, name_filter: NamePredicate | None = None) -> Snapshot:
        """Return the metric families whose samples pass ``name_filter``.

        Families left with no samples after filtering are omitted.

        Args:
            name_filter: Predicate over series names, or None for all.

        Returns:
            Ordered list of metric families.
        """
        ...


__all__ = ["MetricSnapshotProvider"]
