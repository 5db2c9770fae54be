"""Snapshot value objects read from a metric registry.

A snapshot is an ordered list of MetricFamily, each holding the samples
(time series values) that belong to it. Snapshots are produced fresh for
every scrape or push cycle and are never cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Sample:
    """A single measurement of one time series.

    Label names and values are kept as two parallel tuples, in the
    order the registry reported them. A sample whose tuples differ in
    length is representable; consumers decide how to treat it.

    Attributes:
        name: Series name (e.g. ``http_requests_total`` or ``latency_bucket``).
        label_names: Ordered label names.
        label_values: Ordered label values, parallel to ``label_names``.
        value: Numeric value.
        timestamp: Optional explicit timestamp in seconds since epoch.
        exemplar: Opaque exemplar passed through to the formatter.
    """

    name: str
    label_names: tuple[str, ...] = ()
    label_values: tuple[str, ...] = ()
    value: float = 0.0
    timestamp: float | None = None
    exemplar: Any = None

    @property
    def has_consistent_labels(self) -> bool:
        """True when there is exactly one value per label name."""
        return len(self.label_names) == len(self.label_values)

    @property
    def labels(self) -> dict[str, str]:
        """Labels as an ordered name -> value mapping."""
        return dict(zip(self.label_names, self.label_values))

    @classmethod
    def from_labels(
        cls,
        name: str,
        labels: dict[str, str],
        value: float,
        timestamp: float | None = None,
        exemplar: Any = None,
    ) -> Sample:
        """Build a sample from a label mapping, preserving its order."""
        return cls(
            name=name,
            label_names=tuple(labels.keys()),
            label_values=tuple(labels.values()),
            value=value,
            timestamp=timestamp,
            exemplar=exemplar,
        )


@dataclass(frozen=True)
class MetricFamily:
    """A named group of samples sharing one metric type.

    Attributes:
        name: Family name as reported by the registry.
        help_text: Documentation string.
        type: Metric type tag (``counter``, ``gauge``, ``histogram``, ...).
        samples: Ordered samples belonging to the family.
        unit: Optional unit (OpenMetrics).
    """

    name: str
    help_text: str
    type: str
    samples: tuple[Sample, ...] = field(default_factory=tuple)
    unit: str = ""


Snapshot = list[MetricFamily]
