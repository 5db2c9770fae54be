"""Domain models for the export pipeline."""

from prombridge.domain.models.metric_snapshot import MetricFamily, Sample, Snapshot
from prombridge.domain.models.name_filter import (
    ACCEPT_ALL,
    AndPredicate,
    NameFilter,
    NameFilterBuilder,
    NamePredicate,
    SampleNameFilter,
    SampleNameFilterBuilder,
    restrict_to_names_equal_to,
    string_to_list,
)

__all__: list[str] = [
    "ACCEPT_ALL",
    "AndPredicate",
    "MetricFamily",
    "NameFilter",
    "NameFilterBuilder",
    "NamePredicate",
    "Sample",
    "SampleNameFilter",
    "SampleNameFilterBuilder",
    "Snapshot",
    "restrict_to_names_equal_to",
    "string_to_list",
]
