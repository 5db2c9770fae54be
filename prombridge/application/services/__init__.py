"""Export services: pull-side rendering and the push loop."""

from prombridge.application.services.pull_exporter import (
    HEALTH_PATH,
    HEALTHY_RESPONSE,
    METRICS_PATHS,
    ExportResponse,
    PullExporter,
    parse_name_query,
    should_use_compression,
)
from prombridge.application.services.push_scheduler import (
    PushScheduler,
    next_tick_after,
)

__all__: list[str] = [
    "HEALTH_PATH",
    "HEALTHY_RESPONSE",
    "METRICS_PATHS",
    "ExportResponse",
    "PullExporter",
    "PushScheduler",
    "next_tick_after",
    "parse_name_query",
    "should_use_compression",
]
