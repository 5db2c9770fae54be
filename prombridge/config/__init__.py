"""Configuration module for prombridge.

Available Configurations:
- PullExporterConfig: Static include/exclude prefixes for scrapes
- PullServerConfig: Bind address and worker pool of the pull server
- PushConfig: Push target, interval and static tags
"""

from prombridge.config.exporter_config import (
    DEFAULT_PULL_EXPORTER_CONFIG,
    DEFAULT_PUSH_URL,
    PullExporterConfig,
    PullServerConfig,
    PushConfig,
)

__all__ = [
    "DEFAULT_PULL_EXPORTER_CONFIG",
    "DEFAULT_PUSH_URL",
    "PullExporterConfig",
    "PullServerConfig",
    "PushConfig",
]
