"""Export pipeline configuration.

Configuration objects are created once at startup and passed down
explicitly; nothing here is process-global.

Environment Variables (pull server):
- PROMBRIDGE_HOST: Bind address (default: 0.0.0.0)
- PROMBRIDGE_PORT: Bind port (default: 9000)
- PROMBRIDGE_WORKER_THREADS: Fixed scrape worker pool size (default: 5)

Environment Variables (pull filtering):
- PROMBRIDGE_INCLUDED_PREFIXES: Only export names with one of these prefixes
- PROMBRIDGE_EXCLUDED_PREFIXES: Never export names with one of these prefixes

Environment Variables (push):
- PROMBRIDGE_PUSH_URL: Collector endpoint (default: http://localhost:2080/v1/push)
- PROMBRIDGE_PUSH_INTERVAL: Push interval in seconds (default: 60)
- PROMBRIDGE_PUSH_TIMEOUT: Per-POST timeout in seconds (default: 10.0)

Prefix lists are separated by any of ``, ; space tab newline``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from prombridge.domain.models.name_filter import string_to_list

DEFAULT_PUSH_URL = "http://localhost:2080/v1/push"


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _freeze(values: Iterable[str] | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


@dataclass(frozen=True)
class PullExporterConfig:
    """Static name-prefix restrictions for the pull endpoint.

    Empty collections mean no restriction. When both are non-empty a
    name must satisfy both to be exported.

    Attributes:
        included_prefixes: Only names starting with one of these are exported.
        excluded_prefixes: Names starting with one of these are never exported.
    """

    included_prefixes: tuple[str, ...] = ()
    excluded_prefixes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Copy the given collections into read-only tuples."""
        object.__setattr__(self, "included_prefixes", _freeze(self.included_prefixes))
        object.__setattr__(self, "excluded_prefixes", _freeze(self.excluded_prefixes))

    @classmethod
    def from_environment(cls) -> PullExporterConfig:
        """Create config from PROMBRIDGE_INCLUDED/EXCLUDED_PREFIXES."""
        return cls(
            included_prefixes=tuple(
                string_to_list(os.environ.get("PROMBRIDGE_INCLUDED_PREFIXES"))
            ),
            excluded_prefixes=tuple(
                string_to_list(os.environ.get("PROMBRIDGE_EXCLUDED_PREFIXES"))
            ),
        )


@dataclass(frozen=True)
class PullServerConfig:
    """Bind address and worker pool for the pull HTTP server.

    Attributes:
        host: Address to bind.
        port: Port to bind; 0 lets the OS pick one.
        worker_threads: Fixed number of scrape workers. Excess concurrent
            scrapes queue instead of spawning threads.
        daemon: Run the server thread as a daemon thread.
        keep_alive_timeout_seconds: Idle keep-alive connection timeout.
        graceful_shutdown_timeout_seconds: Upper bound for draining
            in-flight requests on stop.
    """

    host: str = "0.0.0.0"
    port: int = 9000
    worker_threads: int = 5
    daemon: bool = False
    keep_alive_timeout_seconds: int = 60
    graceful_shutdown_timeout_seconds: int = 10

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {self.port}")
        if self.worker_threads < 1:
            raise ValueError(
                f"worker_threads must be positive, got {self.worker_threads}"
            )
        if self.keep_alive_timeout_seconds < 1:
            raise ValueError(
                "keep_alive_timeout_seconds must be positive, "
                f"got {self.keep_alive_timeout_seconds}"
            )
        if self.graceful_shutdown_timeout_seconds < 1:
            raise ValueError(
                "graceful_shutdown_timeout_seconds must be positive, "
                f"got {self.graceful_shutdown_timeout_seconds}"
            )

    @classmethod
    def from_environment(cls) -> PullServerConfig:
        """Create config from PROMBRIDGE_HOST/PORT/WORKER_THREADS."""
        return cls(
            host=os.environ.get("PROMBRIDGE_HOST", "0.0.0.0"),
            port=_get_int_env("PROMBRIDGE_PORT", 9000),
            worker_threads=_get_int_env("PROMBRIDGE_WORKER_THREADS", 5),
        )


@dataclass(frozen=True)
class PushConfig:
    """Push target configuration.

    Attributes:
        url: Collector endpoint receiving the JSON batches.
        interval_seconds: Push interval; also reported as ``step``.
        receiver_id: Receiver/tenant identifier reported as ``nid``.
        batch_size: Expected batch size, informational.
        max_batch_size: When set, a batch is sent as soon as it holds
            this many samples instead of once per cycle.
        tags: Static tags prepended to every labelled sample's tags.
        timeout_seconds: Upper bound for one POST.
    """

    url: str = DEFAULT_PUSH_URL
    interval_seconds: int = 60
    receiver_id: str = "1"
    batch_size: int = 100
    max_batch_size: int | None = None
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)
    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        """Validate configuration values and copy the tag mapping."""
        if not self.url:
            raise ValueError("url must not be empty")
        if self.interval_seconds < 1:
            raise ValueError(
                f"interval_seconds must be at least 1, got {self.interval_seconds}"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_batch_size is not None and self.max_batch_size < 1:
            raise ValueError(
                f"max_batch_size must be positive, got {self.max_batch_size}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        object.__setattr__(self, "tags", dict(self.tags))

    @classmethod
    def from_environment(cls, tags: Mapping[str, str] | None = None) -> PushConfig:
        """Create config from PROMBRIDGE_PUSH_* variables.

        Args:
            tags: Static tags; not read from the environment.
        """
        return cls(
            url=os.environ.get("PROMBRIDGE_PUSH_URL", DEFAULT_PUSH_URL),
            interval_seconds=_get_int_env("PROMBRIDGE_PUSH_INTERVAL", 60),
            timeout_seconds=_get_float_env("PROMBRIDGE_PUSH_TIMEOUT", 10.0),
            tags=tags or {},
        )


DEFAULT_PULL_EXPORTER_CONFIG = PullExporterConfig()
