"""
Pytest configuration and shared fixtures for prombridge tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from prombridge.domain.models.metric_snapshot import MetricFamily, Sample


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from prombridge import __version__

    return __version__


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated registry with one counter, one gauge and one histogram."""
    registry = CollectorRegistry()

    requests = Counter(
        "http_requests",
        "HTTP requests handled",
        ["method"],
        registry=registry,
    )
    requests.labels(method="GET").inc(3)
    requests.labels(method="POST").inc()

    queue_depth = Gauge("queue_depth", "Items waiting", registry=registry)
    queue_depth.set(7)

    latency = Histogram(
        "request_latency_seconds",
        "Request latency",
        buckets=(0.1, 1.0),
        registry=registry,
    )
    latency.observe(0.05)

    return registry


@pytest.fixture
def snapshot() -> list[MetricFamily]:
    """Small hand-built snapshot."""
    return [
        MetricFamily(
            name="jobs",
            help_text="Jobs processed",
            type="counter",
            samples=(
                Sample.from_labels("jobs_total", {"queue": "default"}, 2.0),
                Sample.from_labels("jobs_total", {"queue": "slow"}, 1.0),
            ),
        ),
        MetricFamily(
            name="temperature",
            help_text="Temperature",
            type="gauge",
            samples=(Sample("temperature", value=21.5),),
        ),
    ]
