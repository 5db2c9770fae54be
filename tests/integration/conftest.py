"""
Integration test configuration.

Integration tests run the real HTTP stack: uvicorn bound to an
OS-assigned loopback port, and httpx as the client.

Usage:
    @pytest.mark.integration
    def test_example(pull_server: PullServer) -> None:
        response = httpx.get(f"http://127.0.0.1:{pull_server.port}/metrics")
"""

from collections.abc import Generator

import pytest
from prometheus_client import CollectorRegistry

from prombridge.api.server import PullServer
from prombridge.application.services.pull_exporter import PullExporter
from prombridge.config.exporter_config import PullExporterConfig, PullServerConfig
from prombridge.infrastructure.monitoring.registry_provider import (
    RegistrySnapshotProvider,
)
from prombridge.infrastructure.monitoring.text_formatter import (
    PrometheusTextFormatter,
)


@pytest.fixture
def pull_server(registry: CollectorRegistry) -> Generator[PullServer, None, None]:
    """Running pull server over the shared test registry."""
    exporter = PullExporter(
        RegistrySnapshotProvider(registry),
        PrometheusTextFormatter(),
        PullExporterConfig(excluded_prefixes=("request_latency",)),
    )
    server = PullServer(
        exporter,
        PullServerConfig(host="127.0.0.1", port=0, worker_threads=2, daemon=True),
    )
    server.start()
    yield server
    server.stop()
