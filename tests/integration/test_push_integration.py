"""Integration tests for the push path against an in-process collector.

The collector is a FastAPI app speaking the Nightingale transfer
protocol, reached through httpx's ASGI transport.
"""

from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Request
from prometheus_client import CollectorRegistry

from prombridge.application.services.push_scheduler import PushScheduler
from prombridge.config.exporter_config import PushConfig
from prombridge.domain.models.name_filter import NameFilter
from prombridge.infrastructure.monitoring.push_encoder import PushEncoder
from prombridge.infrastructure.monitoring.registry_provider import (
    RegistrySnapshotProvider,
)

pytestmark = pytest.mark.integration


def _collector(received: list[list[dict[str, Any]]]) -> FastAPI:
    app = FastAPI()

    @app.post("/v1/push")
    async def push(request: Request) -> dict[str, str]:
        received.append(await request.json())
        return {"dat": "ok", "err": ""}

    return app


@pytest.mark.asyncio
async def test_push_cycle_reaches_collector(registry: CollectorRegistry) -> None:
    """Test one push cycle delivers the filtered registry as JSON records."""
    received: list[list[dict[str, Any]]] = []
    encoder = PushEncoder.from_config(
        PushConfig(
            url="http://collector/v1/push",
            interval_seconds=30,
            tags={"app": "api"},
        ),
        clock=lambda: 1700000000,
        transport=httpx.ASGITransport(app=_collector(received)),
    )
    scheduler = PushScheduler(
        RegistrySnapshotProvider(registry),
        encoder,
        interval_seconds=30,
        name_filter=NameFilter.builder().include_prefixes(["http_requests_total"]).build(),
    )

    assert await scheduler.push_once() is True

    (batch,) = received
    assert sorted(record["tags"] for record in batch) == [
        "app=api,method=GET",
        "app=api,method=POST",
    ]
    assert {record["step"] for record in batch} == {30}
    assert {record["timestamp"] for record in batch} == {1700000000}


@pytest.mark.asyncio
async def test_threshold_flush_splits_batches(registry: CollectorRegistry) -> None:
    """Test max_batch_size sends several batches in one cycle."""
    received: list[list[dict[str, Any]]] = []
    encoder = PushEncoder.from_config(
        PushConfig(url="http://collector/v1/push", max_batch_size=2),
        transport=httpx.ASGITransport(app=_collector(received)),
    )
    scheduler = PushScheduler(
        RegistrySnapshotProvider(registry), encoder, interval_seconds=60
    )

    await scheduler.push_once()

    assert len(received) > 1
    assert all(len(batch) <= 2 for batch in received)
