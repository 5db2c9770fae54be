"""Unit tests for correlation ID management.

Tests the correlation ID context management and structlog processor.
"""

import asyncio
import contextvars
import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from prombridge.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_generate_returns_uuid_format(self) -> None:
        """Test that generated ID matches UUID4 format."""
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
            re.IGNORECASE,
        )
        assert uuid_pattern.match(generate_correlation_id()) is not None

    def test_generate_returns_unique_ids(self) -> None:
        """Test that each call returns a unique ID."""
        ids = [generate_correlation_id() for _ in range(100)]
        assert len(set(ids)) == 100


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_set_and_get_correlation_id(self) -> None:
        """Test that set followed by get returns the same ID."""
        set_correlation_id("scrape-1")

        assert get_correlation_id() == "scrape-1"

        set_correlation_id("")

    @pytest.mark.asyncio
    async def test_context_isolation_between_tasks(self) -> None:
        """Test that concurrent scrapes keep their own IDs."""
        results: dict[str, str] = {}

        async def task_with_id(task_name: str, correlation_id: str) -> None:
            set_correlation_id(correlation_id)
            await asyncio.sleep(0.01)
            results[task_name] = get_correlation_id()

        await asyncio.gather(
            task_with_id("task1", "id-for-task-1"),
            task_with_id("task2", "id-for-task-2"),
        )

        assert results == {"task1": "id-for-task-1", "task2": "id-for-task-2"}

    def test_copied_context_reaches_worker_thread(self) -> None:
        """Test a copied context carries the ID into a pool thread."""
        set_correlation_id("scrape-in-worker")
        context = contextvars.copy_context()

        with ThreadPoolExecutor(max_workers=1) as pool:
            seen = pool.submit(context.run, get_correlation_id).result()
            bare = pool.submit(get_correlation_id).result()

        assert seen == "scrape-in-worker"
        assert bare == ""

        set_correlation_id("")


class TestCorrelationIdProcessor:
    """Tests for the structlog correlation ID processor."""

    def test_processor_adds_correlation_id_when_set(self) -> None:
        """Test that processor adds correlation_id to event dict."""
        set_correlation_id("processor-test-id")

        event_dict: dict[str, object] = {"event": "test_event", "key": "value"}
        result = correlation_id_processor(None, "info", event_dict)

        assert result == {
            "event": "test_event",
            "key": "value",
            "correlation_id": "processor-test-id",
        }

        set_correlation_id("")

    def test_processor_skips_when_no_correlation_id(self) -> None:
        """Test that processor does not add empty correlation_id."""
        set_correlation_id("")

        result = correlation_id_processor(None, "info", {"event": "test_event"})

        assert "correlation_id" not in result
