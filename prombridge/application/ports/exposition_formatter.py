"""Exposition formatter port for pull-side output."""

from __future__ import annotations

from typing import BinaryIO, Protocol

from prombridge.domain.models.metric_snapshot import Snapshot


class ExpositionFormatter(Protocol):
    """Protocol for negotiating and writing a text exposition format."""

    def choose_content_type(self, accept_header: str | None) -> str:
        """Pick the response content type for an ``Accept`` header."""
        ...

    def write(self, content_type: str, out: BinaryIO, snapshot: Snapshot) -> None:
        """Serialize ``snapshot`` into ``out`` using ``content_type``.

        Raises:
            ExpositionError: If the snapshot cannot be rendered.
        """
        ...


__all__ = ["ExpositionFormatter"]
