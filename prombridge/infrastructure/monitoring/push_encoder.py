"""Push encoder for Nightingale-style collectors.

Accumulates samples and ships them as one JSON array per flush:

    [{"timestamp": 1700000000, "metric": "http_requests_total",
      "counterType": "GAUGE", "step": 60, "nid": "1",
      "tags": "app=api,method=GET", "value": 3.0}, ...]

Delivery is fire-and-forget: a failed POST is logged and the batch is
dropped. There is no retry and no requeue; the next cycle carries a
fresh snapshot anyway.
"""

from __future__ import annotations

import json
import math
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from prombridge.config.exporter_config import PushConfig
from prombridge.domain.models.metric_snapshot import Sample
from prombridge.infrastructure.observability.logging import get_logger_for_service

COUNTER_TYPE = "GAUGE"
JSON_CONTENT_TYPE = "application/json"

# Body prefix of a successful Nightingale transfer response
_ACK_DATA = "ok"


def _join_tags(tags: Mapping[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in tags.items())


def _wall_clock_seconds() -> int:
    return int(time.time())


class PushEncoder:
    """Batches samples and POSTs them as JSON records.

    The accumulator is private to the push task that owns the encoder;
    it is not safe to share an encoder between tasks.

    Attributes:
        url: Destination URL.
        step_seconds: Interval reported as ``step``; not used for timing.
        receiver_id: Receiver/tenant identifier reported as ``nid``.
        batch_size: Expected batch size, informational.
        pending: Number of samples waiting for the next flush.
    """

    def __init__(
        self,
        url: str,
        step_seconds: int,
        receiver_id: str = "1",
        batch_size: int = 100,
        tags: Mapping[str, str] | None = None,
        max_batch_size: int | None = None,
        timeout_seconds: float = 10.0,
        clock: Callable[[], int] = _wall_clock_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the encoder.

        Args:
            url: Collector endpoint.
            step_seconds: Push interval reported to the collector.
            receiver_id: Value of the ``nid`` field.
            batch_size: Expected batch size, informational.
            tags: Static tags, joined once here and reused for every batch.
            max_batch_size: When set, ``batch_full`` turns true once this
                many samples are pending.
            timeout_seconds: Upper bound for one POST.
            clock: Source of the per-batch timestamp in epoch seconds.
            transport: Optional httpx transport (tests).
        """
        self.url = url
        self.step_seconds = step_seconds
        self.receiver_id = receiver_id
        self.batch_size = batch_size
        self._max_batch_size = max_batch_size
        self._timeout = timeout_seconds
        self._clock = clock
        self._transport = transport
        self._tag_prefix = _join_tags(tags) if tags else ""
        self._samples: list[Sample] = []
        self._log = get_logger_for_service("push_encoder", component="push").bind(
            url=url
        )

    @classmethod
    def from_config(
        cls,
        config: PushConfig,
        clock: Callable[[], int] = _wall_clock_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> PushEncoder:
        """Create an encoder for a push target."""
        return cls(
            url=config.url,
            step_seconds=config.interval_seconds,
            receiver_id=config.receiver_id,
            batch_size=config.batch_size,
            tags=config.tags,
            max_batch_size=config.max_batch_size,
            timeout_seconds=config.timeout_seconds,
            clock=clock,
            transport=transport,
        )

    @property
    def pending(self) -> int:
        return len(self._samples)

    @property
    def batch_full(self) -> bool:
        """True when a size threshold is configured and has been reached."""
        return (
            self._max_batch_size is not None
            and len(self._samples) >= self._max_batch_size
        )

    def add_sample(self, sample: Sample) -> None:
        """Queue ``sample`` for the next flush."""
        self._samples.append(sample)

    def _tags(self, sample: Sample) -> str:
        pairs = [
            f"{name}={value.replace(' ', '-')}"
            for name, value in zip(sample.label_names, sample.label_values)
        ]
        if self._tag_prefix:
            pairs.insert(0, self._tag_prefix)
        return ",".join(pairs)

    def _record(self, sample: Sample, timestamp: int) -> dict[str, Any] | None:
        """Build the JSON record for ``sample``, or None to skip it."""
        if not sample.has_consistent_labels:
            return None
        if not math.isfinite(sample.value):
            return None
        record: dict[str, Any] = {
            "timestamp": timestamp,
            "metric": sample.name,
            "counterType": COUNTER_TYPE,
            "step": self.step_seconds,
            "nid": self.receiver_id,
        }
        if sample.label_names:
            record["tags"] = self._tags(sample)
        record["value"] = sample.value
        return record

    def marshal_batch(self, timestamp: int) -> str:
        """Serialize the pending samples and clear the accumulator.

        Every record in the batch carries the same ``timestamp``. Samples
        with mismatched label counts or non-finite values are skipped.

        Args:
            timestamp: Epoch seconds applied to the whole batch.

        Returns:
            The JSON array body.
        """
        records = []
        for sample in self._samples:
            record = self._record(sample, timestamp)
            if record is not None:
                records.append(record)
        self._samples.clear()
        return json.dumps(records, separators=(",", ":"))

    async def flush(self) -> bool:
        """Send the pending samples as one batch.

        No-op when nothing is pending. The accumulator is cleared before
        sending, whatever the outcome.

        Returns:
            True if the collector acknowledged the batch.
        """
        if not self._samples:
            return False

        count = len(self._samples)
        body = self.marshal_batch(self._clock())

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.post(
                    self.url,
                    content=body.encode("utf-8"),
                    headers={"Content-Type": JSON_CONTENT_TYPE},
                )
        except httpx.HTTPError as e:
            self._log.warning(
                "push_failed", error=str(e), error_type=type(e).__name__, samples=count
            )
            return False

        if response.status_code >= 300:
            self._log.warning(
                "push_rejected",
                status_code=response.status_code,
                response=response.text[:200],
                samples=count,
            )
            return False

        if not self._acknowledged(response):
            self._log.warning(
                "push_unexpected_response", response=response.text[:200], samples=count
            )
            return False

        self._log.debug("push_sent", samples=count)
        return True

    @staticmethod
    def _acknowledged(response: httpx.Response) -> bool:
        try:
            payload = response.json()
        except ValueError:
            return False
        return isinstance(payload, dict) and payload.get("dat") == _ACK_DATA
