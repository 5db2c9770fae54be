"""Pull-side exporter: renders the current snapshot for one scrape.

The exporter is framework-agnostic. The HTTP layer hands it the request
path, raw query string and the ``Accept``/``Accept-Encoding`` headers and
sends back the returned ExportResponse.

Per scrape:
1. ``/-/healthy`` answers with a fixed body; no snapshot is read.
2. The content type is negotiated from ``Accept``.
3. Repeated ``name[]=<name>`` query parameters restrict the scrape to
   exactly those series names, ANDed with the static prefix config.
4. The filtered snapshot is serialized into a buffer owned by the
   executing worker thread, reset (not reallocated) per scrape.
5. The buffer is gzip-compressed into chunks when ``Accept-Encoding``
   lists ``gzip``; otherwise it is returned as-is with its length.

Concurrency:
    ``handle`` is safe to call from any number of worker threads. Buffers
    are thread-local and never shared between concurrent scrapes. The
    returned response owns copies of the bytes, so the worker may start
    the next scrape while the previous response is still being sent.
"""

from __future__ import annotations

import io
import threading
import zlib
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import unquote_plus


from prombridge.application.ports.exposition_formatter import ExpositionFormatter
from prombridge.application.ports.metric_snapshot_provider import (
    MetricSnapshotProvider,
)
from prombridge.config.exporter_config import (
    DEFAULT_PULL_EXPORTER_CONFIG,
    PullExporterConfig,
)
from prombridge.domain.models.name_filter import NameFilter
from prombridge.infrastructure.observability.logging import get_logger_for_service

HEALTH_PATH = "/-/healthy"
METRICS_PATHS = ("/", "/metrics")
HEALTHY_RESPONSE = "Exporter is Healthy."
HEALTH_CONTENT_TYPE = "text/plain; charset=utf-8"

NAME_QUERY_PARAMETER = "name[]"

# Slice size fed to the gzip compressor
GZIP_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ExportResponse:
    """Rendered scrape, ready to be written by the HTTP layer.

    Attributes:
        content_type: Negotiated response content type.
        chunks: Body chunks; gzip members when ``compressed``.
        compressed: Whether the chunks are gzip-compressed. Compressed
            responses are sent chunked, without a Content-Length.
    """

    content_type: str
    chunks: tuple[bytes, ...]
    compressed: bool = False

    @property
    def body(self) -> bytes:
        """The full body as sent on the wire."""
        return b"".join(self.chunks)

    @property
    def headers(self) -> dict[str, str]:
        """Encoding headers for this response."""
        if self.compressed:
            return {"Content-Encoding": "gzip"}
        return {"Content-Length": str(sum(len(chunk) for chunk in self.chunks))}


def parse_name_query(raw_query: str | None) -> set[str]:
    """Extract the ``name[]`` values from a raw query string.

    Keys and values are URL-decoded (``+`` decodes to a space). Segments
    without ``=`` are ignored rather than rejected.

    Args:
        raw_query: The undecoded query string, without the leading ``?``.

    Returns:
        The set of requested series names; empty when none were given.
    """
    names: set[str] = set()
    if not raw_query:
        return names
    for pair in raw_query.split("&"):
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        if unquote_plus(key) == NAME_QUERY_PARAMETER:
            names.add(unquote_plus(value))
    return names


def should_use_compression(accept_encoding: Iterable[str] | str | None) -> bool:
    """Return True if any ``Accept-Encoding`` token is ``gzip``.

    Args:
        accept_encoding: One header value, or all values when the header
            was repeated.
    """
    if accept_encoding is None:
        return False
    if isinstance(accept_encoding, str):
        accept_encoding = [accept_encoding]
    for header in accept_encoding:
        for encoding in header.split(","):
            if encoding.strip().lower() == "gzip":
                return True
    return False


def gzip_chunks(
    data: bytes | memoryview, chunk_size: int = GZIP_CHUNK_SIZE
) -> tuple[bytes, ...]:
    """Compress ``data`` with a streaming gzip compressor.

    Returns:
        Non-empty compressed chunks forming one gzip member.
    """
    compressor = zlib.compressobj(6, zlib.DEFLATED, zlib.MAX_WBITS | 16)
    view = memoryview(data)
    chunks: list[bytes] = []
    for start in range(0, len(view), chunk_size):
        compressed = compressor.compress(view[start : start + chunk_size])
        if compressed:
            chunks.append(compressed)
    chunks.append(compressor.flush())
    return tuple(chunks)


class PullExporter:
    """Renders filtered, negotiated, optionally compressed scrapes.

    Attributes:
        config: Static include/exclude prefix configuration.

    Example:
        >>> exporter = PullExporter(provider, formatter)
        >>> response = exporter.handle("/metrics", "name[]=up", "text/plain", "gzip")
    """

    def __init__(
        self,
        provider: MetricSnapshotProvider,
        formatter: ExpositionFormatter,
        config: PullExporterConfig = DEFAULT_PULL_EXPORTER_CONFIG,
    ) -> None:
        """Initialize the exporter.

        Args:
            provider: Source of metric snapshots.
            formatter: Exposition formatter used for negotiation and output.
            config: Static prefix restrictions applied to every scrape.
        """
        self._provider = provider
        self._formatter = formatter
        self._config = config
        self._static_filter: NameFilter | None = None
        if config.included_prefixes or config.excluded_prefixes:
            self._static_filter = self._build_filter(())
        self._local = threading.local()
        self._log = get_logger_for_service("pull_exporter", component="pull")

    @property
    def config(self) -> PullExporterConfig:
        return self._config

    def _build_filter(self, names: Iterable[str]) -> NameFilter:
        return (
            NameFilter.builder()
            .include_names(names)
            .include_prefixes(self._config.included_prefixes)
            .exclude_prefixes(self._config.excluded_prefixes)
            .build()
        )

    def filter_for(self, requested_names: set[str]) -> NameFilter | None:
        """Return the filter for a scrape requesting ``requested_names``.

        Without requested names the filter only depends on the static
        config and is shared between scrapes. It is None when the config
        restricts nothing, so families without samples are still exposed.
        """
        if not requested_names:
            return self._static_filter
        return self._build_filter(requested_names)

    def _buffer(self) -> io.BytesIO:
        """Return this worker thread's buffer, emptied for a new scrape."""
        buffer: io.BytesIO | None = getattr(self._local, "buffer", None)
        if buffer is None:
            buffer = io.BytesIO()
            self._local.buffer = buffer
        buffer.seek(0)
        buffer.truncate()
        return buffer

    def handle(
        self,
        path: str,
        raw_query: str | None = None,
        accept: str | None = None,
        accept_encoding: Iterable[str] | str | None = None,
    ) -> ExportResponse:
        """Render one scrape.

        Args:
            path: Request path (``/``, ``/metrics`` or ``/-/healthy``).
            raw_query: Undecoded query string.
            accept: ``Accept`` request header.
            accept_encoding: ``Accept-Encoding`` header value(s).

        Returns:
            The rendered response.

        Raises:
            ExpositionError: If negotiation or serialization fails.
        """
        buffer = self._buffer()

        if path == HEALTH_PATH:
            content_type = HEALTH_CONTENT_TYPE
            buffer.write(HEALTHY_RESPONSE.encode("utf-8"))
            families = 0
        else:
            content_type = self._formatter.choose_content_type(accept)
            name_filter = self.filter_for(parse_name_query(raw_query))
            snapshot = self._provider.collect(name_filter)
            self._formatter.write(content_type, buffer, snapshot)
            families = len(snapshot)

        compressed = should_use_compression(accept_encoding)
        if compressed:
            with buffer.getbuffer() as view:
                chunks = gzip_chunks(view)
        else:
            chunks = (buffer.getvalue(),)

        self._log.debug(
            "metrics_scrape_served",
            path=path,
            content_type=content_type,
            families=families,
            size_bytes=buffer.tell(),
            compressed=compressed,
        )
        return ExportResponse(
            content_type=content_type, chunks=chunks, compressed=compressed
        )
