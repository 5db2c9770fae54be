"""Composition root wiring a registry to the pull server and push loops.

MetricsRuntime replaces process-wide defaults with one explicitly
constructed object: it owns the registry adapter, the global tags and
everything it starts.

Global tags:
    ``bu``, ``project`` and ``app`` are always set; ``pid`` is taken from
    the ``MY_POD_NAME`` environment variable, else ``<pid>@<hostname>``.
    They are sent as static tags on every push.
"""

from __future__ import annotations

import os
import socket
from collections.abc import Mapping

from prometheus_client import CollectorRegistry

from prombridge.api.server import PullServer
from prombridge.application.services.pull_exporter import PullExporter
from prombridge.application.services.push_scheduler import PushScheduler
from prombridge.config.exporter_config import (
    DEFAULT_PUSH_URL,
    PullExporterConfig,
    PullServerConfig,
    PushConfig,
)
from prombridge.domain.models.name_filter import NamePredicate
from prombridge.infrastructure.monitoring.push_encoder import PushEncoder
from prombridge.infrastructure.monitoring.registry_provider import (
    RegistrySnapshotProvider,
)
from prombridge.infrastructure.monitoring.text_formatter import (
    PrometheusTextFormatter,
)
from prombridge.infrastructure.observability.logging import get_logger_for_service

POD_NAME_ENV = "MY_POD_NAME"


def _process_identity() -> str:
    pod_name = os.environ.get(POD_NAME_ENV)
    if pod_name:
        return pod_name
    return f"{os.getpid()}@{socket.gethostname()}"


class MetricsRuntime:
    """Starts and stops the export paths for one registry.

    Example:
        >>> runtime = MetricsRuntime("infra", "metrics", "api", registry=registry)
        >>> server = runtime.start_pull_server(9000)
        >>> scheduler = await runtime.start_push_loop(60, "http://n9e:2080/v1/push")
        >>> ...
        >>> await runtime.stop()
    """

    def __init__(
        self,
        bu: str,
        project: str,
        app: str,
        global_tags: Mapping[str, str] | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize the runtime.

        Args:
            bu: Business unit tag.
            project: Project tag.
            app: Application tag.
            global_tags: Extra static tags; bu/project/app/pid win on clash.
            registry: Registry to export; defaults to prometheus_client's.
        """
        tags = dict(global_tags or {})
        tags["bu"] = bu
        tags["project"] = project
        tags["app"] = app
        tags["pid"] = _process_identity()
        self._tags = tags
        self._provider = RegistrySnapshotProvider(registry)
        self._servers: list[PullServer] = []
        self._schedulers: list[PushScheduler] = []
        self._log = get_logger_for_service("metrics_runtime").bind(app=app)

    @property
    def tags(self) -> dict[str, str]:
        return dict(self._tags)

    @property
    def provider(self) -> RegistrySnapshotProvider:
        return self._provider

    def start_pull_server(
        self,
        port: int,
        host: str = "0.0.0.0",
        exporter_config: PullExporterConfig | None = None,
        server_config: PullServerConfig | None = None,
    ) -> PullServer:
        """Start serving the registry over HTTP.

        Args:
            port: Port to bind (ignored when ``server_config`` is given).
            host: Address to bind (ignored when ``server_config`` is given).
            exporter_config: Static prefix restrictions.
            server_config: Full server configuration.

        Returns:
            The running server.
        """
        exporter = PullExporter(
            self._provider,
            PrometheusTextFormatter(),
            exporter_config or PullExporterConfig(),
        )
        server = PullServer(
            exporter, server_config or PullServerConfig(host=host, port=port)
        )
        server.start()
        self._servers.append(server)
        return server

    async def start_push_loop(
        self,
        interval_seconds: int,
        url: str = DEFAULT_PUSH_URL,
        name_filter: NamePredicate | None = None,
        push_config: PushConfig | None = None,
    ) -> PushScheduler:
        """Start pushing the registry to a collector.

        Args:
            interval_seconds: Push interval (ignored when ``push_config`` is given).
            url: Collector endpoint (ignored when ``push_config`` is given).
            name_filter: Optional restriction on pushed series names.
            push_config: Full push configuration; its tags are merged
                under the runtime's global tags.

        Returns:
            The running scheduler.
        """
        if push_config is None:
            push_config = PushConfig(
                url=url, interval_seconds=interval_seconds, tags=self._tags
            )
        else:
            push_config = PushConfig(
                url=push_config.url,
                interval_seconds=push_config.interval_seconds,
                receiver_id=push_config.receiver_id,
                batch_size=push_config.batch_size,
                max_batch_size=push_config.max_batch_size,
                tags={**push_config.tags, **self._tags},
                timeout_seconds=push_config.timeout_seconds,
            )
        scheduler = PushScheduler(
            self._provider,
            PushEncoder.from_config(push_config),
            push_config.interval_seconds,
            name_filter=name_filter,
        )
        await scheduler.start()
        self._schedulers.append(scheduler)
        return scheduler

    async def stop(self) -> None:
        """Stop every push loop and server this runtime started."""
        for scheduler in self._schedulers:
            await scheduler.stop()
        for server in self._servers:
            server.stop()
        self._schedulers.clear()
        self._servers.clear()
        self._log.info("metrics_runtime_stopped")
