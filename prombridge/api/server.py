"""Pull server lifecycle: uvicorn on a background thread.

The server owns a fixed-size worker pool shared by every scrape. Its
size is the backpressure limit: excess concurrent scrapes wait for a
free worker instead of spawning threads.

Usage:
    server = PullServer(exporter, PullServerConfig(port=9000))
    server.start()
    ...
    server.stop()
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import uvicorn

from prombridge.api.main import create_app
from prombridge.application.services.pull_exporter import PullExporter
from prombridge.config.exporter_config import PullServerConfig
from prombridge.infrastructure.observability.logging import get_logger_for_service

WORKER_THREAD_PREFIX = "prombridge-http"

# Upper bound for uvicorn to bind and start serving
STARTUP_TIMEOUT_SECONDS = 10.0
_STARTUP_POLL_SECONDS = 0.01


class PullServer:
    """Serves a PullExporter over HTTP until stopped.

    Attributes:
        config: Bind address, worker pool size and timeouts.
        running: Whether the server thread is alive.
        port: The bound port (resolved when configured as 0).
    """

    def __init__(
        self,
        exporter: PullExporter,
        config: PullServerConfig | None = None,
    ) -> None:
        """Initialize the server without binding.

        Args:
            exporter: Exporter rendering every scrape.
            config: Server configuration; defaults to PullServerConfig().
        """
        self._config = config or PullServerConfig()
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.worker_threads,
            thread_name_prefix=WORKER_THREAD_PREFIX,
        )
        self._app = create_app(exporter, self._executor)
        self._server = uvicorn.Server(
            uvicorn.Config(
                self._app,
                host=self._config.host,
                port=self._config.port,
                log_config=None,
                access_log=False,
                lifespan="off",
                timeout_keep_alive=self._config.keep_alive_timeout_seconds,
                timeout_graceful_shutdown=self._config.graceful_shutdown_timeout_seconds,
            )
        )
        self._thread: Optional[threading.Thread] = None
        self._stopped = False
        self._log = get_logger_for_service("pull_server", component="pull")

    @property
    def config(self) -> PullServerConfig:
        return self._config

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> int:
        """The port the server is listening on.

        Raises:
            RuntimeError: If the server is not serving.
        """
        if not self._server.started:
            raise RuntimeError("pull server is not running")
        for server in self._server.servers:
            for sock in server.sockets:
                return sock.getsockname()[1]
        return self._config.port

    def start(self) -> None:
        """Bind and start serving on a background thread.

        Blocks until the server is accepting connections.

        Raises:
            RuntimeError: If the server was stopped before, or did not
                come up in time.
        """
        if self._stopped:
            raise RuntimeError("pull server cannot be restarted after stop")
        if self.running:
            return

        self._thread = threading.Thread(
            target=self._server.run,
            name=f"{WORKER_THREAD_PREFIX}-server",
            daemon=self._config.daemon,
        )
        self._thread.start()

        deadline = time.monotonic() + STARTUP_TIMEOUT_SECONDS
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self._server.should_exit = True
                self._thread.join()
                raise RuntimeError(
                    f"pull server failed to start on "
                    f"{self._config.host}:{self._config.port}"
                )
            time.sleep(_STARTUP_POLL_SECONDS)

        self._log.info(
            "pull_server_started",
            host=self._config.host,
            port=self.port,
            worker_threads=self._config.worker_threads,
        )

    def stop(self) -> None:
        """Stop serving and release the socket.

        In-flight scrapes finish; the worker pool is shut down afterwards.

        Note:
            Calling stop when not running is safe. A stopped server
            cannot be started again.
        """
        if self._thread is not None:
            self._server.should_exit = True
            self._thread.join()
            self._thread = None
        self._executor.shutdown(wait=True)
        self._stopped = True
        self._log.info("pull_server_stopped")
