"""Integration tests for the pull server over real sockets.

Key Test Scenarios:
1. Scrapes over HTTP with static prefix exclusion applied
2. name[] filtering and health checks end to end
3. gzip on the wire
4. More concurrent scrapes than workers all succeed
5. Stop releases the port
"""

import gzip
import socket
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from prombridge.api.server import PullServer
from prombridge.application.services.pull_exporter import HEALTHY_RESPONSE

pytestmark = pytest.mark.integration


def _url(server: PullServer, path: str) -> str:
    return f"http://127.0.0.1:{server.port}{path}"


class TestPullServer:
    """End-to-end scrapes."""

    def test_scrape(self, pull_server: PullServer) -> None:
        """Test a plain scrape returns the registry minus excluded prefixes."""
        response = httpx.get(
            _url(pull_server, "/metrics"), headers={"Accept-Encoding": "identity"}
        )

        assert response.status_code == 200
        assert "queue_depth 7.0" in response.text
        assert "request_latency_seconds" not in response.text
        assert int(response.headers["content-length"]) == len(response.content)

    def test_root_path(self, pull_server: PullServer) -> None:
        """Test / serves the same exposition as /metrics."""
        assert "queue_depth" in httpx.get(_url(pull_server, "/")).text

    def test_health(self, pull_server: PullServer) -> None:
        """Test the health endpoint."""
        response = httpx.get(_url(pull_server, "/-/healthy?name[]=queue_depth"))

        assert response.text == HEALTHY_RESPONSE

    def test_name_filter(self, pull_server: PullServer) -> None:
        """Test name[] restricts the scrape."""
        response = httpx.get(
            _url(pull_server, "/metrics"), params={"name[]": "queue_depth"}
        )

        assert response.text.strip().endswith("queue_depth 7.0")
        assert "http_requests" not in response.text

    def test_gzip_on_the_wire(self, pull_server: PullServer) -> None:
        """Test the server sends a gzip stream when asked."""
        plain = httpx.get(
            _url(pull_server, "/metrics"), headers={"Accept-Encoding": "identity"}
        ).content

        with httpx.stream(
            "GET", _url(pull_server, "/metrics"), headers={"Accept-Encoding": "gzip"}
        ) as response:
            raw = b"".join(response.iter_raw())
            assert response.headers["content-encoding"] == "gzip"
            assert response.headers.get("transfer-encoding") == "chunked"

        assert gzip.decompress(raw) == plain

    def test_concurrent_scrapes_exceed_pool(self, pull_server: PullServer) -> None:
        """Test scrapes beyond the worker count queue and still succeed."""
        names = ["queue_depth", "http_requests_total"] * 6

        def scrape(name: str) -> str:
            return httpx.get(
                _url(pull_server, "/metrics"), params={"name[]": name}
            ).text

        with ThreadPoolExecutor(max_workers=len(names)) as pool:
            bodies = list(pool.map(scrape, names))

        for name, body in zip(names, bodies):
            assert name in body
            other = "http_requests" if name == "queue_depth" else "queue_depth"
            assert other not in body

    def test_stop_releases_port(self, pull_server: PullServer) -> None:
        """Test the port can be bound again after stop."""
        port = pull_server.port
        pull_server.stop()

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("127.0.0.1", port))

        assert not pull_server.running
