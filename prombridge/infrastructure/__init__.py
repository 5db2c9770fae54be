"""Infrastructure adapters: prometheus_client, httpx push, structlog."""
