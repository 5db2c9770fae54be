"""HTTP routes of the pull server."""

from prombridge.api.routes.metrics import create_metrics_router

__all__ = ["create_metrics_router"]
