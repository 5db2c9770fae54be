"""FastAPI application factory for the pull endpoint."""

from concurrent.futures import Executor

from fastapi import FastAPI

from prombridge import __version__
from prombridge.api.routes.metrics import create_metrics_router
from prombridge.application.services.pull_exporter import PullExporter


def create_app(exporter: PullExporter, executor: Executor) -> FastAPI:
    """Create the pull-side application.

    Args:
        exporter: Exporter rendering every scrape.
        executor: Fixed-size worker pool for rendering. The caller owns
            it and shuts it down.

    Returns:
        The FastAPI application.
    """
    app = FastAPI(
        title="prombridge metrics exporter",
        description="Prometheus pull endpoint",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(create_metrics_router(exporter, executor))
    return app
