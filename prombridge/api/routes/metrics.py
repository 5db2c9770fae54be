"""Scrape endpoints: ``/``, ``/metrics`` and ``/-/healthy``.

All three paths are bound to one endpoint. Rendering runs on the
server's fixed worker pool, never on the event loop, so a slow snapshot
cannot stall other connections and excess scrapes queue for a worker.
"""

from __future__ import annotations

import asyncio
import contextvars
from concurrent.futures import Executor

from fastapi import APIRouter, Request, Response
from fastapi.responses import StreamingResponse

from prombridge.application.services.pull_exporter import (
    HEALTH_PATH,
    METRICS_PATHS,
    PullExporter,
)
from prombridge.infrastructure.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    set_correlation_id,
)


def create_metrics_router(exporter: PullExporter, executor: Executor) -> APIRouter:
    """Create the scrape router.

    Args:
        exporter: Exporter rendering every scrape.
        executor: Fixed-size worker pool the rendering runs on.

    Returns:
        Router with the scrape and health routes.
    """
    router = APIRouter(tags=["metrics"])

    async def scrape(request: Request) -> Response:
        """Serve the filtered snapshot, or the health message.

        Returns:
            Plain response with Content-Length, or a chunked gzip stream
            when the client accepts gzip.
        """
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        set_correlation_id(correlation_id)

        # Carry the correlation id into the worker thread.
        context = contextvars.copy_context()
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            executor,
            context.run,
            exporter.handle,
            request.url.path,
            request.scope.get("query_string", b"").decode("latin-1"),
            request.headers.get("accept"),
            request.headers.getlist("accept-encoding"),
        )

        headers = {CORRELATION_ID_HEADER: correlation_id}
        if result.compressed:
            headers.update(result.headers)
            return StreamingResponse(
                iter(result.chunks),
                media_type=result.content_type,
                headers=headers,
            )
        return Response(
            content=result.body,
            media_type=result.content_type,
            headers=headers,
        )

    for path in (*METRICS_PATHS, HEALTH_PATH):
        router.add_api_route(
            path,
            scrape,
            methods=["GET"],
            response_class=Response,
            summary="Prometheus metrics endpoint",
        )

    return router
