"""
Telemetry API exposing collected snapshots.

Every request triggers a fresh collection; nothing is served from cache.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, FastAPI
from fastapi.responses import HTMLResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
from typing_extensions import TypedDict

from zfs_telemetry.telemetry.metrics import generate_metrics
from zfs_telemetry.telemetry.orchestrator import ZFSTelemetryOrchestrator

logger = logging.getLogger(__name__)


class HealthResponse(TypedDict):
    status: str
    collector: Dict[str, Any]
    timeout_seconds: float
    services: List[str]


class TelemetryAPI:
    """
    API interface for telemetry data.

    Provides endpoints for:
    - Prometheus scraping
    - JSON snapshots
    - Collector health
    """

    def __init__(self, orchestrator: ZFSTelemetryOrchestrator, metrics_path: str = "/metrics"):
        """
        Initialize telemetry API.

        Args:
            orchestrator: Orchestrator used for every collection
            metrics_path: Path of the Prometheus endpoint
        """
        self.orchestrator = orchestrator
        self.metrics_path = metrics_path
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        """Set up API routes."""
        self.router.get(self.metrics_path)(self.get_metrics)
        self.router.get("/telemetry/snapshot")(self.get_snapshot)
        self.router.get("/telemetry/health")(self.get_health)
        self.router.get("/", response_class=HTMLResponse)(self.get_landing_page)

    async def get_metrics(self) -> Response:
        """Collect and render metrics in Prometheus text format."""
        snapshot = await self.orchestrator.collect_snapshot()
        if snapshot.warnings:
            logger.debug(f"Serving partial metrics, {len(snapshot.warnings)} sources failed")
        return Response(content=generate_metrics(snapshot), media_type=CONTENT_TYPE_LATEST)

    async def get_snapshot(self) -> Response:
        """Collect and return a snapshot as JSON."""
        snapshot = await self.orchestrator.collect_snapshot()
        # NaN fragmentation is serialized as null.
        return Response(content=snapshot.model_dump_json(), media_type="application/json")

    async def get_health(self) -> HealthResponse:
        """Report collector statistics without running a collection."""
        stats = self.orchestrator.get_stats()
        return {
            "status": "healthy" if stats.error_rate < 0.5 else "degraded",
            "collector": stats.model_dump(),
            "timeout_seconds": self.orchestrator.timeout_seconds,
            "services": sorted(self.orchestrator.services),
        }

    async def get_landing_page(self) -> str:
        return (
            "<!DOCTYPE html>\n<html>\n<head><title>ZFS Exporter</title></head>\n<body>\n"
            "<h1>ZFS Exporter</h1>\n"
            f'<p><a href="{self.metrics_path}">Metrics</a></p>\n'
            "</body>\n</html>"
        )


def create_app(
    orchestrator: ZFSTelemetryOrchestrator,
    metrics_path: str = "/metrics",
    title: Optional[str] = None,
) -> FastAPI:
    """Build the FastAPI application serving telemetry."""
    app = FastAPI(title=title or "zfs-telemetry")
    app.include_router(TelemetryAPI(orchestrator, metrics_path=metrics_path).router)
    return app
