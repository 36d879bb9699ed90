"""
Unit tests for the telemetry HTTP API.
"""

import pytest
from fastapi.testclient import TestClient
from pydantic import TypeAdapter

from zfs_telemetry.telemetry.api import HealthResponse, TelemetryAPI, create_app
from zfs_telemetry.telemetry.collectors import ServiceChecker, ZFSClient
from zfs_telemetry.telemetry.errors import CommandError
from zfs_telemetry.telemetry.orchestrator import ZFSTelemetryOrchestrator


class TestTelemetryAPI:
    """Test TelemetryAPI endpoints against a fixture host."""

    @pytest.fixture
    def orchestrator(self, zfs_host):
        return ZFSTelemetryOrchestrator(
            client=ZFSClient(zfs_host),
            service_checker=ServiceChecker(zfs_host),
            timeout_seconds=5.0,
        )

    @pytest.fixture
    def client(self, orchestrator):
        return TestClient(create_app(orchestrator))

    def test_metrics(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "zfs_up 1.0" in response.text
        assert 'zfs_pool_size_bytes{pool="tank"}' in response.text

    def test_metrics_when_down(self, client, zfs_host):
        zfs_host.set("zpool list", CommandError("zpool", ("list",), returncode=1))

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "zfs_up 0.0" in response.text
        assert "zfs_pool_size_bytes" not in response.text

    def test_each_scrape_collects(self, client, zfs_host):
        client.get("/metrics")
        client.get("/metrics")

        assert len([c for c in zfs_host.calls if c[:2] == ("zpool", "list")]) == 2

    def test_custom_metrics_path(self, orchestrator):
        client = TestClient(create_app(orchestrator, metrics_path="/zfs/metrics"))

        assert client.get("/zfs/metrics").status_code == 200
        assert client.get("/metrics").status_code == 404

    def test_snapshot(self, client):
        response = client.get("/telemetry/snapshot")

        assert response.status_code == 200
        data = response.json()
        assert data["up"] is True
        assert [p["name"] for p in data["pools"]] == ["tank", "backup"]
        assert data["pools"][1]["fragmentation"] is None
        assert data["pools"][1]["health"] == "DEGRADED"
        assert data["errors"] == []

    def test_snapshot_reports_source_errors(self, client, zfs_host):
        zfs_host.set("zfs list", CommandError("zfs", ("list",), returncode=1))

        data = client.get("/telemetry/snapshot").json()

        assert data["up"] is True
        assert data["datasets"] == []
        assert data["errors"][0]["source"] == "datasets"

    def test_health(self, client):
        client.get("/metrics")

        data = client.get("/telemetry/health").json()

        assert data["status"] == "healthy"
        assert data["collector"]["collections"] == 1
        assert data["timeout_seconds"] == 5.0
        assert data["services"] == ["iscsi", "nfs", "smb", "zfs"]

    def test_health_degraded(self, client, zfs_host):
        zfs_host.set("zpool list", CommandError("zpool", ("list",), returncode=1))
        client.get("/metrics")

        data = client.get("/telemetry/health").json()

        assert data["status"] == "degraded"
        assert data["collector"]["errors"] == 1

    def test_health_does_not_collect(self, client, zfs_host):
        client.get("/telemetry/health")
        assert zfs_host.calls == []

    def test_landing_page(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "ZFS Exporter" in response.text
        assert 'href="/metrics"' in response.text

    def test_router_can_be_mounted(self, orchestrator):
        api = TelemetryAPI(orchestrator, metrics_path="/metrics")
        paths = {route.path for route in api.router.routes}
        assert paths == {"/metrics", "/telemetry/snapshot", "/telemetry/health", "/"}


class TestHealthResponse:
    """Test the health payload type."""

    def test_validates_with_pydantic(self):
        """The TypedDict must be usable as a response model on every supported Python."""
        adapter = TypeAdapter(HealthResponse)

        payload = adapter.validate_python(
            {
                "status": "healthy",
                "collector": {"collections": 0},
                "timeout_seconds": 10.0,
                "services": ["nfs"],
            }
        )

        assert payload["status"] == "healthy"
        assert payload["services"] == ["nfs"]
