"""
zfs-telemetry collection pipeline.

Shells out to zpool, zfs and systemctl, parses their output into typed
records and aggregates them into snapshots.

Principles:
- The pool listing is mandatory; everything else degrades on its own
- One time budget covers a whole collection
- Nothing is cached between collections

Usage:
    from zfs_telemetry.telemetry import (
        SubprocessRunner, ZFSClient, ServiceChecker, ZFSTelemetryOrchestrator,
    )

    runner = SubprocessRunner()
    orchestrator = ZFSTelemetryOrchestrator(
        client=ZFSClient(runner),
        service_checker=ServiceChecker(runner),
        timeout_seconds=10,
    )
    snapshot = await orchestrator.collect_snapshot()
"""

from zfs_telemetry.telemetry.collectors import (
    DEFAULT_SERVICE_UNITS,
    ServiceChecker,
    ZFSClient,
)
from zfs_telemetry.telemetry.errors import (
    CommandError,
    DatasetFetchError,
    FetchError,
    ParseError,
    PoolFetchError,
    ScanFetchError,
    ZFSTelemetryError,
)
from zfs_telemetry.telemetry.orchestrator import ZFSTelemetryOrchestrator
from zfs_telemetry.telemetry.protocols import CommandRunner
from zfs_telemetry.telemetry.runner import SubprocessRunner
from zfs_telemetry.telemetry.schemas import (
    DataSource,
    DatasetRecord,
    PoolHealth,
    PoolRecord,
    ScanStatusRecord,
    ServiceStatusRecord,
    SourceError,
    ZFSSnapshot,
)

__all__ = [
    # Orchestration
    "ZFSTelemetryOrchestrator",
    "ZFSClient",
    "ServiceChecker",
    "DEFAULT_SERVICE_UNITS",
    # Command execution
    "CommandRunner",
    "SubprocessRunner",
    # Errors
    "ZFSTelemetryError",
    "CommandError",
    "ParseError",
    "FetchError",
    "PoolFetchError",
    "DatasetFetchError",
    "ScanFetchError",
    # Schemas
    "ZFSSnapshot",
    "PoolRecord",
    "PoolHealth",
    "DatasetRecord",
    "ScanStatusRecord",
    "ServiceStatusRecord",
    "DataSource",
    "SourceError",
]
