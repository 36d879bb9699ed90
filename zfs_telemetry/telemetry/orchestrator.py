"""
Main telemetry orchestrator that coordinates the ZFS and service collectors.

A collection has two phases sharing one deadline:

1. The pool listing, which is mandatory. Without it nothing meaningful can
   be reported, so its failure ends the collection with up=False.
2. Datasets, scan status and services, fetched concurrently. Each one may
   fail on its own; its records are dropped and a warning is attached to
   the snapshot, the others are returned in full.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, List, Mapping, Optional, Sequence, Tuple

from zfs_telemetry.telemetry.base import BaseCollector
from zfs_telemetry.telemetry.collectors.service_collector import DEFAULT_SERVICE_UNITS
from zfs_telemetry.telemetry.errors import FetchError
from zfs_telemetry.telemetry.protocols import ServiceSource, StorageSource
from zfs_telemetry.telemetry.schemas import (
    DataSource,
    DatasetRecord,
    ScanStatusRecord,
    ServiceStatusRecord,
    SourceError,
    ZFSSnapshot,
)

logger = logging.getLogger(__name__)


@dataclass
class OptionalResults:
    """
    Results of the concurrent optional fetches.

    Each branch fills only its own fields, so no locking is needed; the
    gather() join makes all of them visible to the caller.
    """

    datasets: List[DatasetRecord] = field(default_factory=list)
    scans: List[ScanStatusRecord] = field(default_factory=list)
    services: List[ServiceStatusRecord] = field(default_factory=list)
    errors: List[SourceError] = field(default_factory=list)


class ZFSTelemetryOrchestrator(BaseCollector[ZFSSnapshot]):
    """
    Produces complete ZFS telemetry snapshots.

    Every call re-runs all commands; nothing is cached between snapshots.
    """

    def __init__(
        self,
        client: StorageSource,
        service_checker: ServiceSource,
        services: Optional[Mapping[str, Sequence[str]]] = None,
        timeout_seconds: float = 10.0,
    ):
        """
        Initialize telemetry orchestrator.

        Args:
            client: Source of pool, dataset and scan records
            service_checker: Resolver for host service states
            services: Service key to candidate units; defaults to all known keys
            timeout_seconds: Budget for an entire collection, both phases
        """
        super().__init__(name="ZFSTelemetryOrchestrator", timeout_seconds=timeout_seconds)
        self.client = client
        self.service_checker = service_checker
        self.services = dict(DEFAULT_SERVICE_UNITS if services is None else services)

    async def collect(self) -> ZFSSnapshot:
        return await self.collect_snapshot()

    async def collect_snapshot(self, timeout: Optional[float] = None) -> ZFSSnapshot:
        """
        Collect a complete telemetry snapshot.

        Args:
            timeout: Override of the collection budget in seconds

        Returns:
            Snapshot with up=False and no records if pools could not be fetched
        """
        budget = self.timeout_seconds if timeout is None else timeout
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + budget
        timestamp = datetime.now(timezone.utc)
        snapshot_id = str(uuid.uuid4())

        try:
            pools = await asyncio.wait_for(self.client.get_pools(), timeout=budget)
        except asyncio.TimeoutError:
            pool_error = f"pool fetch timed out after {budget:g}s"
        except FetchError as e:
            pool_error = str(e)
        except Exception as e:
            logger.exception("Unexpected error fetching pools")
            pool_error = f"unexpected error: {e}"
        else:
            pool_error = None

        if pool_error is not None:
            logger.error(
                f"Failed to get pools: {pool_error}", extra={"source": DataSource.POOLS.value}
            )
            self._record_collection(error=pool_error)
            return ZFSSnapshot(
                snapshot_id=snapshot_id,
                timestamp=timestamp,
                up=False,
                errors=[SourceError(source=DataSource.POOLS, message=pool_error)],
                collection_duration_seconds=loop.time() - started,
            )

        results = await self._fetch_optional(deadline)
        duration = loop.time() - started
        self._record_collection()

        snapshot = ZFSSnapshot(
            snapshot_id=snapshot_id,
            timestamp=timestamp,
            up=True,
            pools=pools,
            datasets=results.datasets,
            scans=results.scans,
            services=results.services,
            errors=results.errors,
            collection_duration_seconds=duration,
        )

        logger.info(
            f"Collected snapshot {snapshot_id} in {duration:.3f}s "
            f"({len(pools)} pools, {len(results.datasets)} datasets, "
            f"{len(results.scans)} scans, {len(results.services)} services, "
            f"{len(results.errors)} warnings)",
            extra={"duration_seconds": duration},
        )
        return snapshot

    async def _fetch_optional(self, deadline: float) -> OptionalResults:
        """Fetch datasets, scans and services concurrently under the deadline."""
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())

        (datasets, ds_err), (scans, scan_err), (services, svc_err) = await asyncio.gather(
            self._capture(DataSource.DATASETS, self.client.get_datasets(), remaining),
            self._capture(DataSource.SCANS, self.client.get_scan_statuses(), remaining),
            self._capture(
                DataSource.SERVICES,
                self.service_checker.check_services(self.services),
                remaining,
            ),
        )

        results = OptionalResults()
        if ds_err is None:
            results.datasets = datasets
        if scan_err is None:
            results.scans = scans
        if svc_err is None:
            results.services = services
        results.errors = [e for e in (ds_err, scan_err, svc_err) if e is not None]
        return results

    async def _capture(
        self, source: DataSource, fetch: Awaitable[List[Any]], timeout: float
    ) -> Tuple[List[Any], Optional[SourceError]]:
        """Run one optional fetch, turning any failure into a SourceError."""
        try:
            return await asyncio.wait_for(fetch, timeout=timeout), None
        except asyncio.TimeoutError:
            message = f"{source.value} fetch timed out"
        except FetchError as e:
            message = str(e)
        except Exception as e:
            logger.exception(f"Unexpected error fetching {source.value}")
            message = f"unexpected error: {e}"

        logger.warning(f"Failed to get {source.value}: {message}", extra={"source": source.value})
        return [], SourceError(source=source, message=message)
