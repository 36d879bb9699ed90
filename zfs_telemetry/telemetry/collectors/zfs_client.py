"""
ZFS command client.

Runs zpool/zfs through the injected CommandRunner and parses the output.
All arguments are fixed literals; nothing from configuration other than the
binary paths reaches argv.
"""

import logging
from typing import List

from zfs_telemetry.telemetry.errors import (
    CommandError,
    DatasetFetchError,
    ParseError,
    PoolFetchError,
    ScanFetchError,
)
from zfs_telemetry.telemetry.parsers import (
    DATASET_COLUMNS,
    DATASET_TYPES,
    POOL_COLUMNS,
    parse_datasets,
    parse_pools,
    parse_scan_statuses,
)
from zfs_telemetry.telemetry.protocols import CommandRunner
from zfs_telemetry.telemetry.schemas import DatasetRecord, PoolRecord, ScanStatusRecord

logger = logging.getLogger(__name__)


class ZFSClient:
    """Fetches pools, datasets and scan state from the ZFS CLI."""

    def __init__(self, runner: CommandRunner, zpool_path: str = "zpool", zfs_path: str = "zfs"):
        """
        Initialize ZFS client.

        Args:
            runner: Command execution capability
            zpool_path: zpool binary (bare name or absolute path)
            zfs_path: zfs binary (bare name or absolute path)
        """
        self.runner = runner
        self.zpool_path = zpool_path
        self.zfs_path = zfs_path

    async def get_pools(self) -> List[PoolRecord]:
        """Return all pools. Raises PoolFetchError."""
        try:
            out = await self.runner.run(self.zpool_path, "list", "-Hp", "-o", POOL_COLUMNS)
        except CommandError as e:
            raise PoolFetchError(f"zpool list failed: {e}") from e

        try:
            pools = parse_pools(out)
        except ParseError as e:
            raise PoolFetchError(f"failed to parse pool output: {e}") from e

        logger.debug(f"Parsed {len(pools)} pools")
        return pools

    async def get_datasets(self) -> List[DatasetRecord]:
        """Return all filesystems and volumes. Raises DatasetFetchError."""
        try:
            out = await self.runner.run(
                self.zfs_path, "list", "-Hp", "-o", DATASET_COLUMNS, "-t", DATASET_TYPES
            )
        except CommandError as e:
            raise DatasetFetchError(f"zfs list failed: {e}") from e

        try:
            datasets = parse_datasets(out)
        except ParseError as e:
            raise DatasetFetchError(f"failed to parse dataset output: {e}") from e

        logger.debug(f"Parsed {len(datasets)} datasets")
        return datasets

    async def get_scan_statuses(self) -> List[ScanStatusRecord]:
        """Return the scan state of every pool. Raises ScanFetchError."""
        try:
            out = await self.runner.run(self.zpool_path, "status")
        except CommandError as e:
            raise ScanFetchError(f"zpool status failed: {e}") from e

        return parse_scan_statuses(out)
