"""
Telemetry protocols defining contracts between components.

The acquisition layer never spawns processes itself; it is handed a
CommandRunner. Production binds a subprocess-backed runner, tests bind
fixture output.
"""

from typing import List, Mapping, Protocol, Sequence, runtime_checkable

from zfs_telemetry.telemetry.schemas import (
    DatasetRecord,
    PoolRecord,
    ScanStatusRecord,
    ServiceStatusRecord,
)


@runtime_checkable
class CommandRunner(Protocol):
    """Runs an external program and returns its stdout."""

    async def run(self, program: str, *args: str) -> bytes:
        """
        Run `program` with `args` as argv (no shell).

        Promises:
        - Returns stdout bytes when the command exits successfully
        - Raises CommandError otherwise, with any stdout in `output`
        - Cancelling the awaiting task abandons the command
        - Safe to call concurrently from several tasks
        """
        ...


@runtime_checkable
class StorageSource(Protocol):
    """Protocol for fetching pool-level storage data."""

    async def get_pools(self) -> List[PoolRecord]:
        """
        Fetch all pools.

        Promises:
        - Raises PoolFetchError on command or parse failure
        - Returns an empty list when the host has no pools
        """
        ...

    async def get_datasets(self) -> List[DatasetRecord]:
        """Fetch filesystems and volumes. Raises DatasetFetchError."""
        ...

    async def get_scan_statuses(self) -> List[ScanStatusRecord]:
        """Fetch one scan record per pool. Raises ScanFetchError."""
        ...


@runtime_checkable
class ServiceSource(Protocol):
    """Protocol for resolving host service states."""

    async def check_services(
        self, services: Mapping[str, Sequence[str]]
    ) -> List[ServiceStatusRecord]:
        """
        Resolve each service key against its candidate units.

        Promises:
        - One record per key with an existing unit, none otherwise
        - Never raises for probe failures
        """
        ...
