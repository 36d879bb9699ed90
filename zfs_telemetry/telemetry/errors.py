"""
Exceptions raised while acquiring and parsing telemetry.

CommandError covers sources that could not be reached, ParseError covers
output that broke its column contract. The fetch errors wrap either one and
name the data source they belong to.
"""

from typing import Optional, Sequence

from zfs_telemetry.telemetry.schemas import DataSource


class ZFSTelemetryError(Exception):
    """Base class for all telemetry acquisition errors."""


class CommandError(ZFSTelemetryError):
    """An external command could not be run or exited abnormally."""

    def __init__(
        self,
        program: str,
        args: Sequence[str] = (),
        returncode: Optional[int] = None,
        output: bytes = b"",
        stderr: bytes = b"",
        reason: Optional[str] = None,
    ):
        self.program = program
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        self.stderr = stderr

        if reason is None:
            if returncode is None:
                reason = "could not be started"
            else:
                reason = f"exited with status {returncode}"
            detail = stderr.decode("utf-8", errors="replace").strip()
            if detail:
                reason += f": {detail}"

        self.reason = reason
        super().__init__(f"command {program!r} failed: {reason}")


class ParseError(ZFSTelemetryError, ValueError):
    """Command output did not match the expected field contract."""


class FetchError(ZFSTelemetryError):
    """A data source could not be fetched."""

    source: DataSource

    def __init__(self, message: str):
        super().__init__(message)


class PoolFetchError(FetchError):
    source = DataSource.POOLS


class DatasetFetchError(FetchError):
    source = DataSource.DATASETS


class ScanFetchError(FetchError):
    source = DataSource.SCANS
