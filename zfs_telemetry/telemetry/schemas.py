"""
Type-safe telemetry schemas for zfs-telemetry.

These schemas define the complete data model for host storage telemetry.
Records are frozen: a record is built once per collection and never
mutated after it is handed out.
"""

import math
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# ENUMS - No magic strings
# ============================================================================


class PoolHealth(str, Enum):
    """Pool health states as reported by zpool."""

    ONLINE = "ONLINE"
    DEGRADED = "DEGRADED"
    FAULTED = "FAULTED"
    OFFLINE = "OFFLINE"
    REMOVED = "REMOVED"
    UNAVAIL = "UNAVAIL"
    UNKNOWN = "UNKNOWN"  # Token outside the documented set

    @classmethod
    def from_token(cls, token: str) -> "PoolHealth":
        """Map a raw health column value to a state, case-insensitively."""
        try:
            return cls(token.strip().upper())
        except ValueError:
            return cls.UNKNOWN


# The state-set exported for every pool, in exposition order.
HEALTH_STATES = (
    PoolHealth.ONLINE,
    PoolHealth.DEGRADED,
    PoolHealth.FAULTED,
    PoolHealth.OFFLINE,
    PoolHealth.REMOVED,
    PoolHealth.UNAVAIL,
)


class DataSource(str, Enum):
    """Data sources feeding a snapshot."""

    POOLS = "pools"
    DATASETS = "datasets"
    SCANS = "scan_status"
    SERVICES = "services"


OPTIONAL_SOURCES = (DataSource.DATASETS, DataSource.SCANS, DataSource.SERVICES)


# ============================================================================
# RECORDS - One per pool / dataset / service
# ============================================================================


class PoolRecord(BaseModel):
    """A storage pool from `zpool list`."""

    model_config = ConfigDict(strict=True, frozen=True)

    name: str = Field(min_length=1)
    size: int = Field(ge=0, description="Total pool size in bytes")
    allocated: int = Field(ge=0, description="Allocated space in bytes")
    free: int = Field(ge=0, description="Free space in bytes")
    fragmentation: float = Field(description="Fragmentation ratio (0-1), NaN if unavailable")
    dedup_ratio: float = Field(ge=0, description="Deduplication ratio")
    health: PoolHealth
    read_only: bool = False

    @model_validator(mode="after")
    def _check_fragmentation(self) -> "PoolRecord":
        if not math.isnan(self.fragmentation) and not 0 <= self.fragmentation <= 1:
            raise ValueError(f"fragmentation {self.fragmentation} outside [0, 1]")
        return self

    @property
    def fragmentation_available(self) -> bool:
        return not math.isnan(self.fragmentation)


class DatasetRecord(BaseModel):
    """A filesystem or volume from `zfs list`."""

    model_config = ConfigDict(strict=True, frozen=True)

    name: str = Field(min_length=1, description="Full dataset path, e.g. tank/media")
    pool: str = Field(min_length=1, description="Owning pool, derived from name")
    used: int = Field(ge=0)
    available: int = Field(ge=0)
    referenced: int = Field(ge=0)
    kind: str = Field(description="Dataset type: filesystem, volume, or future kinds")
    share_nfs: bool = False
    share_smb: bool = False


class ScanStatusRecord(BaseModel):
    """Scrub/resilver state of a single pool."""

    model_config = ConfigDict(strict=True, frozen=True)

    pool: str = Field(min_length=1)
    scrub_active: bool = False
    resilver_active: bool = False
    progress: float = Field(default=0.0, ge=0, le=1)

    @model_validator(mode="after")
    def _check_single_scan(self) -> "ScanStatusRecord":
        if self.scrub_active and self.resilver_active:
            raise ValueError("a pool cannot scrub and resilver at the same time")
        return self

    @property
    def scan_active(self) -> bool:
        return self.scrub_active or self.resilver_active


class ServiceStatusRecord(BaseModel):
    """State of a host service, keyed by its logical name (e.g. "nfs")."""

    model_config = ConfigDict(strict=True, frozen=True)

    name: str = Field(min_length=1)
    active: bool
    unit: Optional[str] = Field(default=None, description="Unit that resolved the key")


# ============================================================================
# SNAPSHOT - Complete collection result
# ============================================================================


class SourceError(BaseModel):
    """A failure attributed to exactly one data source."""

    model_config = ConfigDict(strict=True, frozen=True)

    source: DataSource
    message: str


class ZFSSnapshot(BaseModel):
    """Everything collected in one pass, plus per-source failures."""

    model_config = ConfigDict(strict=True, frozen=True)

    snapshot_id: str
    timestamp: datetime
    up: bool = Field(description="True iff the mandatory pool fetch succeeded")

    pools: List[PoolRecord] = Field(default_factory=list)
    datasets: List[DatasetRecord] = Field(default_factory=list)
    scans: List[ScanStatusRecord] = Field(default_factory=list)
    services: List[ServiceStatusRecord] = Field(default_factory=list)

    errors: List[SourceError] = Field(default_factory=list)
    collection_duration_seconds: float = Field(ge=0)

    def source_ok(self, source: DataSource) -> bool:
        """Whether the given source was collected successfully."""
        if not self.up:
            return False
        return all(e.source != source for e in self.errors)

    @property
    def warnings(self) -> List[SourceError]:
        """Failures of optional sources only."""
        return [e for e in self.errors if e.source != DataSource.POOLS]


class CollectorStats(BaseModel):
    """Statistics for a collector."""

    model_config = ConfigDict(strict=True)

    name: str
    collections: int = Field(ge=0)
    errors: int = Field(ge=0)
    error_rate: float = Field(ge=0, le=1)
    last_collection: Optional[str] = None  # ISO timestamp
    last_error: Optional[str] = None
