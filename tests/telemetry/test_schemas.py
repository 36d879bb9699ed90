"""
Unit tests for telemetry schemas.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from zfs_telemetry.telemetry.errors import CommandError, PoolFetchError
from zfs_telemetry.telemetry.schemas import (
    HEALTH_STATES,
    DataSource,
    PoolHealth,
    PoolRecord,
    ScanStatusRecord,
    ServiceStatusRecord,
    SourceError,
    ZFSSnapshot,
)


def pool(**overrides) -> PoolRecord:
    values = dict(
        name="tank",
        size=100,
        allocated=40,
        free=60,
        fragmentation=0.1,
        dedup_ratio=1.0,
        health=PoolHealth.ONLINE,
    )
    values.update(overrides)
    return PoolRecord(**values)


class TestPoolHealth:
    """Test PoolHealth token mapping."""

    @pytest.mark.parametrize("token", ["ONLINE", "online", " Online "])
    def test_from_token(self, token):
        assert PoolHealth.from_token(token) == PoolHealth.ONLINE

    @pytest.mark.parametrize("token", ["SUSPENDED", "", "-"])
    def test_unknown_token(self, token):
        assert PoolHealth.from_token(token) == PoolHealth.UNKNOWN

    def test_state_set_excludes_unknown(self):
        assert PoolHealth.UNKNOWN not in HEALTH_STATES
        assert len(HEALTH_STATES) == 6


class TestPoolRecord:
    """Test PoolRecord validation."""

    def test_valid(self):
        record = pool()
        assert record.fragmentation_available is True
        assert record.read_only is False

    def test_nan_fragmentation_allowed(self):
        assert pool(fragmentation=float("nan")).fragmentation_available is False

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_fragmentation_out_of_range(self, value):
        with pytest.raises(ValidationError):
            pool(fragmentation=value)

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            pool(size=-1)

    def test_strict_types(self):
        with pytest.raises(ValidationError):
            pool(size="100")

    def test_frozen(self):
        record = pool()
        with pytest.raises(ValidationError):
            record.name = "other"


class TestScanStatusRecord:
    """Test ScanStatusRecord invariants."""

    def test_defaults_are_idle(self):
        record = ScanStatusRecord(pool="tank")
        assert record.scan_active is False
        assert record.progress == 0.0

    def test_scrub_and_resilver_are_exclusive(self):
        with pytest.raises(ValidationError):
            ScanStatusRecord(pool="tank", scrub_active=True, resilver_active=True)

    @pytest.mark.parametrize("progress", [-0.01, 1.01])
    def test_progress_bounds(self, progress):
        with pytest.raises(ValidationError):
            ScanStatusRecord(pool="tank", scrub_active=True, progress=progress)


class TestZFSSnapshot:
    """Test ZFSSnapshot helpers."""

    def make(self, **overrides) -> ZFSSnapshot:
        values = dict(
            snapshot_id="s1",
            timestamp=datetime.now(timezone.utc),
            up=True,
            collection_duration_seconds=0.1,
        )
        values.update(overrides)
        return ZFSSnapshot(**values)

    def test_source_ok(self):
        snapshot = self.make(
            pools=[pool()],
            errors=[SourceError(source=DataSource.SCANS, message="zpool status failed")],
        )

        assert snapshot.source_ok(DataSource.POOLS) is True
        assert snapshot.source_ok(DataSource.DATASETS) is True
        assert snapshot.source_ok(DataSource.SCANS) is False

    def test_down_snapshot_has_no_ok_sources(self):
        snapshot = self.make(
            up=False, errors=[SourceError(source=DataSource.POOLS, message="zpool list failed")]
        )

        assert not any(snapshot.source_ok(s) for s in DataSource)
        assert snapshot.warnings == []

    def test_warnings_are_optional_source_errors(self):
        errors = [
            SourceError(source=DataSource.DATASETS, message="a"),
            SourceError(source=DataSource.SERVICES, message="b"),
        ]
        snapshot = self.make(errors=errors)
        assert snapshot.warnings == errors

    def test_json_serializes_nan_as_null(self):
        snapshot = self.make(pools=[pool(fragmentation=float("nan"))])
        assert '"fragmentation":null' in snapshot.model_dump_json()

    def test_service_record_unit_is_optional(self):
        record = ServiceStatusRecord(name="nfs", active=True)
        assert record.unit is None


class TestErrors:
    """Test error messages and attributes."""

    def test_command_error_from_status(self):
        error = CommandError("zpool", ["list"], returncode=1, stderr=b"no pools\n")
        assert str(error) == "command 'zpool' failed: exited with status 1: no pools"
        assert error.args_list == ["list"]

    def test_command_error_not_started(self):
        error = CommandError("zpool")
        assert str(error) == "command 'zpool' failed: could not be started"

    def test_command_error_explicit_reason(self):
        error = CommandError("zpool", reason="No such file or directory")
        assert error.reason == "No such file or directory"

    def test_fetch_error_source(self):
        assert PoolFetchError("x").source == DataSource.POOLS
