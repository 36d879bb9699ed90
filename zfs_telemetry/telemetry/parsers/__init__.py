"""
Parsers turning ZFS CLI text output into telemetry records.
"""

from zfs_telemetry.telemetry.parsers.pools import POOL_COLUMNS, parse_pools
from zfs_telemetry.telemetry.parsers.datasets import (
    DATASET_COLUMNS,
    DATASET_TYPES,
    extract_pool_name,
    is_share_enabled,
    parse_datasets,
)
from zfs_telemetry.telemetry.parsers.scan import (
    ScanParserState,
    ScanStatusParser,
    parse_scan_statuses,
)

__all__ = [
    "POOL_COLUMNS",
    "DATASET_COLUMNS",
    "DATASET_TYPES",
    "parse_pools",
    "parse_datasets",
    "parse_scan_statuses",
    "extract_pool_name",
    "is_share_enabled",
    "ScanParserState",
    "ScanStatusParser",
]
