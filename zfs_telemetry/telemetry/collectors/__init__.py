"""
Telemetry collector implementations.

These collectors gather storage and service state from host CLIs.
"""

from zfs_telemetry.telemetry.collectors.zfs_client import ZFSClient
from zfs_telemetry.telemetry.collectors.service_collector import (
    DEFAULT_SERVICE_UNITS,
    ServiceChecker,
)

__all__ = [
    "ZFSClient",
    "ServiceChecker",
    "DEFAULT_SERVICE_UNITS",
]
