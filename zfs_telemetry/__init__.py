"""
zfs-telemetry - ZFS pool, dataset, scan and host service telemetry.
"""

__version__ = "0.1.0"
