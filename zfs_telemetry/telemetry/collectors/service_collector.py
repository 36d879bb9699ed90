"""
Host service state collector.

Resolves logical service keys ("nfs", "smb", ...) to systemd units and
reports whether the first existing unit is active.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from zfs_telemetry.telemetry.errors import CommandError
from zfs_telemetry.telemetry.protocols import CommandRunner
from zfs_telemetry.telemetry.schemas import ServiceStatusRecord

logger = logging.getLogger(__name__)

SYSTEMCTL = "systemctl"

# Candidate units per service key, tried in order until one exists.
DEFAULT_SERVICE_UNITS: Dict[str, List[str]] = {
    "zfs": ["zfs-zed.service"],
    "nfs": ["nfs-kernel-server.service", "nfs-server.service"],
    "smb": ["smbd.service", "smb.service"],
    "iscsi": [
        "iscsid.socket",
        "iscsid.service",
        "iscsi.service",
        "tgt.service",
        "iscsitarget.service",
    ],
}


class ServiceChecker:
    """Checks systemd unit states for a set of service keys."""

    def __init__(self, runner: CommandRunner, systemctl_path: str = SYSTEMCTL):
        self.runner = runner
        self.systemctl_path = systemctl_path

    async def check_services(
        self, services: Mapping[str, Sequence[str]]
    ) -> List[ServiceStatusRecord]:
        """
        Check each service key against its candidate units.

        Keys with no existing unit are skipped, so a host that does not run
        a service never reports it as down.

        Args:
            services: Mapping of service key to ordered candidate units

        Returns:
            One record per resolvable key, in mapping order
        """
        statuses = []
        for key, units in services.items():
            status = await self._check_service_units(key, units)
            if status is not None:
                statuses.append(status)
        return statuses

    async def _check_service_units(
        self, key: str, units: Sequence[str]
    ) -> Optional[ServiceStatusRecord]:
        # Existence is probed separately: `is-active` prints "inactive" for
        # both stopped and missing units.
        for unit in units:
            if not await self._unit_exists(unit):
                logger.debug(f"Unit {unit} not found for {key}, trying next")
                continue

            try:
                out = await self.runner.run(self.systemctl_path, "is-active", unit)
            except CommandError as e:
                # Non-zero exit is normal for inactive/failed units.
                out = e.output
                if not out.strip():
                    logger.debug(f"is-active failed with no output for {key} ({unit}): {e}")
                    return ServiceStatusRecord(name=key, active=False, unit=unit)

            state = out.decode("utf-8", errors="replace").strip()
            return ServiceStatusRecord(name=key, active=state == "active", unit=unit)

        logger.debug(f"No unit found for service {key}, skipping")
        return None

    async def _unit_exists(self, unit: str) -> bool:
        """Whether systemd has the unit loaded, regardless of its state."""
        try:
            out = await self.runner.run(self.systemctl_path, "show", "--property=LoadState", unit)
        except CommandError as e:
            logger.debug(f"systemctl show failed for {unit}: {e}")
            return False
        return b"not-found" not in out
