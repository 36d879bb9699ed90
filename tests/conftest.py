"""
Pytest configuration and fixtures for zfs-telemetry tests.
"""

import asyncio
from typing import Dict, List, Tuple, Union

import pytest

from zfs_telemetry.telemetry.errors import CommandError

POOL_OUTPUT = (
    "tank\t10737418240\t5368709120\t5368709120\t33\t1.00\tONLINE\toff\n"
    "backup\t5368709120\t1073741824\t4294967296\t-\t1.00\tDEGRADED\toff\n"
)

DATASET_OUTPUT = (
    "tank\t5368709120\t5368709120\t262144\tfilesystem\toff\toff\n"
    "tank/media\t4294967296\t5368709120\t4294967296\tfilesystem\ton\toff\n"
    "tank/vm\t1073741824\t5368709120\t1073741824\tvolume\t-\t-\n"
    "backup\t1073741824\t4294967296\t98304\tfilesystem\toff\ton\n"
)

STATUS_OUTPUT = """  pool: backup
 state: DEGRADED
  scan: resilver in progress since Mon Feb  3 10:00:00 2025
    1.23G scanned at 100M/s, 500M issued at 50M/s, 5.00G total
    500M resilvered, 75.50% done, 0 days 00:30:00 to go
config:

\tNAME        STATE     READ WRITE CKSUM
\tbackup      DEGRADED     0     0     0

errors: No known data errors

  pool: tank
 state: ONLINE
  scan: scrub repaired 0B in 01:23:45 with 0 errors on Sun Feb  2 00:24:01 2025
config:

\tNAME        STATE     READ WRITE CKSUM
\ttank        ONLINE       0     0     0

errors: No known data errors
"""

Response = Union[bytes, str, CommandError]


class FakeRunner:
    """
    CommandRunner returning canned output.

    Responses are keyed by a command prefix such as "zpool list" or
    "systemctl is-active nfs-server.service"; the longest matching prefix
    wins. Unmatched commands fail like a missing binary.
    """

    def __init__(self, responses: Dict[str, Response] = None):
        self.responses: Dict[str, Response] = dict(responses or {})
        self.delays: Dict[str, float] = {}
        self.calls: List[Tuple[str, ...]] = []
        self.cancelled: List[Tuple[str, ...]] = []

    def set(self, prefix: str, response: Response, delay: float = 0.0) -> None:
        self.responses[prefix] = response
        if delay:
            self.delays[prefix] = delay

    async def run(self, program: str, *args: str) -> bytes:
        argv = (program,) + args
        self.calls.append(argv)
        command = " ".join(argv)

        matches = [p for p in self.responses if command == p or command.startswith(p + " ")]
        if not matches:
            raise CommandError(program, args, reason="no fixture configured")
        prefix = max(matches, key=len)

        delay = self.delays.get(prefix, 0.0)
        if delay:
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                self.cancelled.append(argv)
                raise

        response = self.responses[prefix]
        if isinstance(response, CommandError):
            raise response
        if isinstance(response, str):
            return response.encode()
        return response

    def commands(self, program: str) -> List[Tuple[str, ...]]:
        return [c for c in self.calls if c[0] == program]


@pytest.fixture
def fake_runner():
    """Empty fixture runner."""
    return FakeRunner()


@pytest.fixture
def zfs_host():
    """Fixture runner for a healthy host with two pools and NFS running."""
    return FakeRunner(
        {
            "zpool list": POOL_OUTPUT,
            "zfs list": DATASET_OUTPUT,
            "zpool status": STATUS_OUTPUT,
            "systemctl show --property=LoadState": "LoadState=not-found\n",
            "systemctl show --property=LoadState nfs-server.service": "LoadState=loaded\n",
            "systemctl is-active nfs-server.service": "active\n",
            "systemctl show --property=LoadState smbd.service": "LoadState=loaded\n",
            "systemctl is-active smbd.service": CommandError(
                "systemctl", ("is-active", "smbd.service"), returncode=3, output=b"inactive\n"
            ),
        }
    )
