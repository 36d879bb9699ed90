"""
Parser for `zpool status` scan state.

The status report is free text, one section per pool:

      pool: tank
     state: ONLINE
      scan: scrub in progress since Sun Jul 25 16:07:49 2025
        374G scanned at 161M/s, 340G issued at 146M/s, 703G total
        0B repaired, 48.36% done, 00:42:27 to go

The scan type is known as soon as the "scan:" line is read, the percentage
only some lines later. The parser therefore emits the record on the scan
line and replaces its progress when the percentage shows up.

Every "pool:" header yields exactly one record. Sections the parser cannot
make sense of degrade to "no active scan" instead of failing the call,
because the report wording differs between ZFS releases.
"""

import re
from enum import Enum
from typing import List, Optional, Union

from zfs_telemetry.telemetry.parsers.common import decode
from zfs_telemetry.telemetry.schemas import ScanStatusRecord

POOL_HEADER_RE = re.compile(r"^\s*pool:\s+(\S+)")
SCAN_ACTIVE_RE = re.compile(r"^\s*scan:\s+(scrub|resilver) in progress")
PROGRESS_RE = re.compile(r"(\d+\.?\d*)%\s+done")


class ScanParserState(str, Enum):
    """Where the parser is within the current pool section."""

    SEEKING = "seeking"  # No pool header seen yet
    IN_SECTION = "in_section"  # Header seen, no scan line yet
    SCAN_ACTIVE = "scan_active"  # Active scan emitted, waiting for progress
    RESOLVED = "resolved"  # Record for this section is final


class ScanStatusParser:
    """Line-at-a-time state machine over `zpool status` output."""

    def __init__(self):
        self.state = ScanParserState.SEEKING
        self.pool: Optional[str] = None
        self.records: List[ScanStatusRecord] = []

    def feed(self, line: str) -> None:
        """Apply one input line."""
        header = POOL_HEADER_RE.match(line)
        if header:
            self._close_section()
            self.pool = header.group(1)
            self.state = ScanParserState.IN_SECTION
            return

        if self.state == ScanParserState.IN_SECTION:
            active = SCAN_ACTIVE_RE.match(line)
            if active:
                self._emit(active.group(1))
                self.state = ScanParserState.SCAN_ACTIVE
            elif "scan:" in line:
                # none requested, completed scrub, canceled, ...
                self._emit(None)
                self.state = ScanParserState.RESOLVED

        elif self.state == ScanParserState.SCAN_ACTIVE:
            progress = PROGRESS_RE.search(line)
            if progress:
                self._set_progress(float(progress.group(1)) / 100.0)
                self.state = ScanParserState.RESOLVED

    def close(self) -> List[ScanStatusRecord]:
        """Finish the input and return the records."""
        self._close_section()
        self.state = ScanParserState.SEEKING
        self.pool = None
        return self.records

    def _close_section(self) -> None:
        # A section that never reached its scan line still gets a record.
        if self.state == ScanParserState.IN_SECTION:
            self._emit(None)

    def _emit(self, scan_type: Optional[str]) -> None:
        self.records.append(
            ScanStatusRecord(
                pool=self.pool,
                scrub_active=scan_type == "scrub",
                resilver_active=scan_type == "resilver",
                progress=0.0,
            )
        )

    def _set_progress(self, progress: float) -> None:
        # model_copy skips validation, so clamp here.
        progress = min(max(progress, 0.0), 1.0)
        self.records[-1] = self.records[-1].model_copy(update={"progress": progress})


def parse_scan_statuses(data: Union[bytes, str]) -> List[ScanStatusRecord]:
    """
    Parse `zpool status` into one ScanStatusRecord per pool.

    Never raises; empty input yields an empty list.
    """
    parser = ScanStatusParser()
    for line in decode(data).splitlines():
        parser.feed(line)
    return parser.close()
