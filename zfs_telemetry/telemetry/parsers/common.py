"""Helpers shared by the tab-separated listing parsers."""

import re
from typing import Iterator, List, Union

from zfs_telemetry.telemetry.errors import ParseError

_UINT_RE = re.compile(r"[0-9]+", re.ASCII)
_DECIMAL_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?", re.ASCII)


def decode(data: Union[bytes, str]) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def split_records(data: Union[bytes, str], field_count: int) -> Iterator[List[str]]:
    """
    Yield the tab-separated fields of each non-blank line.

    Raises:
        ParseError: if any line does not have exactly `field_count` fields
    """
    text = decode(data).strip()
    if not text:
        return

    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            continue

        fields = line.split("\t")
        if len(fields) != field_count:
            raise ParseError(f"expected {field_count} fields, got {len(fields)}: {line!r}")
        yield fields


def parse_uint(value: str, field: str) -> int:
    """Parse an unsigned decimal integer exactly as zfs -p prints it."""
    if not _UINT_RE.fullmatch(value):
        raise ParseError(f"invalid {field} {value!r}")
    return int(value)


def parse_float(value: str, field: str) -> float:
    """Parse a plain decimal such as the 1.00 dedup ratio."""
    if not _DECIMAL_RE.fullmatch(value):
        raise ParseError(f"invalid {field} {value!r}")
    return float(value)
