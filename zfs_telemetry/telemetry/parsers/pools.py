"""
Parser for `zpool list -Hp` output.

One tab-separated line per pool. A single malformed line fails the whole
call: reporting a silently truncated pool list is worse than reporting none.
"""

import math
from typing import List, Sequence, Union

from zfs_telemetry.telemetry.errors import ParseError
from zfs_telemetry.telemetry.parsers.common import parse_float, parse_uint, split_records
from zfs_telemetry.telemetry.schemas import PoolHealth, PoolRecord

# -o column list passed to zpool list, in field order.
POOL_COLUMNS = "name,size,alloc,free,frag,dedup,health,readonly"
POOL_FIELD_COUNT = 8


def parse_pools(data: Union[bytes, str]) -> List[PoolRecord]:
    """
    Parse `zpool list -Hp -o name,size,alloc,free,frag,dedup,health,readonly`.

    Args:
        data: Raw command output

    Returns:
        One PoolRecord per non-blank line; empty when there are no pools

    Raises:
        ParseError: on a wrong field count or a non-numeric value
    """
    pools = []
    for fields in split_records(data, POOL_FIELD_COUNT):
        try:
            pools.append(_parse_pool_fields(fields))
        except ValueError as e:
            raise ParseError(f"failed to parse pool {fields[0]!r}: {e}") from e
    return pools


def _parse_pool_fields(fields: Sequence[str]) -> PoolRecord:
    size = parse_uint(fields[1], "size")
    allocated = parse_uint(fields[2], "allocated")
    free = parse_uint(fields[3], "free")

    # "-" when the pool has no fragmentation accounting.
    fragmentation = math.nan
    if fields[4] != "-":
        fragmentation = parse_uint(fields[4], "fragmentation") / 100.0

    dedup = parse_float(fields[5], "dedup ratio")

    return PoolRecord(
        name=fields[0],
        size=size,
        allocated=allocated,
        free=free,
        fragmentation=fragmentation,
        dedup_ratio=dedup,
        health=PoolHealth.from_token(fields[6]),
        read_only=fields[7] == "on",
    )
