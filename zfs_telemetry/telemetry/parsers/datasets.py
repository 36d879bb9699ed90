"""
Parser for `zfs list -Hp` output.

Same line discipline as the pool parser: one bad line fails the call.
"""

from typing import List, Sequence, Union

from zfs_telemetry.telemetry.errors import ParseError
from zfs_telemetry.telemetry.parsers.common import parse_uint, split_records
from zfs_telemetry.telemetry.schemas import DatasetRecord

# -o column list passed to zfs list, in field order.
DATASET_COLUMNS = "name,used,avail,refer,type,sharenfs,sharesmb"
DATASET_TYPES = "filesystem,volume"
DATASET_FIELD_COUNT = 7

# Share property values meaning "not shared". Volumes report "-".
_SHARE_DISABLED = frozenset({"off", "-"})


def parse_datasets(data: Union[bytes, str]) -> List[DatasetRecord]:
    """
    Parse `zfs list -Hp -o name,used,avail,refer,type,sharenfs,sharesmb`.

    Raises:
        ParseError: on a wrong field count or a non-numeric byte count
    """
    datasets = []
    for fields in split_records(data, DATASET_FIELD_COUNT):
        try:
            datasets.append(_parse_dataset_fields(fields))
        except ValueError as e:
            raise ParseError(f"failed to parse dataset {fields[0]!r}: {e}") from e
    return datasets


def _parse_dataset_fields(fields: Sequence[str]) -> DatasetRecord:
    return DatasetRecord(
        name=fields[0],
        pool=extract_pool_name(fields[0]),
        used=parse_uint(fields[1], "used"),
        available=parse_uint(fields[2], "available"),
        referenced=parse_uint(fields[3], "referenced"),
        kind=fields[4],
        share_nfs=is_share_enabled(fields[5]),
        share_smb=is_share_enabled(fields[6]),
    )


def extract_pool_name(name: str) -> str:
    """Return the pool of a dataset path: "tank/data/photos" -> "tank"."""
    return name.split("/", 1)[0]


def is_share_enabled(value: str) -> bool:
    """Anything other than "off" or "-" is a share configuration."""
    return value not in _SHARE_DISABLED
