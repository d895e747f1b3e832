"""Row parsing and folding for row-count partition files."""

import csv
import re
from typing import IO, Any, Dict, Iterator, List, Optional

from loguru import logger

from release_metrics.errors import MetricsIOError
from .types import PartitionPath, PartitionTotals, REMOVED_CHANGE_TYPE, UNKNOWN_COUNTRY


# Leading whitespace, optional sign, then the leading run of digits
_COUNT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")


def coerce_count(value: Optional[str]) -> int:
    """Coerce a ``total_count`` field to an integer.

    Parses the leading base-10 integer of the field (``"12abc"`` -> 12,
    ``" 7"`` -> 7, ``"1.9"`` -> 1). Absent or non-numeric values give 0.
    """
    if not value:
        return 0
    match = _COUNT_PREFIX.match(value)
    if match is None:
        return 0
    return int(match.group(1))


def resolve_country(value: Optional[str]) -> str:
    """Return the country bucket for a row; empty or absent -> ``Unknown``."""
    return value or UNKNOWN_COUNTRY


def _parse_line(line: str) -> List[str]:
    # One physical line at a time, so an unterminated quote ends with its line
    return next(csv.reader([line]), [])


def iter_records(handle: IO[str]) -> Iterator[Dict[str, Any]]:
    """Yield CSV records keyed by header name, tolerating malformed lines.

    Every physical line is parsed on its own: a stray or unterminated quote
    never consumes the lines after it. Extra fields beyond the header are
    collected under the ``None`` key and ignored; missing trailing fields
    come back as ``None``. A line the csv module refuses to parse is logged
    and skipped. Blank lines are skipped.
    """
    fieldnames: Optional[List[str]] = None
    for line_num, line in enumerate(handle, start=1):
        line = line.rstrip("\r\n")
        if not line:
            continue
        try:
            fields = _parse_line(line)
        except csv.Error as e:
            logger.debug(f"Skipping malformed record on line {line_num}: {e}")
            continue

        if fieldnames is None:
            fieldnames = fields
            continue

        record: Dict[Any, Any] = dict(zip(fieldnames, fields))
        if len(fields) > len(fieldnames):
            record[None] = fields[len(fieldnames):]
        for name in fieldnames[len(fields):]:
            record[name] = None
        yield record


def fold_record(totals: PartitionTotals, partition: PartitionPath, record: Dict[str, Any]) -> bool:
    """Fold one record into ``totals``.

    Returns:
        False if the record was a removal event and was skipped, True otherwise
    """
    if record.get('change_type') == REMOVED_CHANGE_TYPE:
        return False

    count = coerce_count(record.get('total_count'))
    country = resolve_country(record.get('country'))
    totals.add_row(partition.theme, partition.type_key, country, count)
    return True


def fold_partition_file(partition: PartitionPath) -> PartitionTotals:
    """Read one partition file and return its isolated subtotal.

    Args:
        partition: The partition file to read

    Returns:
        PartitionTotals for this file only

    Raises:
        MetricsIOError: If the file cannot be opened or read
    """
    totals = PartitionTotals()
    rows = 0
    skipped = 0
    try:
        with partition.path.open("r", encoding="utf-8-sig", errors="replace", newline="") as handle:
            for record in iter_records(handle):
                rows += 1
                if not fold_record(totals, partition, record):
                    skipped += 1
    except OSError as e:
        raise MetricsIOError(f"Failed to read partition {partition.path}: {e}") from e

    logger.debug(
        f"Folded {partition.type_key}/{partition.file_name}: "
        f"{rows} rows, {skipped} removed, {totals.total_records} records"
    )
    return totals
