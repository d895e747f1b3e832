"""Partition discovery for ``theme=<THEME>/type=<TYPE>/*.csv`` trees."""

from pathlib import Path
from typing import List

from loguru import logger

from release_metrics.errors import MetricsIOError, PartitionNameError
from .types import PartitionPath


THEME_KEY = "theme"
TYPE_KEY = "type"
PARTITION_SUFFIX = ".csv"


def parse_partition_segment(name: str, key: str) -> str:
    """Parse a ``key=value`` directory name and return the value.

    The name is split on the first ``=`` only, so ``theme=a=b`` yields ``a=b``.

    Args:
        name: Directory name, e.g. ``theme=places``
        key: Expected key, e.g. ``theme``

    Returns:
        The value following the first ``=``

    Raises:
        PartitionNameError: If there is no ``=``, the key does not match,
            or the value is empty
    """
    found_key, sep, value = name.partition("=")
    if not sep:
        raise PartitionNameError(f"Partition directory {name!r} has no '=' separator")
    if found_key != key:
        raise PartitionNameError(f"Partition directory {name!r} is not a {key!r} partition")
    if not value:
        raise PartitionNameError(f"Partition directory {name!r} has an empty {key} value")
    return value


def _list_dir(path: Path) -> List[Path]:
    try:
        return sorted(path.iterdir())
    except OSError as e:
        raise MetricsIOError(f"Failed to list {path}: {e}") from e


def _partition_dirs(path: Path, key: str) -> List[Path]:
    prefix = f"{key}="
    return [p for p in _list_dir(path) if p.name.startswith(prefix) and p.is_dir()]


def discover_partitions(row_counts_dir: Path) -> List[PartitionPath]:
    """List every CSV part-file below a release's ``row_counts`` directory.

    Entries that do not start with ``theme=`` / ``type=`` or do not end with
    ``.csv`` are ignored. The result is sorted by theme, type and file name.

    Args:
        row_counts_dir: ``<root>/<release>/row_counts``

    Returns:
        List of discovered partitions

    Raises:
        MetricsIOError: If a directory cannot be listed
        PartitionNameError: If a partition directory has an empty value
    """
    partitions: List[PartitionPath] = []

    for theme_dir in _partition_dirs(row_counts_dir, THEME_KEY):
        theme = parse_partition_segment(theme_dir.name, THEME_KEY)

        for type_dir in _partition_dirs(theme_dir, TYPE_KEY):
            type_name = parse_partition_segment(type_dir.name, TYPE_KEY)

            for file_path in _list_dir(type_dir):
                if not file_path.name.endswith(PARTITION_SUFFIX) or not file_path.is_file():
                    continue
                partitions.append(PartitionPath(
                    theme=theme,
                    type=type_name,
                    file_name=file_path.name,
                    path=file_path,
                ))

    partitions.sort(key=lambda p: (p.theme, p.type, p.file_name))
    logger.info(f"Discovered {len(partitions)} partition files under {row_counts_dir}")
    return partitions
