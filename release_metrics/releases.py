"""Release directory helpers.

A metrics root holds one directory per release, named ``YYYY-MM-DD.N``,
each with a ``row_counts`` subdirectory produced by the upstream pipeline.
"""

import re
from pathlib import Path
from typing import List, Union

from loguru import logger

from .errors import MetricsIOError, NotFoundError


RELEASE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}\.\d+$")
ROW_COUNTS_DIR = "row_counts"


def list_releases(root: Union[str, Path]) -> List[str]:
    """List release directories under the metrics root, newest first.

    Args:
        root: Metrics root directory

    Returns:
        Release identifiers sorted descending

    Raises:
        NotFoundError: If the metrics root does not exist
        MetricsIOError: If the root cannot be listed
    """
    root = Path(root)
    if not root.is_dir():
        raise NotFoundError(f"Metrics directory not found: {root}")

    try:
        entries = list(root.iterdir())
    except OSError as e:
        raise MetricsIOError(f"Failed to list releases in {root}: {e}") from e

    releases = [
        entry.name for entry in entries
        if RELEASE_PATTERN.match(entry.name) and entry.is_dir()
    ]
    releases.sort(reverse=True)
    logger.debug(f"Found {len(releases)} releases in {root}")
    return releases


def resolve_row_counts_dir(root: Path, release: str) -> Path:
    """Return ``root/release/row_counts`` if it exists.

    A release that points outside the root (``..``, path separators) is
    reported as not found.

    Raises:
        NotFoundError: If the directory does not exist
    """
    if not release or release in (".", "..") or Path(release).name != release:
        raise NotFoundError(f"Metrics for release {release} not found")

    row_counts_dir = root / release / ROW_COUNTS_DIR
    if not row_counts_dir.is_dir():
        raise NotFoundError(f"Metrics for release {release} not found")
    return row_counts_dir
