from __future__ import annotations

import csv
from pathlib import Path

import pytest

from release_metrics.config import load_config


RELEASE = "2025-01-22.0"
HEADER = ["change_type", "total_count", "country", "subtype"]


def type_dir(root: Path, theme: str, type_name: str, release: str = RELEASE) -> Path:
    path = root / release / "row_counts" / f"theme={theme}" / f"type={type_name}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_partition(
    root: Path,
    theme: str,
    type_name: str,
    rows: list[list[str]],
    *,
    release: str = RELEASE,
    file_name: str = "part-00000.csv",
    header: list[str] = HEADER,
) -> Path:
    path = type_dir(root, theme, type_name, release) / file_name
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def write_raw_partition(
    root: Path,
    theme: str,
    type_name: str,
    text: str,
    *,
    release: str = RELEASE,
    file_name: str = "part-00000.csv",
) -> Path:
    path = type_dir(root, theme, type_name, release) / file_name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def example_root(tmp_path: Path) -> Path:
    """A single partition with one counted, one removed and one malformed row."""
    root = tmp_path / "metrics"
    write_partition(
        root,
        "places",
        "place",
        [
            ["", "10", "US", "a"],
            ["removed", "999", "US", "a"],
            ["", "abc", "", "a"],
        ],
        file_name="part.csv",
    )
    return root


@pytest.fixture
def metrics_root(example_root: Path) -> Path:
    """Four partitions over two themes.

    Totals: places 18, buildings 127 (building 120, building_part 7), overall 145.
    Countries: US 113, FR 20, Unknown 7, DE 5.
    """
    root = example_root
    write_partition(
        root,
        "places",
        "place",
        [
            ["added", "5", "DE", "b"],
            ["data_changed", "3", "US", "b"],
        ],
        file_name="part-00001.csv",
    )
    write_partition(
        root,
        "buildings",
        "building",
        [
            ["unchanged", "100", "US", ""],
            ["", "20", "FR", ""],
        ],
    )
    write_partition(root, "buildings", "building_part", [["", "7", "", ""]])
    return root


@pytest.fixture
def config(metrics_root: Path) -> dict:
    settings = load_config(None)
    settings["metrics"]["root"] = str(metrics_root)
    return settings
