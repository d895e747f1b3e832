from __future__ import annotations

from pathlib import Path

import pytest

from release_metrics.errors import PartitionNameError
from release_metrics.metrics.partitions import discover_partitions, parse_partition_segment

from .conftest import RELEASE, write_partition


def test_parse_partition_segment_returns_value() -> None:
    assert parse_partition_segment("theme=places", "theme") == "places"
    assert parse_partition_segment("type=building_part", "type") == "building_part"


def test_parse_partition_segment_keeps_everything_after_first_separator() -> None:
    assert parse_partition_segment("theme=a=b", "theme") == "a=b"


@pytest.mark.parametrize(
    "name",
    [
        "places",        # no separator
        "type=place",    # wrong key
        "theme=",        # empty value
    ],
)
def test_parse_partition_segment_rejects_malformed_names(name: str) -> None:
    with pytest.raises(PartitionNameError):
        parse_partition_segment(name, "theme")


def test_discover_partitions_finds_csv_files_sorted(metrics_root: Path) -> None:
    partitions = discover_partitions(metrics_root / RELEASE / "row_counts")
    assert [(p.theme, p.type, p.file_name) for p in partitions] == [
        ("buildings", "building", "part-00000.csv"),
        ("buildings", "building_part", "part-00000.csv"),
        ("places", "place", "part-00001.csv"),
        ("places", "place", "part.csv"),
    ]
    assert partitions[0].type_key == "buildings/building"
    assert all(p.path.is_file() for p in partitions)


def test_discover_partitions_ignores_unrelated_entries(tmp_path: Path) -> None:
    root = tmp_path / "metrics"
    path = write_partition(root, "places", "place", [["", "1", "US", ""]])
    row_counts = root / RELEASE / "row_counts"

    (row_counts / "_SUCCESS").write_text("")
    (row_counts / "theme=notadir").write_text("")
    (row_counts / "other=places").mkdir()
    (path.parent.parent / "category=food").mkdir()
    (path.parent / "part-00000.csv.crc").write_text("")
    (path.parent / "nested.csv").mkdir()

    partitions = discover_partitions(row_counts)
    assert [(p.theme, p.type, p.file_name) for p in partitions] == [("places", "place", "part-00000.csv")]


def test_discover_partitions_rejects_empty_theme(tmp_path: Path) -> None:
    row_counts = tmp_path / RELEASE / "row_counts"
    (row_counts / "theme=" / "type=place").mkdir(parents=True)
    with pytest.raises(PartitionNameError):
        discover_partitions(row_counts)
