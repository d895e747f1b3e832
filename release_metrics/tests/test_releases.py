from __future__ import annotations

from pathlib import Path

import pytest

from release_metrics.errors import NotFoundError
from release_metrics.releases import list_releases, resolve_row_counts_dir


def test_list_releases_newest_first(tmp_path: Path) -> None:
    for name in ["2024-12-18.0", "2025-01-22.0", "2025-01-22.1", "latest", "2025-1-2.0"]:
        (tmp_path / name).mkdir()
    (tmp_path / "2025-02-19.0").write_text("not a directory")

    assert list_releases(tmp_path) == ["2025-01-22.1", "2025-01-22.0", "2024-12-18.0"]


def test_list_releases_empty_root(tmp_path: Path) -> None:
    assert list_releases(str(tmp_path)) == []


def test_list_releases_missing_root(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        list_releases(tmp_path / "missing")


def test_resolve_row_counts_dir(tmp_path: Path) -> None:
    (tmp_path / "2025-01-22.0" / "row_counts").mkdir(parents=True)
    assert resolve_row_counts_dir(tmp_path, "2025-01-22.0") == tmp_path / "2025-01-22.0" / "row_counts"


@pytest.mark.parametrize("release", ["2025-01-22.0/row_counts/..", "../2025-01-22.0", ".."])
def test_resolve_row_counts_dir_rejects_paths(tmp_path: Path, release: str) -> None:
    (tmp_path / "2025-01-22.0" / "row_counts").mkdir(parents=True)
    with pytest.raises(NotFoundError):
        resolve_row_counts_dir(tmp_path, release)
