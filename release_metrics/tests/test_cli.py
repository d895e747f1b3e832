from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from main import app
from release_metrics.util import llm_client

from .conftest import RELEASE


runner = CliRunner()


@pytest.fixture
def no_config(tmp_path: Path) -> list[str]:
    return ["--config", str(tmp_path / "missing.yaml")]


def test_releases_command(metrics_root: Path, no_config: list[str]) -> None:
    result = runner.invoke(app, ["releases", "--root", str(metrics_root), *no_config])
    assert result.exit_code == 0
    assert result.stdout.split() == [RELEASE]


def test_aggregate_command(metrics_root: Path, no_config: list[str]) -> None:
    result = runner.invoke(
        app, ["aggregate", RELEASE, "--root", str(metrics_root), "--top", "1", "--sequential", *no_config]
    )
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["totalRecords"] == 145
    assert data["countryCounts"] == {"US": 113}


def test_aggregate_unknown_release(metrics_root: Path, no_config: list[str]) -> None:
    result = runner.invoke(app, ["aggregate", "1999-01-01.0", "--root", str(metrics_root), *no_config])
    assert result.exit_code == 1


def test_context_command_writes_file(metrics_root: Path, tmp_path: Path, no_config: list[str]) -> None:
    output = tmp_path / "out" / "context.txt"
    result = runner.invoke(
        app, ["context", RELEASE, "--root", str(metrics_root), "--output", str(output), *no_config]
    )
    assert result.exit_code == 0
    assert "  - total_records: 145" in output.read_text(encoding="utf-8")


def test_verify_command(metrics_root: Path, tmp_path: Path, no_config: list[str]) -> None:
    stats = tmp_path / "stats"
    stats.mkdir()
    (stats / f"{RELEASE}.csv").write_text("theme,type,total_count\nplaces,place,145\n", encoding="utf-8")

    args = ["verify", RELEASE, "--root", str(metrics_root), "--summary-stats-dir", str(stats), *no_config]
    assert runner.invoke(app, args).exit_code == 0

    (stats / f"{RELEASE}.csv").write_text("theme,type,total_count\nplaces,place,300\n", encoding="utf-8")
    assert runner.invoke(app, args).exit_code == 1


def test_ask_command(metrics_root: Path, no_config: list[str], monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_acompletion(**kwargs):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="145 records"))])

    monkeypatch.setattr(llm_client, "acompletion", fake_acompletion)
    result = runner.invoke(app, ["ask", RELEASE, "How many records?", "--root", str(metrics_root), *no_config])
    assert result.exit_code == 0
    assert "145 records" in result.stdout
