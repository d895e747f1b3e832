"""CLI entry point for the release metrics system.

This module provides the command-line interface for aggregating partitioned
row-count metrics and turning them into LLM-ready context. Commands:
- serve: Start the HTTP server
- releases: List available releases
- aggregate: Print a release summary as JSON
- context: Print or save the LLM context file for a release
- verify: Compare a release's totals against its summary statistics
- ask: Ask an LLM a question about a release

Settings are read from config/metrics_config.yaml unless --config is given;
command-line options override the file.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from release_metrics.config import DEFAULT_CONFIG_PATH, load_config
from release_metrics.context import render_context
from release_metrics.errors import MetricsError
from release_metrics.metrics import MetricsAggregator
from release_metrics.releases import list_releases
from release_metrics.server import start_server
from release_metrics.util import LLMClient
from release_metrics.verification import verify_release

# Initialize Typer application with descriptive help text
app = typer.Typer(help="Release metrics - aggregate partitioned row counts into LLM-ready context")


def _load(config_path: str, root: Optional[str]) -> dict:
    config = load_config(config_path)
    if root:
        config["metrics"]["root"] = root
    return config


def _fail(error: MetricsError) -> None:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server"),
    port: Optional[int] = typer.Option(None, help="Port to bind the server"),
    root: Optional[str] = typer.Option(None, help="Metrics root directory"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file (YAML/JSON)"),
):
    """Start the HTTP server.

    Serves GET /api/releases, POST /api/process and GET /api/context/{release}.
    """
    start_server(host=host, port=port, metrics_root=root, config_path=config)


@app.command()
def releases(
    root: Optional[str] = typer.Option(None, help="Metrics root directory"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file (YAML/JSON)"),
):
    """List releases under the metrics root, newest first."""
    settings = _load(config, root)
    try:
        found = list_releases(settings["metrics"]["root"])
    except MetricsError as e:
        _fail(e)
    for release in found:
        typer.echo(release)


@app.command()
def aggregate(
    release: str = typer.Argument(..., help="Release identifier, e.g. 2025-01-22.0"),
    root: Optional[str] = typer.Option(None, help="Metrics root directory"),
    top: Optional[int] = typer.Option(None, help="Number of countries to keep"),
    sequential: bool = typer.Option(False, "--sequential", help="Read partition files one at a time"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file (YAML/JSON)"),
):
    """Aggregate a release and print the summary as JSON."""
    settings = _load(config, root)
    if top is not None:
        settings["metrics"]["top_countries"] = top
    if sequential:
        settings["metrics"]["parallel"] = False

    try:
        summary = MetricsAggregator(settings).aggregate(settings["metrics"]["root"], release)
    except MetricsError as e:
        _fail(e)
    typer.echo(json.dumps(summary.to_dict(), indent=2))


@app.command()
def context(
    release: str = typer.Argument(..., help="Release identifier"),
    root: Optional[str] = typer.Option(None, help="Metrics root directory"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the context file here"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file (YAML/JSON)"),
):
    """Generate the LLM context file for a release."""
    settings = _load(config, root)
    try:
        summary = MetricsAggregator(settings).aggregate(settings["metrics"]["root"], release)
    except MetricsError as e:
        _fail(e)

    text = render_context(summary, release)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote context: {output.resolve()}")


@app.command()
def verify(
    release: str = typer.Argument(..., help="Release identifier"),
    root: Optional[str] = typer.Option(None, help="Metrics root directory"),
    summary_stats_dir: Optional[str] = typer.Option(None, help="Directory of per-release summary CSVs"),
    tolerance: Optional[float] = typer.Option(None, help="Maximum discrepancy in percent"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file (YAML/JSON)"),
):
    """Compare aggregated totals with the release's summary statistics.

    Exits with code 1 when the discrepancy reaches the tolerance.
    """
    settings = _load(config, root)
    metrics_settings = settings["metrics"]
    try:
        report = verify_release(
            metrics_settings["root"],
            release,
            summary_stats_dir or metrics_settings["summary_stats_dir"],
            tolerance_percent=tolerance if tolerance is not None else metrics_settings["verify_tolerance_percent"],
            aggregator=MetricsAggregator(settings),
        )
    except MetricsError as e:
        _fail(e)

    typer.echo(report.get_summary_string())
    if not report.passed:
        raise typer.Exit(code=1)


@app.command()
def ask(
    release: str = typer.Argument(..., help="Release identifier"),
    question: str = typer.Argument(..., help="Question about the release"),
    root: Optional[str] = typer.Option(None, help="Metrics root directory"),
    model: Optional[str] = typer.Option(None, help="LLM model (overrides config), e.g. openai/gpt-4o"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, help="Path to config file (YAML/JSON)"),
):
    """Ask an LLM a question, grounded on the release context.

    Requires the provider API key (e.g. OPENAI_API_KEY) in the environment or .env.
    """
    settings = _load(config, root)
    if model:
        settings["llm"]["model"] = model

    try:
        summary = MetricsAggregator(settings).aggregate(settings["metrics"]["root"], release)
    except MetricsError as e:
        _fail(e)

    client = LLMClient.from_config(settings)
    typer.echo(asyncio.run(client.ask_about_release(summary, release, question)))


if __name__ == "__main__":
    app()
