"""CLI entry point for competitor UI analysis."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from competitor_ui.capture.viewports import parse_viewport_list
from competitor_ui.errors import ConfigError, FatalCaptureFailure
from competitor_ui.index.reindex import rebuild_index
from competitor_ui.models.config import AnalysisConfig
from competitor_ui.orchestrator import RunCoordinator
from competitor_ui.presets.resolver import PresetResolver
from competitor_ui.url_utils import normalize_target_url

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config_file: str | None, output_dir: str | None, model: str | None,
                 presets_dir: str | None) -> AnalysisConfig:
    cfg = AnalysisConfig.load(config_file) if config_file else AnalysisConfig.from_env()
    updates = {}
    if output_dir:
        updates["output_dir"] = output_dir
    if model:
        updates["ai_model"] = model
    if presets_dir:
        updates["presets_dir"] = presets_dir
    return cfg.model_copy(update=updates)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Competitive UI benchmarking: capture, score, compare, report."""
    setup_logging(verbose)


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option("--viewports", default="desktop", show_default=True,
              help="Comma-separated viewports (desktop, tablet, mobile)")
@click.option("--preset", "preset_name", default=None, help="Research preset name")
@click.option("--compare", is_flag=True, help="Rank the URLs against each other (2+ URLs)")
@click.option("--output-dir", "-o", default=None, help="Report output directory")
@click.option("--model", default=None, help="Vision model identifier")
@click.option("--presets-dir", default=None, help="Extra directory searched for presets")
@click.option("--config", "-c", "config_file", default=None, help="Config JSON file")
def analyze(urls: tuple[str, ...], viewports: str, preset_name: str | None, compare: bool,
            output_dir: str | None, model: str | None, presets_dir: str | None,
            config_file: str | None) -> None:
    """Capture, score and report on one or more URLs."""
    targets = [u for u in (normalize_target_url(raw) for raw in urls) if u]
    if not targets:
        raise click.UsageError("At least one URL is required")
    if compare and len(set(targets)) < 2:
        raise click.UsageError("--compare requires at least 2 URLs")

    try:
        cfg = _load_config(config_file, output_dir, model, presets_dir)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    try:
        coordinator = RunCoordinator(cfg)
        summary = coordinator.run(
            targets,
            viewports=parse_viewport_list(viewports),
            preset_name=preset_name,
            compare=compare,
        )
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except FatalCaptureFailure as e:
        console.print(f"[red]Analysis failed:[/red] {e}")
        console.print("Check that the URLs are reachable and Playwright browsers are installed "
                      "([blue]playwright install chromium[/blue]).")
        sys.exit(1)

    console.print("\n[bold green]Analysis Complete[/bold green]")
    table = Table(title="Run Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Run ID", summary.run_id)
    table.add_row("Duration", f"{summary.duration_seconds}s")
    table.add_row("Preset", summary.preset)
    table.add_row("Captured", f"{summary.captures_succeeded}/{summary.captures_total}")
    scored_style = "green" if summary.analyses_scored == summary.analyses_total else "yellow"
    table.add_row("Scored", f"[{scored_style}]{summary.analyses_scored}/{summary.analyses_total}[/{scored_style}]")
    if summary.comparison_winner:
        table.add_row("Winner", summary.comparison_winner)
    console.print(table)

    console.print(f"  HTML report: [blue]{summary.report_path}[/blue]")
    console.print(f"  Metadata:    [blue]{summary.meta_path}[/blue]")
    console.print(f"  Open: file://{Path(summary.report_path).resolve()}")


@cli.command()
@click.option("--presets-dir", default=None, help="Extra directory searched for presets")
def presets(presets_dir: str | None) -> None:
    """List available research presets."""
    resolver = PresetResolver(presets_dir=presets_dir)
    table = Table(title="Presets")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Dimensions", justify="right")
    for preset_id in resolver.available():
        try:
            preset = resolver.resolve(preset_id)
        except ConfigError as e:
            table.add_row(preset_id, f"[red]{e}[/red]", "", "")
            continue
        table.add_row(preset_id, preset.name, preset.version, str(len(preset.dimensions)))
    console.print(table)


@cli.command()
@click.option("--output-dir", "-o", default=None, help="Report output directory")
def reindex(output_dir: str | None) -> None:
    """Rebuild the report index from the metadata files on disk."""
    cfg = AnalysisConfig.from_env()
    if output_dir:
        cfg = cfg.model_copy(update={"output_dir": output_dir})
    entries = rebuild_index(cfg.output_path, cfg.index_path, retention=cfg.index_retention)
    console.print(f"[green]Indexed {len(entries)} report(s)[/green] into [blue]{cfg.index_path}[/blue]")


if __name__ == "__main__":
    cli()
