"""bbcount run — count basal bodies in every series under a directory."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.markup import escape
from rich.table import Table

from bbcount.cli.utils import console, error_handler, make_progress

if TYPE_CHECKING:
    from bbcount.core import AnalysisConfig, RunSummary
    from bbcount.roi import RoiProvider


@click.command()
@click.argument("input_dir", required=False, type=click.Path(file_okay=False))
@click.argument("output_dir", required=False, type=click.Path(file_okay=False))
@click.option(
    "--config", "config_path", default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file (see 'bbcount init-config').",
)
@click.option("--tolerance", type=float, default=None, help="Maxima prominence tolerance.")
@click.option("--top-hat-radius", type=int, default=None, help="Top-hat disk radius (0 disables).")
@click.option("--median-radius", type=int, default=None, help="Median disk radius (0 disables).")
@click.option(
    "--choose-lng/--all-series", default=None,
    help="Only process series whose name matches the series pattern.",
)
@click.option(
    "--extension", "extensions", multiple=True,
    help="Container extension to discover, e.g. '.lif'. Can be repeated.",
)
@click.option(
    "--roi-source",
    type=click.Choice(["napari", "zip"]),
    default="napari",
    help="Draw cells in napari, or re-use <series>_RoiSet.zip archives.",
)
@click.option(
    "--roi-dir", default=None, type=click.Path(file_okay=False),
    help="Directory holding RoiSet archives (default: OUTPUT_DIR).",
)
@error_handler
def run(
    input_dir: str | None,
    output_dir: str | None,
    config_path: str | None,
    tolerance: float | None,
    top_hat_radius: int | None,
    median_radius: int | None,
    choose_lng: bool | None,
    extensions: tuple[str, ...],
    roi_source: str,
    roi_dir: str | None,
) -> None:
    """Count basal bodies in every series under INPUT_DIR."""
    from bbcount.cli._recent import add_to_recent
    from bbcount.core.config import AnalysisConfig, load_config

    input_path = _resolve_dir(input_dir, "input", "Input directory")
    output_path = _resolve_dir(output_dir, "output", "Output directory")

    config = load_config(Path(config_path)) if config_path else AnalysisConfig()
    config = config.with_overrides(
        maxima_tolerance=tolerance,
        top_hat_radius=top_hat_radius,
        median_radius=median_radius,
        choose_lng=choose_lng,
        extensions=tuple(extensions) or None,
    )

    provider = _make_provider(roi_source, Path(roi_dir) if roi_dir else output_path)
    _show_plan(config, input_path, output_path, roi_source)

    summary = _run_analysis(config, provider, input_path, output_path)

    add_to_recent("input", input_path)
    add_to_recent("output", output_path)

    if summary.has_failures:
        raise SystemExit(1)


def _resolve_dir(value: str | None, kind: str, prompt: str) -> Path:
    """Use the given directory, or prompt defaulting to the last one used."""
    from bbcount.cli._recent import last_used

    if value is None:
        value = click.prompt(
            prompt, default=last_used(kind), type=click.Path(file_okay=False),
        )
    return Path(value).expanduser()


def _make_provider(roi_source: str, roi_dir: Path) -> RoiProvider:
    from bbcount.core.exceptions import ConfigError

    if roi_source == "zip":
        from bbcount.roi import RoiZipProvider

        try:
            return RoiZipProvider(roi_dir)
        except FileNotFoundError as e:
            raise ConfigError(str(e)) from e

    from bbcount.roi import NAPARI_AVAILABLE

    if not NAPARI_AVAILABLE:
        console.print(
            "[red]Error:[/red] napari is not installed. "
            "Install with: pip install 'bbcount[napari]', "
            "or use --roi-source zip."
        )
        raise SystemExit(1)

    from bbcount.roi import NapariRoiProvider

    return NapariRoiProvider()


def _show_plan(
    config: AnalysisConfig, input_path: Path, output_path: Path, roi_source: str,
) -> None:
    """Display the parameters of the run."""
    table = Table(show_header=False, box=None)
    table.add_column("Property", style="bold")
    table.add_column("Value")

    table.add_row("Input", str(input_path))
    table.add_row("Output", str(output_path))
    table.add_row("Extensions", ", ".join(config.extensions))
    table.add_row("Tolerance", f"{config.maxima_tolerance:g}")
    table.add_row("Top-hat radius", str(config.top_hat_radius))
    table.add_row("Median radius", str(config.median_radius))
    table.add_row("Threshold", config.threshold_method)
    table.add_row(
        "Series filter",
        f"/{config.series_pattern}/i" if config.choose_lng else "all series",
    )
    table.add_row("Channels", f"quantify {config.quant_channel}, draw on {config.display_channel}")
    table.add_row("ROIs", roi_source)

    console.print()
    console.print(table)
    console.print()


def _run_analysis(
    config: AnalysisConfig,
    provider: RoiProvider,
    input_path: Path,
    output_path: Path,
) -> RunSummary:
    from bbcount.pipeline import AnalysisEngine

    engine = AnalysisEngine(config, provider, output_path)
    with make_progress() as progress:
        task = progress.add_task("Scanning...", total=None)

        def on_progress(current: int, total: int, name: str) -> None:
            progress.update(task, total=total, completed=current,
                            description=f"Processing {name}")

        result = engine.run(input_path, progress_callback=on_progress)

    _show_summary(result.summary, len(result.results), result.results_path)
    return result.summary


def _show_summary(summary: RunSummary, n_rows: int, results_path: Path) -> None:
    if summary.has_failures:
        console.print("\n[yellow]Analysis finished with errors.[/yellow]")
    else:
        console.print("\n[green]Analysis complete![/green]")

    table = Table(show_header=True)
    table.add_column("Item", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("Containers found", str(summary.containers_found))
    table.add_row("Series processed", str(summary.series_processed))
    table.add_row("Skipped (no ROIs)", str(summary.series_skipped))
    table.add_row("Filtered out", str(summary.series_filtered))
    table.add_row("Failed series", str(summary.series_failed))
    table.add_row("Failed containers", str(summary.containers_failed))
    table.add_row("Rejected ROIs", str(summary.rois_failed))
    table.add_row("Cells measured", str(n_rows))
    console.print(table)

    for failure in summary.failures:
        where = f"{failure.path} ({failure.series})" if failure.series else failure.path
        console.print(f"  [yellow]Warning:[/yellow] {escape(where)}: {escape(failure.error)}")
    console.print(f"  Results: {results_path}")
    console.print(f"  Elapsed: {summary.elapsed_seconds}s")
