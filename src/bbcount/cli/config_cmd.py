"""bbcount init-config — write a default configuration file."""

from __future__ import annotations

from pathlib import Path

import click

from bbcount.cli.utils import console, error_handler


@click.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file.")
@error_handler
def init_config(path: str, force: bool) -> None:
    """Write the default analysis configuration to PATH as YAML."""
    from bbcount.core.config import AnalysisConfig, save_config

    target = Path(path)
    if target.exists() and not force:
        console.print(f"[red]Error:[/red] {target} already exists (use --force to overwrite)")
        raise SystemExit(1)

    save_config(AnalysisConfig(), target)
    console.print(f"[green]Wrote default configuration to {target}[/green]")
