"""bbcount CLI — top-level Click group."""

from __future__ import annotations

import logging

import click


@click.group()
@click.version_option(package_name="bbcount")
@click.option("--verbose", "-v", is_flag=True, help="Log progress and show full tracebacks.")
def cli(verbose: bool) -> None:
    """bbcount — basal body counting on microscopy z-stacks."""
    from bbcount.cli import utils

    utils.verbose = verbose
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _register_commands() -> None:
    """Register all subcommands — imports deferred to avoid loading heavy deps at startup."""
    from bbcount.cli.config_cmd import init_config
    from bbcount.cli.run import run

    cli.add_command(init_config)
    cli.add_command(run)


_register_commands()
