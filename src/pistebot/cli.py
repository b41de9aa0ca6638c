"""
PisteBot command line interface

    pistebot run [--replay]     consume ledger events until stopped
    pistebot config             show the effective configuration
"""

import asyncio
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from pistebot import __version__
from pistebot.bootstrap import serve
from pistebot.config.bridge_config import BridgeConfig, ConfigurationError
from pistebot.config.logging_config import setup_logging

console = Console()


def _load_config(env_file: Optional[str]) -> BridgeConfig:
    try:
        return BridgeConfig.from_env(env_file)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(2)


@click.group()
@click.version_option(__version__, prog_name="pistebot")
@click.option('--env-file', type=click.Path(dir_okay=False), default=None,
              help='dotenv file to load before reading the environment')
@click.pass_context
def cli(ctx, env_file):
    """Ledger event to Telegram / MT202 settlement bridge."""
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file


@cli.command()
@click.option('--replay', is_flag=True, help='Ignore the stored cursor and replay from ledger begin')
@click.pass_context
def run(ctx, replay):
    """Connect to the ledger and process events until stopped."""
    config = _load_config(ctx.obj["env_file"])
    setup_logging(config.logging.level, config.logging.log_file)
    try:
        exit_code = asyncio.run(serve(config, replay=replay))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        exit_code = 2
    sys.exit(exit_code)


@cli.command(name="config")
@click.pass_context
def show_config(ctx):
    """Show the effective configuration (secrets masked)."""
    config = _load_config(ctx.obj["env_file"])

    table = Table(title="PisteBot configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.to_display_dict().items():
        table.add_row(key, value)
    console.print(table)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
