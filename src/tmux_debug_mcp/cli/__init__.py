"""Main CLI entry point for tmux-debug-mcp."""
import os
import sys

import click

from .. import __version__
from ..config import get_config
from .config import config


@click.group(invoke_without_command=True)
@click.option('--log-level', default=None, type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level (logs go to stderr)')
@click.version_option(__version__, prog_name="tmux-debug-mcp")
@click.pass_context
def cli(ctx, log_level):
    """MCP server exposing tmux panes as debugging tools."""
    if log_level:
        os.environ['TMUX_DEBUG_LOG_LEVEL'] = log_level
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
def serve():
    """Serve MCP over stdin/stdout."""
    from ..server import run_server, setup_logging

    try:
        cfg = get_config()
    except Exception as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        raise click.Abort()

    setup_logging(os.environ.get('TMUX_DEBUG_LOG_LEVEL') or cfg.logging.level)
    sys.exit(run_server(cfg))


cli.add_command(config)


if __name__ == "__main__":
    cli()
