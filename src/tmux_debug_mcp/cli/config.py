"""Config inspection commands."""
import click

from ..config import Config, default_config_path, dump_config_env, dump_config_toml, get_config

FORMATS = click.Choice(['toml', 'env'])


def _render(cfg: Config, fmt: str) -> str:
    if fmt == 'env':
        return dump_config_env(cfg)
    return dump_config_toml(cfg).rstrip("\n")


@click.group()
def config():
    """Inspect configuration."""
    pass


@config.command("show")
@click.option('--format', 'fmt', default='toml', type=FORMATS, help='Output format')
def show(fmt):
    """Show the effective configuration (file + environment)."""
    click.echo(_render(get_config(), fmt))


@config.command("defaults")
@click.option('--format', 'fmt', default='toml', type=FORMATS, help='Output format')
def defaults(fmt):
    """Show the built-in defaults."""
    click.echo(_render(Config(), fmt))


@config.command("path")
def path():
    """Show where the config file is looked up."""
    click.echo(str(default_config_path()))
