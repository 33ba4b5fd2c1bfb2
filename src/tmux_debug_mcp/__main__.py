"""Entry point for python -m tmux_debug_mcp."""
from .cli import cli

if __name__ == "__main__":
    cli()
