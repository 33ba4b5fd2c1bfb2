"""MCP server exposing tmux panes as debugging tools."""

__version__ = "0.1.0"
