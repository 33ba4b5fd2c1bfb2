"""Utility functions for tmux-debug-mcp."""
import os
import re
from pathlib import Path

# Path separators, Windows-reserved characters and control characters
_UNSAFE_CHARS = re.compile(r'[/\\<>:|?*"\x00-\x1f\x7f]')

MAX_FILENAME_LENGTH = 100


def safe_filename(name: str) -> str:
    """
    Make a string safe to use as a single filename component.

    Args:
        name: Arbitrary text (pane ID, window name, ...)

    Returns:
        The text with unsafe characters replaced by underscores, truncated

    Example:
        >>> safe_filename("debug-1/../x")
        'debug-1_.._x'
    """
    return _UNSAFE_CHARS.sub('_', name)[:MAX_FILENAME_LENGTH]


def get_config_dir() -> Path:
    """Directory holding config.toml, following XDG."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "tmux-debug-mcp"
