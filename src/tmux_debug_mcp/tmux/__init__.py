"""Tmux execution engine.

PUBLIC API:
  - TmuxSession: Owns the server's tmux session and its windows
  - CommandExecutor: Interface for running tmux commands
  - TmuxExecutor: Executor backed by the tmux binary
  - TmuxError: Base exception for tmux operations
  - CommandFailedError: Unrecognised tmux failure
  - SessionNotFoundError: Session not found exception
  - WindowNotFoundError: Window not found exception
"""

from .exceptions import (
    TmuxError,
    CommandFailedError,
    SessionNotFoundError,
    WindowNotFoundError,
)
from .executor import CommandExecutor, TmuxExecutor
from .session import TmuxSession

__all__ = [
    "TmuxSession",
    "CommandExecutor",
    "TmuxExecutor",
    "TmuxError",
    "CommandFailedError",
    "SessionNotFoundError",
    "WindowNotFoundError",
]
