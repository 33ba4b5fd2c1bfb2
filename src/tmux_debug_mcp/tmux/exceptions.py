"""Tmux-specific exceptions.

PUBLIC API:
  - TmuxError: Base exception for all tmux operations
  - CommandFailedError: tmux exited non-zero for an unrecognised reason
  - SessionNotFoundError: Session not found exception
  - WindowNotFoundError: Window not found exception
"""


class TmuxError(Exception):
    """Base exception for all tmux operations."""

    pass


class CommandFailedError(TmuxError):
    """Raised when a tmux command fails and the cause is not recognised."""

    def __init__(self, command: str, stderr: str):
        self.command = command
        self.stderr = stderr
        super().__init__(f"Tmux command '{command}' failed: {stderr}")


class SessionNotFoundError(TmuxError):
    """Raised when a tmux session cannot be found."""

    def __init__(self, session_name: str):
        self.session_name = session_name
        super().__init__(f"Tmux session '{session_name}' not found")


class WindowNotFoundError(TmuxError):
    """Raised when a tmux window cannot be found."""

    def __init__(self, window_name: str):
        self.window_name = window_name
        super().__init__(
            f"Tmux window '{window_name}' not found. Use list_panes to see active panes."
        )
