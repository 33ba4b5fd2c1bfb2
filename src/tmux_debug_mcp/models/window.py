"""Window model for tmux-debug-mcp."""
from typing import Optional

from pydantic import BaseModel, Field

from .pane import PaneStatus

# Format handed to `tmux list-windows -F`
WINDOW_FORMAT = "#{window_name}|#{pane_pid}|#{pane_dead}"


class WindowInfo(BaseModel):
    """A tmux window as reported by list-windows. Never cached."""

    name: str = Field(..., description="Window name (the pane ID we generated)")
    pid: Optional[int] = Field(None, description="Process ID running in the pane")
    is_dead: bool = Field(False, description="Has the pane's process exited")

    @property
    def status(self) -> PaneStatus:
        return PaneStatus.from_dead_flag(self.is_dead)

    @classmethod
    def from_line(cls, line: str) -> Optional["WindowInfo"]:
        """Parse one `name|pid|dead` line, None if malformed."""
        parts = line.split("|")
        if len(parts) < 3:
            return None
        try:
            pid = int(parts[1])
        except ValueError:
            pid = None
        if pid is not None and pid < 0:
            pid = None
        return cls(name=parts[0], pid=pid, is_dead=parts[2] == "1")
