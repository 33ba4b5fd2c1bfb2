"""Pane model for tmux-debug-mcp."""
from enum import Enum

from pydantic import BaseModel, Field


class PaneStatus(str, Enum):
    """Status of a tracked pane."""

    RUNNING = "running"
    EXITED = "exited"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_dead_flag(cls, is_dead: bool) -> "PaneStatus":
        return cls.EXITED if is_dead else cls.RUNNING


class PaneRecord(BaseModel):
    """A pane created through the server."""

    id: str = Field(..., description="Generated pane ID (debug-N)", frozen=True)
    name: str = Field(..., description="Display name, defaults to the ID")
    command: str = Field(..., description="Command originally requested")
    status: PaneStatus = Field(PaneStatus.RUNNING, description="Running or exited")

    def summary(self) -> dict:
        """Listing entry as sent to the client."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "command": self.command,
        }
