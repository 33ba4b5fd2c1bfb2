"""Session model for tmux-debug-mcp."""
import os

from pydantic import BaseModel, Field

DEFAULT_WIDTH = 200
DEFAULT_HEIGHT = 50
DEFAULT_PREFIX = "debug"


def default_session_name(prefix: str = DEFAULT_PREFIX) -> str:
    """Session name unique to this process (e.g. debug-4242)."""
    return f"{prefix}-{os.getpid()}"


class Session(BaseModel):
    """The tmux session owned by one engine."""

    name: str = Field(default_factory=default_session_name, description="Session name")
    created: bool = Field(False, description="Has new-session been issued")
    width: int = Field(DEFAULT_WIDTH, gt=0, description="Terminal width")
    height: int = Field(DEFAULT_HEIGHT, gt=0, description="Terminal height")

    @property
    def size(self) -> str:
        return f"{self.width}x{self.height}"

    def target(self, window: str) -> str:
        """tmux target string for a window in this session."""
        return f"{self.name}:{window}"
