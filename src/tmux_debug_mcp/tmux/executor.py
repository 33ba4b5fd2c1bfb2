"""Command executors for tmux."""
import subprocess
from abc import ABC, abstractmethod
from typing import List

from .. import proc


class CommandExecutor(ABC):
    """Runs one tmux command. Swap the implementation to test without tmux."""

    @abstractmethod
    def execute(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run tmux with `args`; stdout and stderr are returned as text."""


class TmuxExecutor(CommandExecutor):
    """Executor that runs the real tmux binary."""

    def __init__(self, binary: str = "tmux"):
        self.binary = binary

    def execute(self, args: List[str]) -> subprocess.CompletedProcess:
        # Pane contents are arbitrary bytes; decode lossily
        return proc.run([self.binary, *args], errors="replace")
