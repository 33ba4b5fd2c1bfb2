"""Tmux session owned by the server.

Every pane the client creates becomes a window named after its generated
pane ID inside a single detached session. The session is created on first
use and killed when the engine is closed.
"""
import logging
import subprocess
from typing import List, Optional

from ..models.session import DEFAULT_HEIGHT, DEFAULT_PREFIX, DEFAULT_WIDTH, Session, default_session_name
from ..models.window import WINDOW_FORMAT, WindowInfo
from .exceptions import CommandFailedError, SessionNotFoundError, TmuxError, WindowNotFoundError
from .executor import CommandExecutor, TmuxExecutor

logger = logging.getLogger(__name__)

SESSION_MISSING_PHRASES = ("session not found", "no server running")
WINDOW_MISSING_PHRASES = ("can't find window", "window not found", "no such window")


class TmuxSession:
    """Drives tmux for one server process."""

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        session_prefix: str = DEFAULT_PREFIX,
    ):
        """Initialize the engine. Nothing is run until a pane is created.

        Args:
            executor: Command executor, defaults to the real tmux binary
            width: Terminal width for the session
            height: Terminal height for the session
            session_prefix: Session name prefix, the process ID is appended
        """
        self.executor = executor or TmuxExecutor()
        self.session = Session(
            name=default_session_name(session_prefix),
            width=width,
            height=height,
        )

    @property
    def session_name(self) -> str:
        return self.session.name

    @property
    def is_created(self) -> bool:
        return self.session.created

    def __enter__(self) -> "TmuxSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the tmux session."""
        self.kill_session()

    def run_tmux(self, args: List[str]) -> str:
        """Run a tmux command and return stdout.

        Raises:
            SessionNotFoundError: tmux reports the session or server is gone
            WindowNotFoundError: tmux reports the target window is gone
            CommandFailedError: any other failure
        """
        command = "tmux " + " ".join(args)
        try:
            result = self.executor.execute(args)
        except OSError as e:
            raise CommandFailedError(command, str(e)) from e

        if result.returncode == 0:
            return result.stdout or ""

        raise self._classify_failure(args, command, result)

    def _classify_failure(
        self, args: List[str], command: str, result: subprocess.CompletedProcess
    ) -> TmuxError:
        stderr = result.stderr or ""

        if any(phrase in stderr for phrase in SESSION_MISSING_PHRASES):
            return SessionNotFoundError(self.session_name)

        if any(phrase in stderr for phrase in WINDOW_MISSING_PHRASES):
            prefix = f"{self.session_name}:"
            target = next((arg for arg in args if arg.startswith(prefix)), "unknown")
            return WindowNotFoundError(target)

        return CommandFailedError(command, stderr)

    def ensure_session(self) -> None:
        """Create the session if it doesn't exist yet."""
        if self.session.created:
            return

        logger.info(f"Creating tmux session {self.session_name} ({self.session.size})")
        self.run_tmux([
            "new-session", "-d",
            "-s", self.session_name,
            "-x", str(self.session.width),
            "-y", str(self.session.height),
        ])
        # Keep panes around after their process exits so output stays readable
        self.run_tmux(["set-option", "-t", self.session_name, "remain-on-exit", "on"])

        self.session.created = True

    def create_pane(self, command: str, name: str) -> str:
        """Create a window called `name` and run `command` in it.

        Returns:
            The window name used to address the pane
        """
        self.ensure_session()

        target = self.session.target(name)
        self.run_tmux(["new-window", "-t", self.session_name, "-n", name])
        # The session-level option does not reach windows created after it was set
        self.run_tmux(["set-option", "-t", target, "remain-on-exit", "on"])
        self.run_tmux(["send-keys", "-t", target, command, "Enter"])

        logger.info(f"Created window {target} running: {command}")
        return name

    def send_keys(self, pane_id: str, keys: str) -> None:
        """Send keystrokes verbatim. No Enter is appended."""
        self.run_tmux(["send-keys", "-t", self.session.target(pane_id), keys])

    def capture_pane(self, pane_id: str, lines: int) -> str:
        """Capture the last `lines` lines of history, returned as-is."""
        return self.run_tmux([
            "capture-pane", "-t", self.session.target(pane_id),
            "-p", "-S", f"-{lines}",
        ])

    def kill_pane(self, pane_id: str) -> None:
        self.run_tmux(["kill-window", "-t", self.session.target(pane_id)])
        logger.info(f"Killed window {self.session.target(pane_id)}")

    def list_windows(self) -> List[WindowInfo]:
        """List all windows in the session.

        Returns an empty list if the session was never created. Lines that
        don't parse are skipped.
        """
        if not self.session.created:
            return []

        output = self.run_tmux(["list-windows", "-t", self.session_name, "-F", WINDOW_FORMAT])
        return self._parse_windows(output)

    def get_window_info(self, pane_id: str) -> WindowInfo:
        """Get fresh info about a single window.

        Raises:
            WindowNotFoundError: tmux printed nothing usable for the window
        """
        output = self.run_tmux([
            "list-windows", "-t", self.session.target(pane_id), "-F", WINDOW_FORMAT,
        ])
        windows = self._parse_windows(output)
        if not windows:
            raise WindowNotFoundError(pane_id)
        return windows[0]

    def kill_session(self) -> None:
        """Kill the whole session. Errors are ignored."""
        if not self.session.created:
            return

        try:
            self.run_tmux(["kill-session", "-t", self.session_name])
            logger.info(f"Killed tmux session {self.session_name}")
        except TmuxError as e:
            # Session may already be gone
            logger.debug(f"Ignoring kill-session failure: {e}")
        self.session.created = False

    @staticmethod
    def _parse_windows(output: str) -> List[WindowInfo]:
        windows = []
        for line in output.splitlines():
            if not line:
                continue
            info = WindowInfo.from_line(line)
            if info is None:
                logger.debug(f"Skipping malformed list-windows line: {line!r}")
                continue
            windows.append(info)
        return windows
