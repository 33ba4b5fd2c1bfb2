"""Tool dispatcher.

Maps a tools/call name and argument bag onto the registry and the tmux
engine, and renders the outcome as text for the client.
"""
import json
import logging
from typing import Any, Callable, Dict, Optional

from .audit import AuditLogger
from .errors import PaneNotFoundError, ToolValidationError
from .mcp.protocol import ToolCallResult
from .mcp.tools import (
    CAPTURE_PANE,
    CREATE_PANE,
    DEFAULT_CAPTURE_LINES,
    KILL_PANE,
    LIST_PANES,
    MAX_CAPTURE_LINES,
    MIN_CAPTURE_LINES,
    SEND_KEYS,
    TOOL_NAMES,
)
from .panes import PaneRegistry
from .tmux import TmuxError, TmuxSession

logger = logging.getLogger(__name__)

PANE_ID_HINT = "Use list_panes to see active panes."

Arguments = Dict[str, Any]


def _require_string(args: Arguments, key: str, hint: str) -> str:
    value = args.get(key)
    if value is None:
        raise ToolValidationError(key, f"Missing required parameter '{key}'. {hint}")
    if not isinstance(value, str):
        raise ToolValidationError(key, f"Invalid parameter '{key}': expected a string")
    return value


def _optional_string(args: Arguments, key: str) -> Optional[str]:
    value = args.get(key)
    if value is not None and not isinstance(value, str):
        raise ToolValidationError(key, f"Invalid parameter '{key}': expected a string")
    return value


def _optional_lines(args: Arguments) -> int:
    value = args.get("lines")
    if value is None:
        return DEFAULT_CAPTURE_LINES
    # bool is a subclass of int but never a line count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ToolValidationError("lines", "Invalid parameter 'lines': expected an integer")
    return max(MIN_CAPTURE_LINES, min(MAX_CAPTURE_LINES, value))


class ToolDispatcher:
    """Runs pane tools against a registry and a tmux session."""

    def __init__(self, registry: PaneRegistry, engine: TmuxSession,
                 audit: Optional[AuditLogger] = None):
        self.registry = registry
        self.engine = engine
        self.audit = audit
        self._handlers: Dict[str, Callable[[Arguments], ToolCallResult]] = {
            CREATE_PANE: self.create_pane,
            SEND_KEYS: self.send_keys,
            CAPTURE_PANE: self.capture_pane,
            KILL_PANE: self.kill_pane,
            LIST_PANES: self.list_panes,
        }

    def call(self, name: str, arguments: Optional[Arguments] = None) -> ToolCallResult:
        """Dispatch a tool call. Failures come back as error results."""
        handler = self._handlers.get(name)
        if handler is None:
            return ToolCallResult.error(
                f"Unknown tool '{name}'. Available tools: {', '.join(TOOL_NAMES)}"
            )

        logger.debug(f"Tool call {name}: {arguments}")
        try:
            return handler(arguments or {})
        except (ToolValidationError, PaneNotFoundError) as e:
            return ToolCallResult.error(str(e))
        except Exception as e:
            logger.exception(f"Tool {name} failed unexpectedly")
            return ToolCallResult.error(f"Internal error: {e}")

    def _audit(self, method: str, *args) -> Optional[Any]:
        """Call an audit logger method, ignoring any failure."""
        if self.audit is None:
            return None
        try:
            return getattr(self.audit, method)(*args)
        except Exception as e:
            logger.warning(f"Audit {method} failed: {e}")
            return None

    def _check_tracked(self, pane_id: str) -> None:
        if not self.registry.contains(pane_id):
            raise PaneNotFoundError(pane_id)

    def create_pane(self, args: Arguments) -> ToolCallResult:
        command = _require_string(args, "command", "Provide the command to run in the pane.")
        name = _optional_string(args, "name")

        pane_id = self.registry.create(command, name)
        try:
            self.engine.create_pane(command, pane_id)
        except TmuxError as e:
            # Registration was speculative, undo it
            self.registry.remove(pane_id)
            logger.warning(f"Failed to create pane {pane_id}: {e}")
            return ToolCallResult.error(f"Failed to create pane: {e}")
        except Exception:
            self.registry.remove(pane_id)
            raise

        self._audit("log_create_pane", pane_id, command, name)

        display_name = name if name is not None else pane_id
        return ToolCallResult.success(
            f"Created pane '{display_name}' (id: {pane_id}) running: {command}"
        )

    def send_keys(self, args: Arguments) -> ToolCallResult:
        pane_id = _require_string(args, "pane_id", PANE_ID_HINT)
        keys = _require_string(args, "keys", "Provide the keystrokes to send.")
        self._check_tracked(pane_id)

        try:
            self.engine.send_keys(pane_id, keys)
        except TmuxError as e:
            return ToolCallResult.error(f"Failed to send keys: {e}")

        self._audit("log_send_keys", pane_id, keys)
        return ToolCallResult.success(f"Sent keys to pane '{pane_id}'")

    def capture_pane(self, args: Arguments) -> ToolCallResult:
        pane_id = _require_string(args, "pane_id", PANE_ID_HINT)
        lines = _optional_lines(args)
        self._check_tracked(pane_id)

        try:
            output = self.engine.capture_pane(pane_id, lines)
        except TmuxError as e:
            return ToolCallResult.error(f"Failed to capture pane: {e}")

        self._audit("log_capture_pane", pane_id, lines, len(output.encode("utf-8")))
        self._audit("save_full_capture", pane_id, output)

        try:
            info = self.engine.get_window_info(pane_id)
        except TmuxError as e:
            logger.debug(f"Could not refresh status of {pane_id}: {e}")
        else:
            self.registry.update_status(pane_id, info.status)

        return ToolCallResult.success(output)

    def kill_pane(self, args: Arguments) -> ToolCallResult:
        pane_id = _require_string(args, "pane_id", PANE_ID_HINT)
        self._check_tracked(pane_id)

        try:
            self.engine.kill_pane(pane_id)
        except TmuxError as e:
            return ToolCallResult.error(f"Failed to kill pane: {e}")

        self.registry.remove(pane_id)
        self._audit("log_kill_pane", pane_id)
        return ToolCallResult.success(f"Killed pane '{pane_id}'")

    def list_panes(self, args: Arguments) -> ToolCallResult:
        self.refresh_statuses()
        self._audit("log_list_panes")

        panes = [pane.summary() for pane in self.registry.iter()]
        if not panes:
            return ToolCallResult.success(f"No active panes. Use {CREATE_PANE} to create one.")
        return ToolCallResult.success(json.dumps(panes, indent=2))

    def refresh_statuses(self) -> None:
        """Update tracked panes from tmux. Failures keep the last known status."""
        try:
            windows = self.engine.list_windows()
        except TmuxError as e:
            logger.debug(f"Could not list windows, using last known statuses: {e}")
            return

        for window in windows:
            # Windows are named after the pane IDs we generated
            self.registry.update_status(window.name, window.status)
