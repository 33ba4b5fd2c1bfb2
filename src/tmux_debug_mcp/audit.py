"""Optional audit logging of tool calls.

Each tool invocation appends one JSON line to the audit log. Captured pane
text is never written to the log itself, only its byte count; when a
full-capture directory is configured the text is saved to a separate file
per capture.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from .utils import safe_filename

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class AuditEntry(BaseModel):
    """One audit log line."""

    ts: str = Field(default_factory=_timestamp, description="ISO 8601 UTC timestamp")
    tool: str = Field(..., description="Tool name")
    pane_id: Optional[str] = None
    command: Optional[str] = None
    name: Optional[str] = None
    keys: Optional[str] = None
    lines: Optional[int] = None
    output_bytes: Optional[int] = None

    @classmethod
    def create_pane(cls, pane_id: str, command: str, name: Optional[str] = None) -> "AuditEntry":
        return cls(tool="create_pane", pane_id=pane_id, command=command, name=name)

    @classmethod
    def send_keys(cls, pane_id: str, keys: str) -> "AuditEntry":
        return cls(tool="send_keys", pane_id=pane_id, keys=keys)

    @classmethod
    def capture_pane(cls, pane_id: str, lines: int, output_bytes: int) -> "AuditEntry":
        return cls(tool="capture_pane", pane_id=pane_id, lines=lines, output_bytes=output_bytes)

    @classmethod
    def kill_pane(cls, pane_id: str) -> "AuditEntry":
        return cls(tool="kill_pane", pane_id=pane_id)

    @classmethod
    def list_panes(cls) -> "AuditEntry":
        return cls(tool="list_panes")

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class AuditLogger:
    """Appends audit entries to a JSON Lines file."""

    def __init__(self, log_path: Union[str, Path], full_capture_dir: Optional[Union[str, Path]] = None):
        """Initialize audit logger.

        Args:
            log_path: Audit log file, created on first write
            full_capture_dir: Directory for full capture files, None to disable
        """
        self.log_path = Path(log_path).expanduser()
        self.full_capture_dir = Path(full_capture_dir).expanduser() if full_capture_dir else None
        self._capture_counter = 1

    @classmethod
    def from_config(cls, config) -> Optional["AuditLogger"]:
        """Build from the [audit] config section. None if no log path is set."""
        if not config.audit.log_path:
            return None
        return cls(config.audit.log_path, config.audit.full_capture_dir or None)

    @property
    def has_full_capture(self) -> bool:
        return self.full_capture_dir is not None

    def log(self, entry: AuditEntry) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def log_create_pane(self, pane_id: str, command: str, name: Optional[str] = None) -> None:
        self.log(AuditEntry.create_pane(pane_id, command, name))

    def log_send_keys(self, pane_id: str, keys: str) -> None:
        self.log(AuditEntry.send_keys(pane_id, keys))

    def log_capture_pane(self, pane_id: str, lines: int, output_bytes: int) -> None:
        self.log(AuditEntry.capture_pane(pane_id, lines, output_bytes))

    def log_kill_pane(self, pane_id: str) -> None:
        self.log(AuditEntry.kill_pane(pane_id))

    def log_list_panes(self) -> None:
        self.log(AuditEntry.list_panes())

    def save_full_capture(self, pane_id: str, content: str) -> Optional[str]:
        """Save captured text to its own file.

        Returns:
            The filename written, or None if full capture is disabled
        """
        if not self.has_full_capture:
            return None

        self.full_capture_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{safe_filename(pane_id)}-capture-{self._capture_counter:03d}.txt"
        self._capture_counter += 1

        (self.full_capture_dir / filename).write_text(content, encoding="utf-8")
        logger.debug(f"Saved full capture of {pane_id} to {filename}")
        return filename
