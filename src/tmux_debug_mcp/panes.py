"""Pane registry.

The registry is the authoritative record of which panes exist and what
state they're in. tmux is only consulted to refresh status.
"""
import logging
from typing import Dict, Iterator, Optional

from .models.pane import PaneRecord, PaneStatus

logger = logging.getLogger(__name__)

ID_PREFIX = "debug-"


class PaneRegistry:
    """Maps generated pane IDs to pane records."""

    def __init__(self):
        self._panes: Dict[str, PaneRecord] = {}
        self._next_id = 1

    def generate_id(self) -> str:
        """Return the next pane ID. IDs are never reused, even after removal."""
        pane_id = f"{ID_PREFIX}{self._next_id}"
        self._next_id += 1
        return pane_id

    def create(self, command: str, name: Optional[str] = None) -> str:
        """Register a new running pane and return its ID.

        Args:
            command: Command the pane will run
            name: Optional display name, defaults to the ID
        """
        pane_id = self.generate_id()
        self._panes[pane_id] = PaneRecord(
            id=pane_id,
            name=name if name is not None else pane_id,
            command=command,
        )
        logger.debug(f"Registered pane {pane_id}")
        return pane_id

    def get(self, pane_id: str) -> Optional[PaneRecord]:
        """Snapshot of a pane, or None."""
        pane = self._panes.get(pane_id)
        return pane.model_copy() if pane is not None else None

    def get_mut(self, pane_id: str) -> Optional[PaneRecord]:
        """The live record, or None. Changes are seen by the registry."""
        return self._panes.get(pane_id)

    def contains(self, pane_id: str) -> bool:
        return pane_id in self._panes

    def update_status(self, pane_id: str, status: PaneStatus) -> bool:
        """Set a pane's status. Returns False if the pane isn't tracked."""
        pane = self._panes.get(pane_id)
        if pane is None:
            return False
        if pane.status != status:
            logger.debug(f"Pane {pane_id}: {pane.status} -> {status}")
        pane.status = status
        return True

    def remove(self, pane_id: str) -> Optional[PaneRecord]:
        """Stop tracking a pane. Returns the removed record, or None."""
        pane = self._panes.pop(pane_id, None)
        if pane is not None:
            logger.debug(f"Removed pane {pane_id}")
        return pane

    def iter(self) -> Iterator[PaneRecord]:
        """Iterate over tracked panes."""
        return iter(list(self._panes.values()))

    def __iter__(self) -> Iterator[PaneRecord]:
        return self.iter()

    def __len__(self) -> int:
        return len(self._panes)

    def __contains__(self, pane_id: object) -> bool:
        return pane_id in self._panes

    def is_empty(self) -> bool:
        return not self._panes
