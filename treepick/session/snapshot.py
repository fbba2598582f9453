"""
Snapshot Store - Optional save/restore of the canonical state.

The file holds State.to_dict() as JSON. Writes go to a sibling temp file
first and are moved into place, so a crash never leaves half a snapshot.
"""

from __future__ import annotations
from pathlib import Path
import json
import os

from loguru import logger

from ..engine_core.state import State


class SnapshotError(Exception):
    """Raised when a snapshot file exists but cannot be read back."""


class SnapshotStore:
    """Reads and writes one snapshot file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> State | None:
        """Return the saved state, or None if nothing was saved yet."""
        if not self.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            state = State.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e
        logger.info("Restored snapshot from {} (phase={}, time={})", self.path, state.phase.value, state.time)
        return state

    def save(self, state: State) -> None:
        """Write the state, replacing any previous snapshot."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)
        logger.debug("Saved snapshot to {}", self.path)
