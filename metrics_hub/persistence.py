# metrics_hub/persistence.py
"""
Traffic Metrics Hub - Snapshot Persistence

A durable key-value slot for the single dashboard snapshot blob.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol


class SnapshotStore(Protocol):
    def save(self, blob: str) -> None: ...

    def load(self) -> Optional[str]: ...


class FileSnapshotStore:
    """Snapshot saved as a UTF-8 text file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def save(self, blob: str) -> None:
        """Saves the snapshot, replacing the previous file in one step."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(blob)
        tmp_path.replace(self.path)

    def load(self) -> Optional[str]:
        """Loads the snapshot, or None when nothing was saved yet."""
        if not self.path.exists():
            return None
        with open(self.path, 'r', encoding='utf-8') as f:
            blob = f.read().strip()
            return blob if blob else None


class MemorySnapshotStore:
    """In-process slot; keeps every saved blob for inspection."""

    def __init__(self, initial: Optional[str] = None):
        self.saved: list[str] = []
        self._blob = initial

    def save(self, blob: str) -> None:
        self.saved.append(blob)
        self._blob = blob

    def load(self) -> Optional[str]:
        return self._blob
