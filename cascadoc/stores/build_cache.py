"""Process-lifetime cache of rendered document output."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Tuple

BODY_KEY = "body"


class BuildCache:
    """Maps document identifiers to their last rendered result.

    Entries are never evicted or persisted. Mutations and snapshots are
    serialised by a lock because preview requests and watch batches run on
    separate threads.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def store(self, identifier: str, body: str) -> None:
        """Create or overwrite the entry for ``identifier`` with a fresh body."""
        with self._lock:
            self._entries[identifier] = {BODY_KEY: body}

    def update(self, identifier: str, fields: Dict[str, Any]) -> None:
        """Merge derived fields into an existing entry."""
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return
            for key, value in fields.items():
                if key != BODY_KEY:
                    entry[key] = value

    def get(self, identifier: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(identifier)
            return dict(entry) if entry is not None else None

    def body(self, identifier: str) -> Optional[str]:
        entry = self.get(identifier)
        if entry is None:
            return None
        return entry.get(BODY_KEY)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def items(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Return a snapshot of ``(identifier, entry)`` pairs in insertion order."""
        with self._lock:
            return [(key, dict(entry)) for key, entry in self._entries.items()]

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["BODY_KEY", "BuildCache"]
