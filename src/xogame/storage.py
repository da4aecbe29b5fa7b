"""
Key-value blob stores for persisted history.

A slot holds one text blob that is fully overwritten on every write.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol


class BlobStore(Protocol):
    def get(self, slot: str) -> Optional[str]: ...

    def set(self, slot: str, blob: str) -> None: ...

    def delete(self, slot: str) -> None: ...


class MemoryBlobStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, slot: str) -> Optional[str]:
        return self._slots.get(slot)

    def set(self, slot: str, blob: str) -> None:
        self._slots[slot] = blob

    def delete(self, slot: str) -> None:
        self._slots.pop(slot, None)


class DirectoryBlobStore:
    """One ``<slot>.json`` file per slot under ``root``; writes are atomic."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, slot: str) -> Path:
        if not slot or any(sep in slot for sep in ("/", "\\")) or slot.startswith("."):
            raise ValueError(f"Invalid slot name: {slot!r}")
        return self.root / f"{slot}.json"

    def get(self, slot: str) -> Optional[str]:
        path = self._path(slot)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, slot: str, blob: str) -> None:
        path = self._path(slot)
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{slot}.", suffix=".tmp", text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
        logging.debug("Wrote %d bytes to %s", len(blob), path)

    def delete(self, slot: str) -> None:
        try:
            self._path(slot).unlink()
        except FileNotFoundError:
            pass
