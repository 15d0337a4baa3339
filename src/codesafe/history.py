"""Scan history storage keyed by file name."""

import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from .models import Finding, HistoryEntry

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[HistoryEntry])


class HistoryError(RuntimeError):
    """Raised when saved history cannot be read or written."""


class HistoryStore(ABC):
    """Abstract base class for history stores.

    Saving the same file name twice adds a second entry; nothing is replaced.
    """

    @abstractmethod
    def save(self, file_name: str, findings: Iterable[Finding]) -> HistoryEntry:
        """Record findings for a file and return the new entry."""
        pass

    @abstractmethod
    def list(self) -> list[HistoryEntry]:
        """Return all entries, newest first."""
        pass


def _new_entry(file_name: str, findings: Iterable[Finding]) -> HistoryEntry:
    return HistoryEntry(
        id=str(uuid.uuid4()),
        file_name=file_name,
        findings=list(findings),
        created_at=datetime.now(timezone.utc),
    )


class InMemoryHistoryStore(HistoryStore):
    """Process-local history, lost on restart."""

    def __init__(self):
        self._entries: list[HistoryEntry] = []
        self._lock = threading.Lock()

    def save(self, file_name: str, findings: Iterable[Finding]) -> HistoryEntry:
        entry = _new_entry(file_name, findings)
        with self._lock:
            self._entries.append(entry)
        return entry

    def list(self) -> list[HistoryEntry]:
        with self._lock:
            return list(reversed(self._entries))


class JsonFileHistoryStore(HistoryStore):
    """History kept in a single JSON document on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> list[HistoryEntry]:
        if not self.path.exists():
            return []
        try:
            return _ENTRIES.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            raise HistoryError(f"Failed to read history from {self.path}: {e}") from e

    def _write(self, entries: list[HistoryEntry]) -> None:
        # Written beside the target and swapped in, so a crash never leaves half a file.
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = _ENTRIES.dump_python(entries, mode="json")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise HistoryError(f"Failed to write history to {self.path}: {e}") from e

    def save(self, file_name: str, findings: Iterable[Finding]) -> HistoryEntry:
        entry = _new_entry(file_name, findings)
        with self._lock:
            entries = self._read()
            entries.append(entry)
            self._write(entries)
        logger.info(f"Saved {len(entry.findings)} findings for {file_name} to {self.path}")
        return entry

    def list(self) -> list[HistoryEntry]:
        with self._lock:
            return list(reversed(self._read()))
