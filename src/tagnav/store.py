"""Note stores: where the corpus comes from.

The analytical code only needs two things from its host: the ids of every
note, and one note's metadata snapshot. VaultStore reads a directory of
markdown files; MemoryStore holds records built in code.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from .config import MARKDOWN_SUFFIX
from .models import NoteRecord
from .parser import ParseError, parse_snapshot

log = logging.getLogger(__name__)


class NoteStore(Protocol):
    """Read-only access to the notes of a knowledge base."""

    def list_ids(self) -> list[str]:
        """Ids of every note currently in the corpus."""
        ...

    def get_record(self, note_id: str) -> NoteRecord | None:
        """Snapshot of one note, or None if the note no longer exists."""
        ...


class VaultStore:
    """Markdown files under a knowledge base root directory."""

    def __init__(self, kb_root: Path) -> None:
        self._kb_root = kb_root

    @property
    def kb_root(self) -> Path:
        return self._kb_root

    def list_ids(self) -> list[str]:
        if not self._kb_root.is_dir():
            return []

        ids = []
        for md_file in self._kb_root.rglob(f"*{MARKDOWN_SUFFIX}"):
            rel_path = md_file.relative_to(self._kb_root)
            # Skip hidden directories (.git, .obsidian) and special files
            if any(part.startswith(".") for part in rel_path.parts[:-1]):
                continue
            if md_file.name.startswith(("_", ".")):
                continue
            if md_file.is_file():
                ids.append(rel_path.as_posix())
        return sorted(ids)

    def get_record(self, note_id: str) -> NoteRecord | None:
        path = self._kb_root / note_id
        try:
            stat = path.stat()
        except OSError:
            return None

        try:
            metadata = parse_snapshot(path)
        except (ParseError, OSError, UnicodeDecodeError) as e:
            log.debug("Metadata unavailable for %s: %s", note_id, e)
            metadata = None

        return NoteRecord(
            id=note_id,
            metadata=metadata,
            # st_birthtime is the real creation time where the platform has it
            created=getattr(stat, "st_birthtime", stat.st_ctime),
            modified=stat.st_mtime,
        )


class MemoryStore:
    """Notes held in memory, keyed by id."""

    def __init__(self, records: Iterable[NoteRecord] = ()) -> None:
        self._records: dict[str, NoteRecord] = {}
        for record in records:
            self.put(record)

    def put(self, record: NoteRecord) -> None:
        self._records[record.id] = record

    def remove(self, note_id: str) -> None:
        self._records.pop(note_id, None)

    def list_ids(self) -> list[str]:
        return list(self._records)

    def get_record(self, note_id: str) -> NoteRecord | None:
        return self._records.get(note_id)
