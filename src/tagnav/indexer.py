"""Per-note tag and title cache.

The index is an explicit object owned by whoever builds it and handed to the
scorer and the navigator. It is only ever replaced wholesale by rebuild();
there is no incremental update path.
"""

from __future__ import annotations

import logging
from collections import Counter

from .models import Document, TagCount
from .parser import extract_document
from .store import NoteStore

log = logging.getLogger(__name__)


class TagIndex:
    """Snapshot of every note's normalized metadata."""

    def __init__(self, store: NoteStore) -> None:
        self._store = store
        self._documents: dict[str, Document] = {}
        self._unavailable: frozenset[str] = frozenset()
        self._built = False

    @property
    def store(self) -> NoteStore:
        return self._store

    @property
    def built(self) -> bool:
        return self._built

    def rebuild(self) -> int:
        """Re-read every note from the store and replace the cached maps.

        Returns:
            Number of notes indexed.
        """
        documents: dict[str, Document] = {}
        unavailable: set[str] = set()

        for note_id in self._store.list_ids():
            record = self._store.get_record(note_id)
            if record is None:
                # Vanished between listing and reading
                continue
            if record.metadata is None:
                unavailable.add(note_id)
            documents[note_id] = extract_document(record)

        self._documents = documents
        self._unavailable = frozenset(unavailable)
        self._built = True

        log.debug(
            "Indexed %d notes (%d without readable metadata)",
            len(documents),
            len(unavailable),
        )
        return len(documents)

    def ensure_built(self) -> None:
        if not self._built:
            self.rebuild()

    def document_ids(self) -> list[str]:
        return list(self._documents)

    def all_documents(self) -> list[Document]:
        """Every note, including those whose metadata could not be read."""
        return list(self._documents.values())

    def get_document(self, note_id: str) -> Document | None:
        """The note's snapshot, or None when unknown or its metadata is unavailable."""
        if note_id in self._unavailable:
            return None
        return self._documents.get(note_id)

    def get_note_tags(self, note_id: str) -> frozenset[str]:
        document = self._documents.get(note_id)
        return document.tags if document else frozenset()

    def get_title(self, note_id: str) -> str:
        document = self._documents.get(note_id)
        return document.title if document else note_id

    def tag_counts(self, min_count: int = 1) -> list[TagCount]:
        """Every tag with its usage count, most used first."""
        counts: Counter[str] = Counter()
        for document in self._documents.values():
            counts.update(document.tags)

        return [
            TagCount(tag=tag, count=count)
            for tag, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
            if count >= min_count
        ]
