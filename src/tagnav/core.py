"""Navigator: the operations tagnav exposes to its host.

    navigator = TagNavigator.for_kb(Path("~/notes").expanduser())
    navigator.related("projects/web/setup.md")
    navigator.browse(query="acme", mode="document-count")

Nothing is computed in the background. The index is built on first use and
rebuilt wholesale by rebuild_index(); every other call recomputes from it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .hierarchy import (
    FilterScope,
    SortMode,
    TagTree,
    build_tag_hierarchy,
    collapse_for_display,
    filter_hierarchy,
    sort_hierarchy,
)
from .indexer import TagIndex
from .models import DisplayNode, ScoreResult, TagCount
from .related import FocusDebouncer, RelatednessScorer, filter_results, select_top
from .settings import NavSettings, load_settings
from .store import NoteStore, VaultStore

log = logging.getLogger(__name__)


class TagNavigator:
    """Related-notes ranking and tag-tree browsing over one note store."""

    def __init__(
        self,
        store: NoteStore,
        settings: NavSettings | None = None,
        index: TagIndex | None = None,
    ) -> None:
        self._settings = settings or NavSettings()
        self._index = index or TagIndex(store)
        self._scorer = RelatednessScorer(self._index, self._settings.weights)
        self._debouncer = FocusDebouncer(self._settings.debounce_seconds)

    @classmethod
    def for_kb(cls, kb_root: Path) -> TagNavigator:
        """Navigator over a markdown directory, with its .kbconfig settings."""
        return cls(VaultStore(kb_root), settings=load_settings(kb_root))

    @property
    def settings(self) -> NavSettings:
        return self._settings

    @property
    def index(self) -> TagIndex:
        self._index.ensure_built()
        return self._index

    def rebuild_index(self) -> int:
        """Re-read the whole corpus. Returns the number of notes indexed."""
        return self._index.rebuild()

    # ─────────────────────────────────────────────────────────────────────
    # Related notes
    # ─────────────────────────────────────────────────────────────────────

    def compute_related_notes(
        self,
        focus_id: str,
        include_breakdown: bool = False,
    ) -> list[ScoreResult]:
        """Every other note ranked against focus_id, highest score first."""
        self._index.ensure_built()
        return self._scorer.compute_related_notes(focus_id, include_breakdown=include_breakdown)

    def related(
        self,
        focus_id: str,
        query: str = "",
        limit: int | None = None,
        min_score: float | None = None,
        include_breakdown: bool = False,
    ) -> list[ScoreResult]:
        """Related notes as shown to a user: filtered, thresholded and cut to size.

        limit and min_score default to the configured values.
        """
        results = self.compute_related_notes(focus_id, include_breakdown=include_breakdown)
        results = filter_results(results, query, self._index)
        return select_top(
            results,
            limit=self._settings.related_limit if limit is None else limit,
            min_score=self._settings.min_score if min_score is None else min_score,
        )

    def focus_changed(self, note_id: str, now: float | None = None) -> None:
        """Record a focus change; the scan happens in poll_related()."""
        self._debouncer.focus(note_id, now)

    def poll_related(self, now: float | None = None) -> tuple[str, list[ScoreResult]] | None:
        """Run the related scan for the latest focus once it has settled.

        Returns:
            (note_id, results) when a scan was due, None otherwise.
        """
        note_id = self._debouncer.poll(now)
        if note_id is None:
            return None
        log.debug("Focus settled on %s, computing related notes", note_id)
        return note_id, self.related(note_id)

    # ─────────────────────────────────────────────────────────────────────
    # Tag hierarchy
    # ─────────────────────────────────────────────────────────────────────

    def build_tag_hierarchy(self) -> TagTree:
        self._index.ensure_built()
        return build_tag_hierarchy(self._index.all_documents())

    def filter_hierarchy(
        self,
        tree: TagTree,
        query: str,
        scope: FilterScope | None = None,
    ) -> TagTree:
        return filter_hierarchy(tree, query, scope or self._settings.filter_scope)

    def sort_hierarchy(self, tree: TagTree, mode: SortMode | None = None) -> TagTree:
        return sort_hierarchy(tree, mode or self._settings.sort_mode)

    def browse(
        self,
        query: str = "",
        scope: FilterScope | None = None,
        mode: SortMode | None = None,
    ) -> list[DisplayNode]:
        """Build, filter, sort and collapse the tag tree in one call."""
        tree = self.build_tag_hierarchy()
        tree = self.filter_hierarchy(tree, query.strip().lower(), scope)
        tree = self.sort_hierarchy(tree, mode)
        return collapse_for_display(tree)

    def tag_counts(self, min_count: int = 1) -> list[TagCount]:
        return self.index.tag_counts(min_count=min_count)
