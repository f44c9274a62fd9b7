"""Related-notes ranking.

Every note in the corpus is scored against the focused note with a weighted
sum of four factors:

    tag    number of shared tag prefix segments (a count, not a ratio, so
           notes sharing several nested categories outrank those sharing one)
    title  edit-distance similarity of the lowercase titles
    path   edit-distance similarity of the full paths, only when neither note
           sits at the KB root
    link   +1 if the candidate links to the focus, +1 if the focus links to
           the candidate

The scan is O(N) in the corpus and is run on demand, so callers should debounce
rapid focus changes (see FocusDebouncer).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from .config import FOCUS_DEBOUNCE_SECONDS
from .indexer import TagIndex
from .models import Document, RelatednessWeights, ScoreBreakdown, ScoreResult
from .similarity import similarity
from .tags import gather_all_prefix_segments

log = logging.getLogger(__name__)


def reference_keys(document: Document) -> set[str]:
    """Lowercase strings a link may use to point at this note."""
    keys = {document.name.lower(), document.title.lower()}
    doc_id = document.id.lower()
    keys.add(doc_id[:-3] if doc_id.endswith(".md") else doc_id)
    return keys


def links_to(source: Document, target_keys: set[str]) -> bool:
    return any(link.lower() in target_keys for link in source.links)


class RelatednessScorer:
    """Ranks the corpus against a focus note."""

    def __init__(self, index: TagIndex, weights: RelatednessWeights | None = None) -> None:
        self._index = index
        self._weights = weights or RelatednessWeights()

    @property
    def weights(self) -> RelatednessWeights:
        return self._weights

    def compute_related_notes(
        self,
        focus_id: str,
        *,
        include_breakdown: bool = False,
    ) -> list[ScoreResult]:
        """Score every other note against focus_id.

        Args:
            focus_id: Id of the focused note.
            include_breakdown: Attach the weighted per-factor components.

        Returns:
            Results sorted by descending score, ties by ascending id. Empty when
            the focus note's metadata is unavailable.
        """
        focus = self._index.get_document(focus_id)
        if focus is None:
            log.debug("No metadata for focus note %s", focus_id)
            return []

        focus_segments = gather_all_prefix_segments(focus.tags)
        focus_title = focus.title.lower()
        focus_keys = reference_keys(focus)

        results: list[ScoreResult] = []
        for candidate_id in self._index.document_ids():
            if candidate_id == focus_id:
                continue
            candidate = self._index.get_document(candidate_id)
            if candidate is None:
                continue

            breakdown = self._score(focus, focus_segments, focus_title, focus_keys, candidate)
            total = breakdown.tag + breakdown.title + breakdown.path + breakdown.link
            results.append(
                ScoreResult(
                    document_id=candidate_id,
                    score=total,
                    breakdown=breakdown if include_breakdown else None,
                )
            )

        results.sort(key=lambda result: (-result.score, result.document_id))
        return results

    def _score(
        self,
        focus: Document,
        focus_segments: set[str],
        focus_title: str,
        focus_keys: set[str],
        candidate: Document,
    ) -> ScoreBreakdown:
        weights = self._weights

        candidate_segments = gather_all_prefix_segments(candidate.tags)
        prefix_overlap = len(candidate_segments & focus_segments)

        title_sim = similarity(focus_title, candidate.title.lower())

        # Top-level notes carry no folder signal
        path_sim = 0.0
        if not focus.at_root and not candidate.at_root:
            path_sim = similarity(focus.id, candidate.id)

        link_score = 0
        if links_to(candidate, focus_keys):
            link_score += 1
        if links_to(focus, reference_keys(candidate)):
            link_score += 1

        return ScoreBreakdown(
            tag=weights.tag * prefix_overlap,
            title=weights.title * title_sim,
            path=weights.path * path_sim,
            link=weights.link * link_score,
        )


def filter_results(
    results: Iterable[ScoreResult],
    query: str,
    index: TagIndex,
) -> list[ScoreResult]:
    """Keep results whose title or any tag contains query (case-insensitive)."""
    needle = query.strip().lower()
    if not needle:
        return list(results)

    kept = []
    for result in results:
        if needle in index.get_title(result.document_id).lower():
            kept.append(result)
            continue
        if any(needle in tag.lower() for tag in index.get_note_tags(result.document_id)):
            kept.append(result)
    return kept


def select_top(
    results: Iterable[ScoreResult],
    limit: int | None = None,
    min_score: float | None = None,
) -> list[ScoreResult]:
    """Apply the caller's minimum-score threshold and top-N cut."""
    selected = [r for r in results if min_score is None or r.score >= min_score]
    if limit is not None:
        selected = selected[: max(limit, 0)]
    return selected


class FocusDebouncer:
    """Coalesces rapid focus changes into a single related-notes scan.

    No timers or callbacks: the caller reports focus changes with focus() and
    asks poll() whether a scan is due. A newer focus replaces the pending one.
    """

    def __init__(self, debounce_seconds: float = FOCUS_DEBOUNCE_SECONDS) -> None:
        self._debounce_seconds = debounce_seconds
        self._pending: str | None = None
        self._last_change = 0.0

    @property
    def pending(self) -> str | None:
        return self._pending

    def focus(self, note_id: str, now: float | None = None) -> None:
        self._pending = note_id
        self._last_change = time.monotonic() if now is None else now

    def poll(self, now: float | None = None) -> str | None:
        """Return the pending note id once its quiet period has elapsed."""
        if self._pending is None:
            return None
        now = time.monotonic() if now is None else now
        if now - self._last_change < self._debounce_seconds:
            return None
        note_id, self._pending = self._pending, None
        return note_id

    def cancel(self) -> None:
        self._pending = None
