"""Tests for related-notes scoring, filtering and debouncing."""

from __future__ import annotations

import pytest

from tagnav.indexer import TagIndex
from tagnav.models import Document, NoteRecord, RawMetadata, RelatednessWeights, ScoreResult
from tagnav.related import (
    FocusDebouncer,
    RelatednessScorer,
    filter_results,
    reference_keys,
    select_top,
)
from tagnav.store import MemoryStore


def _record(
    doc_id: str,
    title: str,
    tags: list[str] | None = None,
    links: list[str] | None = None,
) -> NoteRecord:
    return NoteRecord(
        id=doc_id,
        metadata=RawMetadata(frontmatter={"title": title, "tags": tags or []}, links=links or []),
    )


def _index(*records: NoteRecord) -> TagIndex:
    index = TagIndex(MemoryStore(records))
    index.rebuild()
    return index


@pytest.fixture
def corpus() -> TagIndex:
    """A={x} "Alpha", B={x/y} "Alphb", C={} "Gamma", all at the KB root."""
    return _index(
        _record("A.md", "Alpha", ["x"]),
        _record("B.md", "Alphb", ["x/y"]),
        _record("C.md", "Gamma"),
    )


class TestComputeRelatedNotes:
    def test_shared_parent_outranks_unrelated(self, corpus: TagIndex):
        results = RelatednessScorer(corpus).compute_related_notes("A.md")

        assert [r.document_id for r in results] == ["B.md", "C.md"]
        assert results[0].score == pytest.approx(1 + 0.8)
        assert results[1].score == pytest.approx(0.2)

    def test_focus_never_in_results(self, corpus: TagIndex):
        for focus in ("A.md", "B.md", "C.md"):
            results = RelatednessScorer(corpus).compute_related_notes(focus)
            assert focus not in {r.document_id for r in results}

    def test_sorted_non_increasing(self):
        index = _index(
            _record("n/focus.md", "Focus", ["a/b/c", "d"]),
            _record("n/one.md", "One", ["a"]),
            _record("n/two.md", "Two", ["a/b"]),
            _record("m/three.md", "Three", ["a/b/c", "d"]),
            _record("four.md", "Focus"),
        )
        scores = [r.score for r in RelatednessScorer(index).compute_related_notes("n/focus.md")]
        assert scores == sorted(scores, reverse=True)

    def test_unknown_focus_returns_empty(self, corpus: TagIndex):
        assert RelatednessScorer(corpus).compute_related_notes("missing.md") == []

    def test_focus_without_metadata_returns_empty(self):
        index = _index(NoteRecord(id="broken.md"), _record("ok.md", "Ok", ["x"]))
        assert RelatednessScorer(index).compute_related_notes("broken.md") == []

    def test_candidate_without_metadata_skipped(self):
        index = _index(_record("a.md", "A", ["x"]), NoteRecord(id="broken.md"))
        results = RelatednessScorer(index).compute_related_notes("a.md")
        assert results == []

    def test_prefix_overlap_is_a_count(self):
        index = _index(
            _record("f.md", "f", ["a/b/c"]),
            _record("deep.md", "d", ["a/b/c"]),
            _record("shallow.md", "s", ["a"]),
        )
        results = RelatednessScorer(
            index, RelatednessWeights(title=0, path=0, link=0)
        ).compute_related_notes("f.md")

        scores = {r.document_id: r.score for r in results}
        assert scores == {"deep.md": 3.0, "shallow.md": 1.0}

    def test_path_similarity_only_outside_root(self):
        index = _index(
            _record("dir/focus.md", "x", []),
            _record("dir/focal.md", "y", []),
            _record("focus.md", "z", []),
        )
        scorer = RelatednessScorer(index, RelatednessWeights(tag=0, title=0, link=0))
        results = {
            r.document_id: r for r in scorer.compute_related_notes("dir/focus.md", include_breakdown=True)
        }

        assert results["dir/focal.md"].breakdown.path > 0
        assert results["focus.md"].breakdown.path == 0.0

    @pytest.mark.parametrize(
        "focus_links,candidate_links,expected",
        [
            ([], [], 0),
            ([], ["focus"], 1),
            (["cand"], [], 1),
            (["cand"], ["focus"], 2),
        ],
    )
    def test_link_score(self, focus_links, candidate_links, expected):
        index = _index(
            _record("focus.md", "Focus Note", links=focus_links),
            _record("cand.md", "Candidate", links=candidate_links),
        )
        scorer = RelatednessScorer(index, RelatednessWeights(tag=0, title=0, path=0))
        (result,) = scorer.compute_related_notes("focus.md", include_breakdown=True)
        assert result.breakdown.link == expected

    def test_links_match_by_title_or_path(self):
        index = _index(
            _record("dir/focus.md", "Focus Note"),
            _record("dir/a.md", "A", links=["Focus Note"]),
            _record("dir/b.md", "B", links=["dir/focus"]),
            _record("dir/c.md", "C", links=["elsewhere"]),
        )
        scorer = RelatednessScorer(index, RelatednessWeights(tag=0, title=0, path=0))
        links = {r.document_id: r.score for r in scorer.compute_related_notes("dir/focus.md")}
        assert links == {"dir/a.md": 1.0, "dir/b.md": 1.0, "dir/c.md": 0.0}

    def test_cross_folder_markdown_link_counts(self):
        index = _index(
            _record("web/setup.md", "Setup"),
            _record("projects/cli.md", "CLI", links=["../web/setup.md"]),
        )
        scorer = RelatednessScorer(index, RelatednessWeights(tag=0, title=0, path=0))
        (result,) = scorer.compute_related_notes("web/setup.md")
        assert result.score == 1.0

    def test_weights_scale_components(self, corpus: TagIndex):
        scorer = RelatednessScorer(corpus, RelatednessWeights(tag=2.0, title=0.5))
        result = scorer.compute_related_notes("A.md", include_breakdown=True)[0]

        assert result.document_id == "B.md"
        assert result.breakdown.tag == 2.0
        assert result.breakdown.title == pytest.approx(0.4)
        assert result.score == pytest.approx(2.4)

    def test_breakdown_omitted_by_default(self, corpus: TagIndex):
        results = RelatednessScorer(corpus).compute_related_notes("A.md")
        assert all(r.breakdown is None for r in results)

    def test_ties_broken_by_id(self):
        index = _index(
            _record("f.md", "f", ["t"]),
            _record("z.md", "q", ["t"]),
            _record("a.md", "q", ["t"]),
            _record("m.md", "q", ["t"]),
        )
        results = RelatednessScorer(index).compute_related_notes("f.md")
        assert [r.document_id for r in results] == ["a.md", "m.md", "z.md"]

    def test_negative_weights_rejected(self):
        with pytest.raises(ValueError):
            RelatednessWeights(tag=-1)


class TestReferenceKeys:
    def test_keys(self):
        document = Document(id="Dir/My-Note.md", title="My Note")
        assert reference_keys(document) == {"my-note", "my note", "dir/my-note"}


class TestFilterResults:
    @pytest.fixture
    def index(self) -> TagIndex:
        return _index(
            _record("a.md", "Acme Launch", ["work/acme"]),
            _record("b.md", "Groceries", ["home"]),
            _record("c.md", "Budget", ["work/finance"]),
        )

    def _results(self) -> list[ScoreResult]:
        return [
            ScoreResult(document_id="a.md", score=3),
            ScoreResult(document_id="b.md", score=2),
            ScoreResult(document_id="c.md", score=1),
        ]

    def test_empty_query_keeps_all(self, index: TagIndex):
        assert len(filter_results(self._results(), "", index)) == 3

    def test_matches_title(self, index: TagIndex):
        kept = filter_results(self._results(), "GROC", index)
        assert [r.document_id for r in kept] == ["b.md"]

    def test_matches_tags_and_keeps_order(self, index: TagIndex):
        kept = filter_results(self._results(), "work", index)
        assert [r.document_id for r in kept] == ["a.md", "c.md"]


class TestSelectTop:
    def test_threshold_and_limit(self):
        results = [ScoreResult(document_id=str(i), score=s) for i, s in enumerate([5, 3, 1, 0.5])]

        assert [r.score for r in select_top(results, limit=2)] == [5, 3]
        assert [r.score for r in select_top(results, min_score=1)] == [5, 3, 1]
        assert [r.score for r in select_top(results, limit=1, min_score=4)] == [5]
        assert len(select_top(results)) == 4


class TestFocusDebouncer:
    def test_nothing_pending(self):
        assert FocusDebouncer().poll(now=100.0) is None

    def test_fires_after_quiet_period(self):
        debouncer = FocusDebouncer(debounce_seconds=0.15)
        debouncer.focus("a.md", now=10.0)

        assert debouncer.poll(now=10.1) is None
        assert debouncer.poll(now=10.15) == "a.md"
        # Fires once
        assert debouncer.poll(now=11.0) is None

    def test_latest_focus_supersedes(self):
        debouncer = FocusDebouncer(debounce_seconds=0.15)
        debouncer.focus("a.md", now=10.0)
        debouncer.focus("b.md", now=10.1)

        assert debouncer.poll(now=10.2) is None
        assert debouncer.poll(now=10.3) == "b.md"

    def test_cancel(self):
        debouncer = FocusDebouncer()
        debouncer.focus("a.md", now=0.0)
        debouncer.cancel()

        assert debouncer.pending is None
        assert debouncer.poll(now=10.0) is None
