"""Hierarchical tag prefix expansion."""

from collections.abc import Iterable

from .config import TAG_SEPARATOR


def expand_prefixes(tag: str) -> list[str]:
    """Expand a tag into its ancestor chain, root first.

    "person/family/child" -> ["person", "person/family", "person/family/child"]
    """
    segments = tag.split(TAG_SEPARATOR)
    return [TAG_SEPARATOR.join(segments[:i]) for i in range(1, len(segments) + 1)]


def gather_all_prefix_segments(tags: Iterable[str]) -> set[str]:
    """Union of every tag's prefixes.

    A note tagged "person/family" and "career/acme" yields
    {"person", "person/family", "career", "career/acme"}, so a note sharing
    only the parent category still overlaps.
    """
    segments: set[str] = set()
    for tag in tags:
        segments.update(expand_prefixes(tag))
    return segments
