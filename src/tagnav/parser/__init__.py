"""Markdown parsing and metadata normalization."""

from .links import extract_links, normalize_link
from .markdown import ParseError, parse_snapshot, parse_snapshot_text
from .metadata import (
    coerce_timestamp,
    extract_document,
    extract_link_set,
    extract_tags,
    normalize_tag,
    resolve_relative_link,
    resolve_title,
)

__all__ = [
    "ParseError",
    "parse_snapshot",
    "parse_snapshot_text",
    "extract_links",
    "normalize_link",
    "extract_tags",
    "extract_link_set",
    "extract_document",
    "normalize_tag",
    "resolve_relative_link",
    "resolve_title",
    "coerce_timestamp",
]
