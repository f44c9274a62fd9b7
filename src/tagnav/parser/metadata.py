"""Normalize raw metadata snapshots into documents.

Everything here is pure and forgiving: a missing snapshot yields empty sets,
non-string tag entries are dropped, unparseable dates are ignored.
"""

from __future__ import annotations

import posixpath
import re
from datetime import date, datetime
from pathlib import PurePosixPath
from typing import Any

from ..config import TAG_SEPARATOR
from ..models import Document, NoteRecord, RawMetadata
from .links import normalize_link

# A tags field given as one string: "project, work/acme draft"
TAG_FIELD_SPLIT_PATTERN = re.compile(r"[,\s]+")


def extract_tags(metadata: RawMetadata | None) -> frozenset[str]:
    """Collect the normalized tag set from inline markers and the tags field."""
    if metadata is None:
        return frozenset()

    tags: set[str] = set()

    for raw in metadata.inline_tags:
        if isinstance(raw, str):
            _add_tag(tags, raw)

    field = (metadata.frontmatter or {}).get("tags")
    if isinstance(field, list):
        for raw in field:
            if isinstance(raw, str):
                _add_tag(tags, raw)
    elif isinstance(field, str):
        for raw in TAG_FIELD_SPLIT_PATTERN.split(field):
            _add_tag(tags, raw)

    return frozenset(tags)


def _add_tag(tags: set[str], raw: str) -> None:
    tag = normalize_tag(raw)
    if tag:
        tags.add(tag)


def normalize_tag(raw: str) -> str:
    """Strip whitespace, the "#" marker and stray separators from a tag."""
    return raw.strip().lstrip("#").strip().strip(TAG_SEPARATOR)


def extract_link_set(metadata: RawMetadata | None, source_id: str = "") -> frozenset[str]:
    """Normalized link targets, with "../" paths resolved from source_id's folder."""
    if metadata is None:
        return frozenset()
    folder = PurePosixPath(source_id).parent.as_posix() if source_id else "."
    links = (
        resolve_relative_link(normalize_link(raw), folder)
        for raw in metadata.links
        if isinstance(raw, str)
    )
    return frozenset(link for link in links if link)


def resolve_relative_link(link: str, folder: str) -> str:
    """Resolve a "../x" link against the linking note's folder.

    A link climbing above the KB root is reduced to its last segment, which
    still matches the target by file name.
    """
    if link != ".." and not link.startswith("../"):
        return link
    resolved = posixpath.normpath(posixpath.join(folder, link))
    if resolved == ".." or resolved.startswith("../"):
        return PurePosixPath(link).name.strip(".")
    return resolved


def resolve_title(doc_id: str, metadata: RawMetadata | None) -> str:
    """Frontmatter title, else first heading, else the file name."""
    if metadata is not None:
        title = (metadata.frontmatter or {}).get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        for heading in metadata.headings:
            if heading.strip():
                return heading.strip()
    return PurePosixPath(doc_id).stem


def coerce_timestamp(value: Any) -> float | None:
    """Convert a frontmatter date value to epoch seconds.

    YAML gives us datetime or date objects for unquoted values and strings for
    quoted ones. Anything else is ignored.
    """
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).timestamp()
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip()).timestamp()
        except ValueError:
            return None
    return None


def extract_document(record: NoteRecord) -> Document:
    """Build a normalized Document from a store record."""
    metadata = record.metadata
    created = record.created
    modified = record.modified

    if metadata is not None and metadata.frontmatter:
        created = coerce_timestamp(metadata.frontmatter.get("created")) or created
        modified = coerce_timestamp(metadata.frontmatter.get("updated")) or modified

    return Document(
        id=record.id,
        title=resolve_title(record.id, metadata),
        tags=extract_tags(metadata),
        links=extract_link_set(metadata, record.id),
        created=created,
        modified=modified,
    )
