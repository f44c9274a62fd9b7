"""Tag hierarchy: build, filter, sort and collapse for display.

A tree is a dict mapping segment name to TagNode, in display order. Notes
tagged "work/acme" live in tree["work"].children["acme"].documents. The
filter and sorter return new trees and never mutate their input.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from .config import TAG_SEPARATOR, UNTAGGED_KEY
from .models import DisplayNode, Document

FilterScope = Literal["tags-and-files", "tags-only", "files-only"]

SortMode = Literal[
    "alphabetical",
    "document-count",
    "created-newest",
    "created-oldest",
    "modified-newest",
    "modified-oldest",
]

FILTER_SCOPES: tuple[str, ...] = ("tags-and-files", "tags-only", "files-only")
SORT_MODES: tuple[str, ...] = (
    "alphabetical",
    "document-count",
    "created-newest",
    "created-oldest",
    "modified-newest",
    "modified-oldest",
)


@dataclass
class TagNode:
    """A tag bucket: the notes carrying exactly this tag path, and sub-tags."""

    documents: dict[str, Document] = field(default_factory=dict)
    children: dict[str, TagNode] = field(default_factory=dict)

    def total_count(self) -> int:
        """Direct notes plus every note in the subtree (counted once per node)."""
        return len(self.documents) + sum(child.total_count() for child in self.children.values())


TagTree = dict[str, TagNode]


# ─────────────────────────────────────────────────────────────────────────────
# Build
# ─────────────────────────────────────────────────────────────────────────────


def build_tag_hierarchy(documents: Iterable[Document]) -> TagTree:
    """Insert every note at the leaf of each of its tag paths.

    Notes without tags go to the reserved "untagged" bucket at the root.
    """
    tree: TagTree = {}
    for document in documents:
        if not document.tags:
            tree.setdefault(UNTAGGED_KEY, TagNode()).documents[document.id] = document
            continue
        for tag in sorted(document.tags):
            segments = [segment for segment in tag.split(TAG_SEPARATOR) if segment]
            if segments:
                _insert(tree, segments, document)
    return tree


def _insert(tree: TagTree, segments: list[str], document: Document) -> None:
    node = tree.setdefault(segments[0], TagNode())
    for segment in segments[1:]:
        node = node.children.setdefault(segment, TagNode())
    node.documents[document.id] = document


# ─────────────────────────────────────────────────────────────────────────────
# Filter
# ─────────────────────────────────────────────────────────────────────────────


def filter_hierarchy(
    tree: TagTree,
    query: str,
    scope: FilterScope = "tags-and-files",
) -> TagTree:
    """Prune the tree to nodes matching query.

    Scopes:
        tags-and-files: a node stays if its name (or an ancestor's) matches,
            a note name matches, or a descendant stays. Name matches reveal all
            of the node's notes; otherwise only the matching ones.
        tags-only: note names are ignored; matching tag paths keep all notes.
        files-only: only note names count. Nodes kept just to reach deeper
            matches are empty placeholders.

    An empty query returns the tree unchanged.
    """
    if not query:
        return tree
    if scope not in FILTER_SCOPES:
        raise ValueError(f"Unknown filter scope: {scope}")
    return _filter(tree, query.lower(), scope, ancestor_matched=False)


def _filter(tree: TagTree, query: str, scope: str, ancestor_matched: bool) -> TagTree:
    result: TagTree = {}

    for key, node in tree.items():
        tag_name_matches = query in key.lower()
        name_or_ancestor = tag_name_matches or ancestor_matched
        matching = {
            doc_id: doc for doc_id, doc in node.documents.items() if query in doc.name.lower()
        }

        if scope == "files-only":
            children = _filter(node.children, query, scope, ancestor_matched=False)
            if matching or children:
                result[key] = TagNode(documents=matching, children=children)
            continue

        children = _filter(node.children, query, scope, ancestor_matched=name_or_ancestor)

        if scope == "tags-only":
            if name_or_ancestor or children:
                result[key] = TagNode(documents=dict(node.documents), children=children)
            continue

        if name_or_ancestor or matching or children:
            documents = dict(node.documents) if name_or_ancestor else matching
            result[key] = TagNode(documents=documents, children=children)

    return result


# ─────────────────────────────────────────────────────────────────────────────
# Sort
# ─────────────────────────────────────────────────────────────────────────────


def alphabetical_key(text: str) -> tuple[str, str]:
    """Case- and accent-insensitive ordering key, raw text as final tie-break."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base.casefold(), text)


def _timestamp(document: Document, mode: str) -> float:
    return document.created if mode.startswith("created") else document.modified


def _node_timestamp(node: TagNode, mode: str) -> float:
    """Newest or oldest direct note timestamp, 0 for nodes without notes."""
    if not node.documents:
        return 0.0
    stamps = [_timestamp(document, mode) for document in node.documents.values()]
    return max(stamps) if mode.endswith("newest") else min(stamps)


def _node_sort_key(key: str, node: TagNode, mode: str) -> tuple:
    if mode == "alphabetical":
        return alphabetical_key(key)
    if mode == "document-count":
        return (-node.total_count(), alphabetical_key(key))
    stamp = _node_timestamp(node, mode)
    return (-stamp if mode.endswith("newest") else stamp, alphabetical_key(key))


def sort_documents(documents: Iterable[Document], mode: SortMode) -> list[Document]:
    """Order a node's own notes for display.

    Count mode has no per-note meaning, so notes keep their insertion order.
    """
    documents = list(documents)
    if mode == "alphabetical":
        return sorted(documents, key=lambda doc: alphabetical_key(doc.name))
    if mode == "document-count":
        return documents
    newest = mode.endswith("newest")
    return sorted(
        documents,
        key=lambda doc: (-_timestamp(doc, mode) if newest else _timestamp(doc, mode), doc.id),
    )


def sort_hierarchy(tree: TagTree, mode: SortMode = "alphabetical") -> TagTree:
    """Reorder siblings at every level by mode; each level is sorted independently."""
    if mode not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {mode}")

    ordered = sorted(tree.items(), key=lambda item: _node_sort_key(item[0], item[1], mode))
    result: TagTree = {}
    for key, node in ordered:
        result[key] = TagNode(
            documents={doc.id: doc for doc in sort_documents(node.documents.values(), mode)},
            children=sort_hierarchy(node.children, mode),
        )
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Display
# ─────────────────────────────────────────────────────────────────────────────


def collapse_for_display(tree: TagTree, parent_path: str = "") -> list[DisplayNode]:
    """Merge single-child, note-less nodes into "parent/child" labels.

    "work" holding only "acme" (and no notes of its own) is shown as one
    "work/acme" entry. Applied recursively; the tree itself is untouched.
    """
    nodes: list[DisplayNode] = []
    for key, node in tree.items():
        label = key
        while len(node.children) == 1 and not node.documents:
            child_key, node = next(iter(node.children.items()))
            label = f"{label}{TAG_SEPARATOR}{child_key}"

        path = f"{parent_path}{TAG_SEPARATOR}{label}" if parent_path else label
        nodes.append(
            DisplayNode(
                label=label,
                path=path,
                documents=list(node.documents.values()),
                children=collapse_for_display(node.children, path),
                direct_count=len(node.documents),
                total_count=node.total_count(),
            )
        )
    return nodes
