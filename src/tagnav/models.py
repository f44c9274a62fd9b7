"""Pydantic models for tagnav."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_FACTOR_WEIGHT


class RawMetadata(BaseModel):
    """Raw metadata snapshot of one note, as read from the host.

    The list fields are deliberately untyped: frontmatter is user-written YAML
    and may carry numbers or nested values where strings are expected.
    """

    frontmatter: dict[str, Any] | None = None
    inline_tags: list[Any] = Field(default_factory=list)  # "#topic/health" style markers
    links: list[Any] = Field(default_factory=list)  # Raw link targets
    headings: list[str] = Field(default_factory=list)  # In document order


class NoteRecord(BaseModel):
    """What the note store returns for a single note."""

    id: str  # Root-relative POSIX path, e.g. "projects/web/setup.md"
    metadata: RawMetadata | None = None  # None when the note could not be read
    created: float = 0.0  # Epoch seconds
    modified: float = 0.0  # Epoch seconds


class Document(BaseModel):
    """Normalized, read-only snapshot of one note."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    tags: frozenset[str] = frozenset()
    links: frozenset[str] = frozenset()
    created: float = 0.0
    modified: float = 0.0

    @property
    def name(self) -> str:
        """File name without extension."""
        return PurePosixPath(self.id).stem

    @property
    def folder(self) -> str:
        """Root-relative parent directory, empty at the KB root."""
        parent = PurePosixPath(self.id).parent
        return "" if str(parent) == "." else str(parent)

    @property
    def at_root(self) -> bool:
        return self.folder == ""


class RelatednessWeights(BaseModel):
    """Weight of each relatedness factor."""

    tag: float = Field(default=DEFAULT_FACTOR_WEIGHT, ge=0)
    title: float = Field(default=DEFAULT_FACTOR_WEIGHT, ge=0)
    path: float = Field(default=DEFAULT_FACTOR_WEIGHT, ge=0)
    link: float = Field(default=DEFAULT_FACTOR_WEIGHT, ge=0)


class ScoreBreakdown(BaseModel):
    """Weighted contribution of each factor to a relatedness score."""

    tag: float = 0.0
    title: float = 0.0
    path: float = 0.0
    link: float = 0.0


class ScoreResult(BaseModel):
    """A related note and its score."""

    document_id: str
    score: float
    breakdown: ScoreBreakdown | None = None


class DisplayNode(BaseModel):
    """A tag node as shown to the user, after single-child collapsing."""

    label: str  # "work" or a collapsed chain like "work/acme"
    path: str  # Full tag path, e.g. "area/work/acme"
    documents: list[Document] = Field(default_factory=list)
    children: list[DisplayNode] = Field(default_factory=list)
    direct_count: int = 0
    total_count: int = 0


class TagCount(BaseModel):
    """A tag and the number of notes carrying it."""

    tag: str
    count: int
