"""Markdown parsing into raw metadata snapshots."""

import re
from pathlib import Path

import frontmatter

from ..models import RawMetadata
from .links import extract_links

# Fenced code blocks (``` or ~~~) and inline code spans hide tags and links
FENCED_CODE_PATTERN = re.compile(r"^(```|~~~).*?^\1[^\n]*$", re.MULTILINE | re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r"`[^`\n]*`")

# ATX headings: "# Title" up to "###### Title"
HEADING_PATTERN = re.compile(r"^#{1,6}[ \t]+(.+?)[ \t#]*$", re.MULTILINE)

# Inline tags: "#tag" or "#area/topic", not preceded by a word character so that
# URL anchors ("page#section") and heading markers ("## ") are not picked up
INLINE_TAG_PATTERN = re.compile(r"(?<![\w#&/])#([\w][\w/-]*)")


class ParseError(Exception):
    """Raised when a note cannot be read or its frontmatter is malformed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


def parse_snapshot(path: Path) -> RawMetadata:
    """Read a markdown file into a raw metadata snapshot.

    Args:
        path: Path to the markdown file.

    Returns:
        The note's frontmatter, inline tags, headings and link targets.

    Raises:
        ParseError: If the file cannot be read or has invalid frontmatter.
    """
    if not path.is_file():
        raise ParseError(path, "Path is not a file")

    try:
        post = frontmatter.load(str(path))
    except Exception as e:
        raise ParseError(path, f"Failed to parse frontmatter: {e}") from e

    return snapshot_from_post(post.metadata, post.content)


def parse_snapshot_text(text: str) -> RawMetadata:
    """Same as parse_snapshot, for content already in memory."""
    post = frontmatter.loads(text)
    return snapshot_from_post(post.metadata, post.content)


def snapshot_from_post(metadata: dict | None, content: str) -> RawMetadata:
    body = _strip_code(content)
    return RawMetadata(
        frontmatter=dict(metadata) if metadata else None,
        inline_tags=extract_inline_tags(body),
        links=extract_links(body),
        headings=[match.group(1).strip() for match in HEADING_PATTERN.finditer(body)],
    )


def extract_inline_tags(body: str) -> list[str]:
    """Find "#tag" markers in a note body, keeping the leading marker.

    Purely numeric markers ("#123", issue references) are not tags.
    """
    tags: list[str] = []
    for match in INLINE_TAG_PATTERN.finditer(body):
        tag = match.group(1).rstrip("/")
        if tag and not tag.replace("/", "").isdigit():
            tags.append(f"#{tag}")
    return tags


def _strip_code(content: str) -> str:
    without_fences = FENCED_CODE_PATTERN.sub("", content)
    return INLINE_CODE_PATTERN.sub("", without_fences)
