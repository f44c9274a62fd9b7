"""Link extraction from markdown note bodies."""

import re

# Pattern for [[link]] syntax - captures content between double brackets
# Handles [[path/to/entry]], [[entry|alias]] and [[entry#heading]] formats
WIKILINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")

# Pattern for [text](target.md) links to other notes (external URLs are skipped)
MARKDOWN_LINK_PATTERN = re.compile(r"\[[^\]]*\]\(([^)\s]+\.md)(?:#[^)]*)?\)")

# Anything with a scheme ("https:", "mailto:") is not a note reference
URL_SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def extract_links(content: str) -> list[str]:
    """Extract note links from markdown content.

    Args:
        content: Markdown body (frontmatter already removed).

    Returns:
        List of unique link targets in order of first appearance, normalized.
    """
    seen: set[str] = set()
    links: list[str] = []

    raw_targets = WIKILINK_PATTERN.findall(content) + MARKDOWN_LINK_PATTERN.findall(content)
    for raw in raw_targets:
        if URL_SCHEME_PATTERN.match(raw.strip()):
            continue
        normalized = normalize_link(raw)
        if normalized and normalized not in seen:
            seen.add(normalized)
            links.append(normalized)

    return links


def normalize_link(link: str) -> str:
    """Normalize a link target.

    - Drops the display alias ("target|alias") and heading anchor ("target#h")
    - Strips whitespace
    - Removes .md extension
    - Normalizes path separators and trims leading/trailing slashes

    Args:
        link: Raw link target.

    Returns:
        Normalized link target (possibly empty).
    """
    link = link.split("|", 1)[0]
    link = link.split("#", 1)[0]
    link = link.strip()

    if link.endswith(".md"):
        link = link[:-3]

    link = link.replace("\\", "/")
    if link.startswith("./"):
        link = link[2:]

    return link.strip("/")
