"""Shared test fixtures for the tagnav test suite.

Design:
- tmp_kb: Isolated knowledge base directory in tmp_path, TAGNAV_KB_ROOT set
- runner / cli_invoke: CliRunner bound to that KB
- create_entry / make_document: helpers for building corpora in tests
"""

import os
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from tagnav.cli import cli
from tagnav.models import Document


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def tmp_kb(tmp_path: Path) -> Generator[Path, None, None]:
    """Create an isolated KB directory and point TAGNAV_KB_ROOT at it.

    Usage:
        def test_something(tmp_kb):
            create_entry(tmp_kb, "a.md", "A", "Body", ["x"])
    """
    kb_root = tmp_path / "kb"
    kb_root.mkdir()

    original_kb_root = os.environ.get("TAGNAV_KB_ROOT")
    os.environ["TAGNAV_KB_ROOT"] = str(kb_root)

    yield kb_root

    if original_kb_root is not None:
        os.environ["TAGNAV_KB_ROOT"] = original_kb_root
    else:
        os.environ.pop("TAGNAV_KB_ROOT", None)


@pytest.fixture
def tmp_kb_with_entries(tmp_kb: Path) -> Path:
    """KB with a small tagged corpus.

    Creates:
    - projects/web-server.md (tags: proj/web, python)
    - projects/cli-parser.md (tags: proj/cli, python), links to web-server
    - journal.md (no tags)
    """
    create_entry(tmp_kb, "projects/web-server.md", "Web Server", "Serving pages.", ["proj/web", "python"])
    create_entry(
        tmp_kb,
        "projects/cli-parser.md",
        "CLI Parser",
        "Argument parsing, see [[web-server]].",
        ["proj/cli", "python"],
    )
    create_entry(tmp_kb, "journal.md", "Journal", "Daily notes.")
    return tmp_kb


@pytest.fixture
def cli_invoke(runner: CliRunner, tmp_kb: Path):
    """Helper for invoking the CLI against tmp_kb.

    Usage:
        def test_tags(cli_invoke):
            result = cli_invoke(["tags"])
            assert result.exit_code == 0
    """

    def _invoke(args: list[str], catch_exceptions: bool = False):
        return runner.invoke(
            cli,
            args,
            catch_exceptions=catch_exceptions,
            env={"TAGNAV_KB_ROOT": str(tmp_kb)},
        )

    return _invoke


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def create_entry(
    kb_root: Path,
    path: str,
    title: str,
    content: str,
    tags: list[str] | None = None,
    extra_frontmatter: str = "",
) -> Path:
    """Write a markdown note with frontmatter.

    Usage in tests:
        from conftest import create_entry
        entry = create_entry(tmp_kb, "test.md", "Test", "Content", ["tag1"])
    """
    entry_path = kb_root / path
    entry_path.parent.mkdir(parents=True, exist_ok=True)

    tags_str = f"[{', '.join(tags)}]" if tags else "[]"
    entry_path.write_text(
        f"""---
title: {title}
tags: {tags_str}
{extra_frontmatter}---

{content}
""",
        encoding="utf-8",
    )
    return entry_path


def make_document(
    doc_id: str,
    title: str | None = None,
    tags: set[str] | None = None,
    links: set[str] | None = None,
    created: float = 0.0,
    modified: float = 0.0,
) -> Document:
    """Build a Document directly, bypassing parsing."""
    return Document(
        id=doc_id,
        title=title if title is not None else Path(doc_id).stem,
        tags=frozenset(tags or ()),
        links=frozenset(links or ()),
        created=created,
        modified=modified,
    )
