#!/usr/bin/env python3
"""
tagnav: related notes and tag navigation for a markdown knowledge base

Usage:
    tagnav related path/to/note.md     # Notes related to a note
    tagnav tree                        # Browse notes by tag hierarchy
    tagnav tree --filter acme          # ... pruned to matching tags/notes
    tagnav tags                        # Tags with usage counts
"""

from __future__ import annotations

import json
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import click

from . import __version__ as TAGNAV_VERSION
from .hierarchy import FILTER_SCOPES, SORT_MODES

if TYPE_CHECKING:
    from .core import TagNavigator
    from .models import DisplayNode


def output(data: Any, as_json: bool = False) -> None:
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _handle_error(error: Exception, exit_code: int = 1) -> NoReturn:
    """Report an error on stderr and exit."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(exit_code)


def _get_navigator(ctx: click.Context) -> TagNavigator:
    """Build the navigator for the configured KB (once per invocation)."""
    from .config import ConfigurationError, get_kb_root
    from .core import TagNavigator

    ctx.ensure_object(dict)
    if "navigator" not in ctx.obj:
        try:
            kb_root = get_kb_root(ctx.obj.get("kb_root"))
        except ConfigurationError as exc:
            _handle_error(exc)
        ctx.obj["kb_root"] = kb_root
        ctx.obj["navigator"] = TagNavigator.for_kb(kb_root)
    return ctx.obj["navigator"]


def _resolve_note_id(kb_root: Path, path: str, known_ids: list[str]) -> str:
    """Map user input ("setup", "web/setup.md", an absolute path) to a note id."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        try:
            path = candidate.resolve().relative_to(kb_root.resolve()).as_posix()
        except ValueError:
            return path

    normalized = path.replace("\\", "/").strip("/")
    if normalized in known_ids:
        return normalized
    if f"{normalized}.md" in known_ids:
        return f"{normalized}.md"
    return normalized


def highlight_matches(text: str, query: str) -> str:
    """Emphasize every case-insensitive occurrence of query in text."""
    if not query:
        return text
    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    return pattern.sub(lambda m: click.style(m.group(1), bold=True, fg="yellow"), text)


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=TAGNAV_VERSION, prog_name="tagnav")
@click.option(
    "--kb-root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="TAGNAV_KB_ROOT",
    help="Knowledge base directory (default: discovered from .kbconfig)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="TAGNAV_QUIET",
    help="Suppress warnings, show only errors and essential output",
)
@click.pass_context
def cli(ctx: click.Context, kb_root: Path | None, quiet: bool):
    """tagnav: related notes and tag navigation for markdown notes.

    \b
    Quick start:
      tagnav related projects/web/setup.md   # Notes related to a note
      tagnav tree                            # Browse by tag hierarchy
      tagnav tree --filter acme --sort document-count
      tagnav tags                            # Tags with usage counts
    """
    from ._logging import configure_logging, set_quiet_mode

    configure_logging()
    if quiet:
        set_quiet_mode(True)

    ctx.ensure_object(dict)
    ctx.obj["kb_root"] = kb_root


# ─────────────────────────────────────────────────────────────────────────────
# Related Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("path")
@click.option("--limit", "-n", type=click.IntRange(min=1), help="Max results (default from settings)")
@click.option("--min-score", type=float, help="Hide notes scoring below this")
@click.option("--filter", "-f", "query", default="", help="Only notes whose title or tags contain this")
@click.option("--breakdown", is_flag=True, help="Show each factor's contribution")
@click.option("--show-tags/--hide-tags", default=None, help="Show each note's tags")
@click.option("--show-score/--hide-score", default=None, help="Show each note's score")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def related(
    ctx: click.Context,
    path: str,
    limit: int | None,
    min_score: float | None,
    query: str,
    breakdown: bool,
    show_tags: bool | None,
    show_score: bool | None,
    as_json: bool,
):
    """Show notes related to a note.

    Notes are ranked by shared tag categories, title and path similarity,
    and links in either direction.

    \b
    Examples:
      tagnav related projects/web/setup.md
      tagnav related setup --limit 5 --breakdown
      tagnav related setup --filter acme --json
    """
    navigator = _get_navigator(ctx)
    index = navigator.index
    focus_id = _resolve_note_id(ctx.obj["kb_root"], path, index.document_ids())

    query = query.strip().lower()
    results = navigator.related(
        focus_id,
        query=query,
        limit=limit,
        min_score=min_score,
        include_breakdown=breakdown,
    )

    if as_json:
        payload = {
            "focus": focus_id,
            "results": [
                {
                    "path": result.document_id,
                    "title": index.get_title(result.document_id),
                    "score": round(result.score, 4),
                    "tags": sorted(index.get_note_tags(result.document_id)),
                    **(
                        {"breakdown": result.breakdown.model_dump()}
                        if result.breakdown is not None
                        else {}
                    ),
                }
                for result in results
            ],
        }
        output(payload, as_json=True)
        return

    settings = navigator.settings
    show_tags = settings.show_tags if show_tags is None else show_tags
    show_score = settings.show_score if show_score is None else show_score

    if not results:
        if query:
            click.echo("No notes match your filter.")
        else:
            click.echo("No related notes found.")
        return

    for result in results:
        title = highlight_matches(index.get_title(result.document_id), query)
        line = f"{title}  ({result.document_id})"
        if show_score:
            line = f"{result.score:6.2f}  {line}"
        click.echo(line)

        indent = " " * 8 if show_score else "  "
        if show_tags:
            tags = sorted(index.get_note_tags(result.document_id))
            if tags:
                click.echo(indent + " ".join(highlight_matches(f"#{t}", query) for t in tags))
        if result.breakdown is not None:
            parts = result.breakdown.model_dump()
            click.echo(indent + "  ".join(f"{name}={value:.2f}" for name, value in parts.items()))


# ─────────────────────────────────────────────────────────────────────────────
# Tree Command
# ─────────────────────────────────────────────────────────────────────────────


def format_tree(
    nodes: list[DisplayNode],
    prefix: str = "",
    query: str = "",
    sort_mode: str = "alphabetical",
) -> str:
    """Format display nodes as an ASCII tree, notes listed under their tag."""
    lines = []
    for i, node in enumerate(nodes):
        is_last = i == len(nodes) - 1
        connector = "└── " if is_last else "├── "
        extension = "    " if is_last else "│   "

        count = f" ({node.total_count})" if node.total_count else ""
        lines.append(f"{prefix}{connector}{highlight_matches(node.label, query)}/{count}")

        child_block = format_tree(node.children, prefix + extension, query, sort_mode)
        if child_block:
            lines.append(child_block)

        for j, document in enumerate(node.documents):
            doc_connector = "└── " if j == len(node.documents) - 1 else "├── "
            line = f"{prefix}{extension}{doc_connector}{highlight_matches(document.name, query)}"
            if sort_mode.startswith(("created", "modified")):
                stamp = document.created if sort_mode.startswith("created") else document.modified
                line += f"  ({datetime.fromtimestamp(stamp).date().isoformat()})"
            lines.append(line)

    return "\n".join(lines)


def _tree_to_dict(node: DisplayNode) -> dict:
    return {
        "label": node.label,
        "path": node.path,
        "direct_count": node.direct_count,
        "total_count": node.total_count,
        "notes": [{"path": doc.id, "title": doc.title} for doc in node.documents],
        "children": [_tree_to_dict(child) for child in node.children],
    }


def _count_notes(nodes: list[DisplayNode], seen: set[str] | None = None) -> set[str]:
    seen = set() if seen is None else seen
    for node in nodes:
        seen.update(doc.id for doc in node.documents)
        _count_notes(node.children, seen)
    return seen


@cli.command()
@click.option("--filter", "-f", "query", default="", help="Keep tags/notes containing this text")
@click.option(
    "--scope",
    type=click.Choice(FILTER_SCOPES),
    help="What the filter matches: tag names, note names, or both (default from settings)",
)
@click.option("--sort", "sort_mode", type=click.Choice(SORT_MODES), help="Sibling order (default from settings)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tree(ctx: click.Context, query: str, scope: str | None, sort_mode: str | None, as_json: bool):
    """Browse notes through their hierarchical tags.

    Notes tagged "work/acme" appear under work/ -> acme/. Notes without
    tags are grouped under "untagged".

    \b
    Examples:
      tagnav tree
      tagnav tree --filter acme --scope tags-only
      tagnav tree --sort modified-newest
    """
    navigator = _get_navigator(ctx)
    query = query.strip().lower()
    sort_mode = sort_mode or navigator.settings.sort_mode

    nodes = navigator.browse(query=query, scope=scope, mode=sort_mode)

    if as_json:
        output({"tree": [_tree_to_dict(node) for node in nodes]}, as_json=True)
        return

    if not nodes:
        click.echo("No tags match your filter." if query else "No notes found.")
        return

    click.echo(format_tree(nodes, query=query, sort_mode=sort_mode))
    click.echo(f"\n{len(nodes)} top-level tags, {len(_count_notes(nodes))} notes")


# ─────────────────────────────────────────────────────────────────────────────
# Tags Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--min-count", default=1, type=click.IntRange(min=1), help="Minimum usage count")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tags(ctx: click.Context, min_count: int, as_json: bool):
    """List all tags with usage counts.

    \b
    Examples:
      tagnav tags
      tagnav tags --min-count=3
    """
    navigator = _get_navigator(ctx)
    result = navigator.tag_counts(min_count=min_count)

    if as_json:
        output([item.model_dump() for item in result], as_json=True)
        return

    if not result:
        click.echo("No tags found.")
        return

    for item in result:
        click.echo(f"  {item.tag}: {item.count}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
