"""Configuration management for tagnav.

This module contains knowledge base discovery and the constants used by the
relatedness scorer and the tag hierarchy. Magic numbers are documented here
rather than scattered throughout the codebase.
"""

import os
from pathlib import Path

import yaml


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    pass


# KB config filename (marks a directory as a KB root, and holds the tagnav: section)
KB_CONFIG_FILENAME = ".kbconfig"

# Maximum directory traversal depth when walking up for a .kbconfig file.
MAX_CONFIG_SEARCH_DEPTH = 50


def get_kb_root(override: str | Path | None = None) -> Path:
    """Get the knowledge base root directory.

    Discovery order:
    1. Explicit override (the CLI's --kb-root option)
    2. TAGNAV_KB_ROOT environment variable
    3. Walk up from cwd looking for .kbconfig with a kb_path field
    4. Error with helpful message

    Raises:
        ConfigurationError: If no KB can be found.
    """
    if override:
        root = Path(override)
        if not root.is_dir():
            raise ConfigurationError(f"Knowledge base directory does not exist: {root}")
        return root

    env_root = os.environ.get("TAGNAV_KB_ROOT")
    if env_root:
        root = Path(env_root)
        if not root.is_dir():
            raise ConfigurationError(f"TAGNAV_KB_ROOT does not point to a directory: {root}")
        return root

    discovered = _discover_project_config()
    if discovered:
        _config_path, kb_path = discovered
        return kb_path

    raise ConfigurationError(
        "No knowledge base found. Options:\n"
        "  1. Pass --kb-root pointing at your notes directory\n"
        "  2. Set TAGNAV_KB_ROOT to an existing notes directory\n"
        "  3. Add a .kbconfig with 'kb_path: <dir>' to your project root"
    )


def _discover_project_config(
    start_dir: Path | None = None,
    max_depth: int = MAX_CONFIG_SEARCH_DEPTH,
) -> tuple[Path, Path] | None:
    """Walk up from start_dir looking for .kbconfig with kb_path.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        Tuple of (config_path, kb_path) if found, None otherwise.
    """
    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth):
        config_file = current / KB_CONFIG_FILENAME
        if config_file.exists():
            try:
                data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict) and "kb_path" in data:
                    kb_path = (current / data["kb_path"]).resolve()
                    if kb_path.is_dir():
                        return (config_file, kb_path)
            except (OSError, yaml.YAMLError):
                pass

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


# =============================================================================
# Notes
# =============================================================================

# Only files with this suffix are treated as notes.
MARKDOWN_SUFFIX = ".md"


# =============================================================================
# Tag Hierarchy
# =============================================================================

# Reserved root bucket for notes without any tag (or without readable metadata).
UNTAGGED_KEY = "untagged"

# Tag path separator. "a/b/c" is the tag c nested under b nested under a.
TAG_SEPARATOR = "/"


# =============================================================================
# Related Notes
# =============================================================================

# Number of related notes shown when the caller does not ask for a limit.
DEFAULT_RELATED_LIMIT = 10

# Quiet period before a focus change triggers a related-notes scan.
# Coalesces rapid focus changes (keyboard navigation) into one O(N) pass.
FOCUS_DEBOUNCE_SECONDS = 0.15

# Default weight of each relatedness factor. Weights are non-negative.
DEFAULT_FACTOR_WEIGHT = 1.0
