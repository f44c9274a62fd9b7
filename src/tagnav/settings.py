"""User settings read from the knowledge base's .kbconfig file.

Example .kbconfig:
    kb_path: notes             # Only needed in a project root (see config.py)
    tagnav:
      weights:                 # Relatedness factor weights (non-negative)
        tag: 2.0
        title: 1.0
        path: 0.5
        link: 1.5
      sort_mode: document-count
      filter_scope: tags-and-files
      related_limit: 15
      min_score: 0.5
      show_tags: true
      show_score: false

Settings are only read here, never written. A missing file or section gives the
defaults; an invalid section is reported and ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .config import DEFAULT_RELATED_LIMIT, FOCUS_DEBOUNCE_SECONDS, KB_CONFIG_FILENAME
from .hierarchy import FilterScope, SortMode
from .models import RelatednessWeights

log = logging.getLogger(__name__)

SETTINGS_SECTION = "tagnav"


class NavSettings(BaseModel):
    """Defaults for the related-notes and tag-navigation features."""

    weights: RelatednessWeights = Field(default_factory=RelatednessWeights)
    sort_mode: SortMode = "alphabetical"
    filter_scope: FilterScope = "tags-and-files"
    related_limit: int = Field(default=DEFAULT_RELATED_LIMIT, ge=1)
    min_score: float = 0.0
    show_tags: bool = True
    show_score: bool = True
    debounce_seconds: float = Field(default=FOCUS_DEBOUNCE_SECONDS, ge=0)


def load_settings(kb_root: Path) -> NavSettings:
    """Load the tagnav section of <kb_root>/.kbconfig.

    Args:
        kb_root: Knowledge base directory.

    Returns:
        Parsed settings, or defaults when the file/section is missing or invalid.
    """
    config_file = kb_root / KB_CONFIG_FILENAME
    if not config_file.exists():
        return NavSettings()

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        log.warning("Could not read %s, using default settings: %s", config_file, e)
        return NavSettings()

    # Empty file or all-comments file
    if not isinstance(data, dict):
        return NavSettings()

    section = data.get(SETTINGS_SECTION)
    if section is None:
        return NavSettings()

    try:
        return NavSettings.model_validate(section)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        log.warning(
            "Invalid %s settings in %s, using defaults (%s)",
            SETTINGS_SECTION,
            config_file,
            "; ".join(errors),
        )
        return NavSettings()
