"""tagnav: related notes and tag-tree navigation for markdown knowledge bases."""

__version__ = "0.1.0"

from .core import TagNavigator
from .hierarchy import (
    TagNode,
    build_tag_hierarchy,
    collapse_for_display,
    filter_hierarchy,
    sort_hierarchy,
)
from .indexer import TagIndex
from .models import Document, RelatednessWeights, ScoreResult
from .related import RelatednessScorer
from .similarity import similarity
from .store import MemoryStore, VaultStore
from .tags import expand_prefixes, gather_all_prefix_segments

__all__ = [
    "__version__",
    "TagNavigator",
    "TagIndex",
    "TagNode",
    "Document",
    "RelatednessWeights",
    "RelatednessScorer",
    "ScoreResult",
    "MemoryStore",
    "VaultStore",
    "build_tag_hierarchy",
    "filter_hierarchy",
    "sort_hierarchy",
    "collapse_for_display",
    "expand_prefixes",
    "gather_all_prefix_segments",
    "similarity",
]
