"""Directory filtering for go-detector.

This module provides pathspec-based directory exclusion and the
lexicographic tree walk used by the analyzer.
"""

from go_detector.filters.pathspec_filter import (
    ExclusionFilter,
    TreeEntry,
    iter_tree,
    DEFAULT_EXCLUDE_PATTERNS,
)

__all__ = [
    "ExclusionFilter",
    "TreeEntry",
    "iter_tree",
    "DEFAULT_EXCLUDE_PATTERNS",
]
