"""Pathspec-based directory exclusion and tree walking.

The exclusion set is a list of gitignore-style patterns matched with the
pathspec library: version-control metadata, vendored code, example and test
directories, and any dot-prefixed directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import pathspec

from go_detector.errors import ProjectReadError


# Directories skipped during the walk (plus every dot-prefixed directory)
EXCLUDED_DIRECTORIES: tuple[str, ...] = (
    ".git",
    "vendor",
    "third_party",
    "example",
    "examples",
    "test",
    "tests",
    "testdata",
)

# Default exclusion patterns (directories only)
DEFAULT_EXCLUDE_PATTERNS: list[str] = [
    ".*/",
    *[f"{name}/" for name in EXCLUDED_DIRECTORIES],
]


@dataclass(frozen=True)
class TreeEntry:
    """One file or directory met during the walk."""
    path: Path
    relative: str   # POSIX-style, relative to the walk root
    is_dir: bool

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def depth(self) -> int:
        return len(self.relative.split("/"))


class ExclusionFilter:
    """Directory filter built on pathspec."""

    def __init__(self, patterns: Optional[list[str]] = None):
        """
        Initialize the filter.

        Args:
            patterns: gitignore-style patterns; defaults to DEFAULT_EXCLUDE_PATTERNS
        """
        if patterns is None:
            patterns = DEFAULT_EXCLUDE_PATTERNS
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", list(patterns))

    def should_skip_dir(self, relative: str) -> bool:
        """Check if a directory (path relative to root) is excluded."""
        relative = relative.replace("\\", "/").strip("/")
        if not relative:
            return False  # root is never excluded
        return self._spec.match_file(relative + "/")


def _list_dir(path: Path) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise ProjectReadError(f"Cannot read directory {path}: {e}") from e


def iter_tree(root: Path, exclusions: Optional[ExclusionFilter] = None) -> Iterator[TreeEntry]:
    """
    Walk a project tree depth-first in lexicographic order.

    Files and directories of one level are interleaved by name and each
    directory is yielded before its contents. Excluded directories are
    neither yielded nor entered. Symlinked directories are not followed.

    Raises:
        ProjectReadError: a directory cannot be listed
    """
    if exclusions is None:
        exclusions = ExclusionFilter()

    def walk(directory: Path, prefix: str) -> Iterator[TreeEntry]:
        for entry in _list_dir(directory):
            relative = f"{prefix}{entry.name}"
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue
            if is_dir:
                if exclusions.should_skip_dir(relative):
                    continue
                yield TreeEntry(Path(entry.path), relative, True)
                yield from walk(Path(entry.path), relative + "/")
            else:
                yield TreeEntry(Path(entry.path), relative, False)

    yield from walk(root, "")
