"""Filesystem walkers for Makefile discovery and per-project source scanning."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Generator, Iterable, List, Optional, Sequence

from makegraph.utils.path_utils import to_posix

logger = logging.getLogger("makegraph.utils.scanner")

MAKEFILE_NAME = "Makefile"

# Build-artifact and dependency-manager directories never scanned for sources.
DEFAULT_EXCLUDE_DIRS = (
    "dist",
    "build",
    "node_modules",
    ".git",
    ".nx",
    "out",
    "target",
    "bin",
    "obj",
)

# Directories never searched for Makefiles.
DISCOVERY_IGNORES = (".git", ".svn", ".hg", ".nx", "node_modules", "__pycache__")


def load_gitignore_patterns(root_path: Path) -> List[str]:
    """Load patterns from .gitignore in the root path."""
    gitignore = root_path / ".gitignore"
    patterns = []
    if gitignore.exists():
        try:
            with open(gitignore, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith(("#", "!")):
                        patterns.append(line)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Failed to read .gitignore at %s: %s", gitignore, exc)
    return patterns


def _is_ignored(rel_path: str, name: str, is_dir: bool, ignore_patterns: Iterable[str]) -> bool:
    """Check if a workspace-relative path matches any ignore pattern.

    This is a simplified implementation of gitignore logic: patterns are
    matched against both the entry name and the relative path.
    """
    for pattern in ignore_patterns:
        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern.rstrip("/")
        pattern = pattern.lstrip("/")
        if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(rel_path, pattern):
            return True
    return False


def find_makefiles(
    workspace_root: Path,
    ignore_patterns: Optional[Sequence[str]] = None,
) -> List[str]:
    """Find every Makefile below the workspace root.

    Args:
        workspace_root: Workspace root directory.
        ignore_patterns: Extra glob patterns to skip, on top of
            ``DISCOVERY_IGNORES`` and the workspace ``.gitignore``.

    Returns:
        List[str]: Workspace-relative posix paths, sorted.
    """
    root = Path(workspace_root).resolve()
    ignores = list(DISCOVERY_IGNORES) + load_gitignore_patterns(root)
    if ignore_patterns:
        ignores.extend(ignore_patterns)

    found: List[str] = []
    stack = [root]
    while stack:
        current = stack.pop()
        try:
            entries = sorted(os.scandir(current), key=lambda e: e.name)
        except OSError as exc:
            logger.debug("Cannot list %s: %s", current, exc)
            continue

        dirs = []
        for entry in entries:
            rel = to_posix(Path(entry.path).relative_to(root))
            is_dir = entry.is_dir(follow_symlinks=False)
            if _is_ignored(rel, entry.name, is_dir, ignores):
                continue
            if is_dir:
                dirs.append(Path(entry.path))
            elif entry.name == MAKEFILE_NAME and entry.is_file():
                found.append(rel)

        stack.extend(reversed(dirs))

    return sorted(found)


def walk_project_files(
    project_dir: Path,
    extensions: Sequence[str],
    exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
    max_files: Optional[int] = None,
) -> Generator[Path, None, None]:
    """Yield a project's source files in deterministic depth-first order.

    Subdirectories that hold their own Makefile are separate projects and
    are not descended into. Directories that cannot be listed are skipped.

    Args:
        project_dir: Absolute project directory.
        extensions: File suffixes to yield (case-sensitive, e.g. ``.C``).
        exclude_dirs: Directory names never descended into.
        max_files: Optional cap on the number of files yielded.

    Yields:
        Path objects for matching files.
    """
    excluded = set(exclude_dirs)
    suffixes = tuple(extensions)
    yielded = 0
    stack = [Path(project_dir)]

    while stack:
        current = stack.pop()
        try:
            entries = sorted(os.scandir(current), key=lambda e: e.name)
        except OSError as exc:
            logger.debug("Cannot list %s: %s", current, exc)
            continue

        dirs = []
        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue

            if is_dir:
                if entry.name in excluded:
                    continue
                if (path / MAKEFILE_NAME).is_file():
                    logger.debug("Skipping nested project directory %s", path)
                    continue
                dirs.append(path)
            elif entry.name.endswith(suffixes):
                yield path
                yielded += 1
                if max_files is not None and yielded >= max_files:
                    logger.debug(
                        "Reached file cap (%d) while scanning %s", max_files, project_dir
                    )
                    return

        stack.extend(reversed(dirs))
