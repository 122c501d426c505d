"""Path normalization utilities for workspace-relative project paths.

Project roots, evidence files and include candidates all travel through the
graph as posix strings relative to the workspace root (``"."`` for the root
itself). Absolute paths are only built for prefix matching against the
filesystem layout.
"""

import os
import posixpath
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def to_posix(path: PathLike) -> str:
    """Return ``path`` as a string with forward slashes."""
    return str(path).replace("\\", "/")


def normalize_relative(path: PathLike) -> str:
    """Normalize a relative posix path, collapsing ``.`` and ``..`` segments.

    Args:
        path: Relative path, possibly with redundant segments.

    Returns:
        str: Normalized path; ``"."`` when the path is empty.

    Examples:
        >>> normalize_relative("src/../../libs/core/x.h")
        '../libs/core/x.h'
        >>> normalize_relative("")
        '.'
    """
    text = to_posix(path)
    if not text:
        return "."
    return posixpath.normpath(text)


def is_parent_relative(path: PathLike) -> bool:
    """Check whether a relative path climbs out of its base directory."""
    return normalize_relative(path).startswith("../")


def join_root(project_root: str, relative: PathLike) -> str:
    """Join a workspace-relative project root and a project-relative path.

    Examples:
        >>> join_root(".", "src/main.c")
        'src/main.c'
        >>> join_root("apps/web", "Makefile")
        'apps/web/Makefile'
    """
    rel = to_posix(relative)
    if project_root in ("", "."):
        return normalize_relative(rel)
    return normalize_relative(f"{to_posix(project_root)}/{rel}")


def relative_posix(path: PathLike, base: PathLike) -> str:
    """Express ``path`` relative to ``base`` as a posix string.

    Unlike ``Path.relative_to`` this allows ``..`` segments, which is what
    compiler-resolved headers outside the project directory need.
    """
    return to_posix(os.path.relpath(os.fspath(path), os.fspath(base)))


def absolute_join(base: PathLike, relative: PathLike) -> str:
    """Join and lexically normalize without touching the filesystem.

    Symlinks are deliberately not resolved so that candidate paths and
    project roots are compared in the same lexical space.
    """
    return os.path.normpath(os.path.join(os.fspath(base), to_posix(relative)))


def is_within(path: str, root: str) -> bool:
    """Check whether absolute ``path`` equals ``root`` or lies below it."""
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def is_within_project(workspace_path: str, project_root: str) -> bool:
    """Check a workspace-relative path against a workspace-relative root."""
    if project_root in ("", "."):
        return not is_parent_relative(workspace_path)
    return workspace_path == project_root or workspace_path.startswith(
        project_root.rstrip("/") + "/"
    )
