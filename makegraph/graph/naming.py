"""Project naming policy.

Project names are derived from the project root on every call. Nothing is
cached: node building and dependency building must agree on names whether a
pass is full or incremental.
"""

from typing import Sequence

from makegraph.utils.path_utils import to_posix

ROOT_PROJECT_NAME = "root"

# Conventional top-level directories whose direct children are named without
# the prefix, e.g. "examples/hello-world" -> "hello-world".
DEFAULT_GROUPING_DIRS = ("examples",)


def derive_project_name(
    project_root: str,
    grouping_dirs: Sequence[str] = DEFAULT_GROUPING_DIRS,
) -> str:
    """Derive a project name from its workspace-relative root.

    Args:
        project_root: Directory holding the Makefile, relative to the
            workspace root.
        grouping_dirs: Top-level directories dropped from the name when
            exactly one segment follows them.

    Returns:
        str: Project name.

    Examples:
        >>> derive_project_name(".")
        'root'
        >>> derive_project_name("src")
        'src'
        >>> derive_project_name("examples/hello-world")
        'hello-world'
        >>> derive_project_name("deps/lua/src")
        'deps-lua-src'

    Note:
        Distinct roots can collide when directory names already contain a
        dash (``a-b`` and ``a/b`` both yield ``a-b``).
    """
    parts = [p for p in to_posix(project_root).split("/") if p and p != "."]

    if not parts:
        return ROOT_PROJECT_NAME

    if len(parts) == 1:
        return parts[0]

    if len(parts) == 2 and parts[0] in grouping_dirs:
        return parts[1]

    return "-".join(parts)
