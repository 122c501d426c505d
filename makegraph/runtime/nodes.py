"""Node-building pass: one project node per discovered Makefile.

Each Makefile is handled independently and reads only its own file, so
files are processed on a thread pool. Per-file failures are collected and
re-raised together once every file has been processed.
"""

from __future__ import annotations

import logging
import posixpath
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

from makegraph.config.schema import MakeGraphConfig
from makegraph.graph.naming import derive_project_name
from makegraph.graph.schema import ProjectNode
from makegraph.graph.targets import create_targets_for_makefile
from makegraph.parsers.base import _SAFE_EXCEPTIONS, AggregateNodesError
from makegraph.runtime.context import CreateNodesContext
from makegraph.utils.path_utils import normalize_relative, to_posix

logger = logging.getLogger("makegraph.runtime.nodes")

NodesResult = Dict[str, ProjectNode]


def project_root_for(makefile: str) -> str:
    """Workspace-relative project root of a Makefile path (``"."`` at the root)."""
    return normalize_relative(posixpath.dirname(to_posix(makefile)))


def create_nodes_internal(
    makefile: str,
    options: Optional[MakeGraphConfig],
    context: CreateNodesContext,
) -> NodesResult:
    """Build the project node for one Makefile.

    Args:
        makefile: Workspace-relative Makefile path.
        options: Workspace configuration; defaults when None.
        context: Node-building context.

    Returns:
        NodesResult: ``{project_root: ProjectNode}``.
    """
    options = options or MakeGraphConfig.default()
    makefile = normalize_relative(makefile)
    project_root = project_root_for(makefile)
    name = derive_project_name(project_root, options.grouping_dirs)

    targets = create_targets_for_makefile(
        context.workspace_root / makefile,
        project_root,
        target_name=options.target_name,
    )
    node = ProjectNode(root=project_root, name=name, makefile=makefile, targets=targets)
    logger.debug("Project %s at %s: %d target(s)", name, project_root, len(targets))
    return {project_root: node}


def create_nodes(
    makefiles: Sequence[str],
    options: Optional[MakeGraphConfig],
    context: CreateNodesContext,
) -> List[Tuple[str, NodesResult]]:
    """Build project nodes for a batch of Makefiles.

    Args:
        makefiles: Workspace-relative Makefile paths.
        options: Workspace configuration; defaults when None.
        context: Node-building context.

    Returns:
        List[Tuple[str, NodesResult]]: ``(makefile, result)`` in input order.

    Raises:
        AggregateNodesError: One or more Makefiles failed; carries the
            results of the others.
    """
    options = options or MakeGraphConfig.default()
    if not makefiles:
        return []

    def _run(makefile: str) -> Tuple[str, Optional[NodesResult], Optional[Exception]]:
        try:
            return makefile, create_nodes_internal(makefile, options, context), None
        except _SAFE_EXCEPTIONS as exc:
            logger.warning("Failed to create nodes for %s: %s", makefile, exc)
            return makefile, None, exc

    with ThreadPoolExecutor(
        max_workers=min(options.max_workers, len(makefiles)),
        thread_name_prefix="makegraph-nodes",
    ) as executor:
        outcomes = list(executor.map(_run, makefiles))

    results: List[Tuple[str, NodesResult]] = []
    errors: List[Tuple[str, Exception]] = []
    for makefile, result, error in outcomes:
        if error is not None:
            errors.append((makefile, error))
        else:
            results.append((makefile, result))

    if errors:
        raise AggregateNodesError(errors, results)

    logger.info("Created %d project node(s)", len(results))
    return results


def merge_node_results(results: Sequence[Tuple[str, NodesResult]]) -> NodesResult:
    """Flatten ``create_nodes`` output into one mapping keyed by project root."""
    merged: NodesResult = {}
    for _, result in results:
        merged.update(result)
    return merged
