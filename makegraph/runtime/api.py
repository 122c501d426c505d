"""Library-facing helper running both passes over a workspace.

Host orchestrators call ``create_nodes`` and ``create_dependencies``
separately; this wrapper serves the CLI and library users that want the
whole graph in one call.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from makegraph.config.schema import MakeGraphConfig
from makegraph.graph.manager import ProjectGraph
from makegraph.parsers.make.detector import MakefileDetector
from makegraph.runtime.context import CreateDependenciesContext, CreateNodesContext
from makegraph.runtime.dependencies import create_dependencies
from makegraph.runtime.nodes import NodesResult, create_nodes, merge_node_results

logger = logging.getLogger("makegraph.runtime.api")


def build_nodes(
    workspace_root: Path,
    options: Optional[MakeGraphConfig] = None,
) -> NodesResult:
    """Discover Makefiles and build every project node.

    Raises:
        AggregateNodesError: One or more Makefiles failed.
    """
    options = options or MakeGraphConfig.default()
    context = CreateNodesContext(workspace_root=workspace_root)
    makefiles = MakefileDetector(context.workspace_root).detect()
    return merge_node_results(create_nodes(makefiles, options, context))


def scan_workspace(
    workspace_root: Path,
    options: Optional[MakeGraphConfig] = None,
    changed: Optional[Sequence[str]] = None,
) -> ProjectGraph:
    """Run node building then dependency building.

    Args:
        workspace_root: Workspace to scan.
        options: Workspace configuration; defaults when None.
        changed: Project names to analyze for dependencies; None for all.

    Returns:
        ProjectGraph: Projects and inferred edges.

    Raises:
        ConfigurationError: The selected compiler is unavailable.
        AggregateNodesError: One or more Makefiles failed.
    """
    options = options or MakeGraphConfig.default()
    nodes = build_nodes(workspace_root, options)
    context = CreateDependenciesContext.from_nodes(workspace_root, nodes, changed)
    dependencies = create_dependencies(options, context)
    return ProjectGraph.from_results(nodes, dependencies, workspace_root=context.workspace_root)


__all__ = ["build_nodes", "scan_workspace"]
