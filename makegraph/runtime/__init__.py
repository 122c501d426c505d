"""Node-building and dependency-building passes."""

from .api import build_nodes, scan_workspace
from .context import CreateDependenciesContext, CreateNodesContext
from .dependencies import build_strategies, create_dependencies
from .nodes import create_nodes, create_nodes_internal

__all__ = [
    "CreateDependenciesContext",
    "CreateNodesContext",
    "build_nodes",
    "build_strategies",
    "create_dependencies",
    "create_nodes",
    "create_nodes_internal",
    "scan_workspace",
]
