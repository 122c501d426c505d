"""Project graph manager.

ProjectGraph holds the outcome of both passes in a single networkx DiGraph:
one node per project (keyed by project name) and one edge per validated
ProjectDependency. The engine never requires the graph to be acyclic;
cycles are reported, not rejected.
"""

import logging
import threading
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import networkx as nx

from makegraph.graph.schema import (
    ProjectDependency,
    ProjectNode,
    ProjectRef,
    validate_dependency,
)

logger = logging.getLogger("makegraph.graph.manager")


class ProjectGraph:
    """Project/dependency graph for one workspace scan."""

    def __init__(self, workspace_root: Optional[Path] = None) -> None:
        """Initialize an empty graph.

        Args:
            workspace_root: Workspace the graph was built from (metadata only).
        """
        self.workspace_root = Path(workspace_root).resolve() if workspace_root else None
        self._graph = nx.DiGraph()
        self._nodes: Dict[str, ProjectNode] = {}
        self._lock = threading.RLock()

    @property
    def native_graph(self) -> nx.DiGraph:
        """Underlying networkx graph."""
        return self._graph

    def add_project(self, node: ProjectNode) -> None:
        """Add or replace a project node."""
        with self._lock:
            if node.name in self._nodes and self._nodes[node.name].root != node.root:
                logger.warning(
                    "Project name '%s' used by both %s and %s; keeping %s",
                    node.name,
                    self._nodes[node.name].root,
                    node.root,
                    node.root,
                )
            self._nodes[node.name] = node
            self._graph.add_node(
                node.name,
                root=node.root,
                makefile=node.makefile,
                targets=list(node.targets),
            )

    def add_dependency(self, dependency: ProjectDependency) -> bool:
        """Add a dependency edge after validating it against known projects.

        Returns:
            bool: False when the edge was invalid or already present.
        """
        with self._lock:
            try:
                validate_dependency(dependency, self.project_refs())
            except ValueError as exc:
                logger.debug("Rejecting edge %s -> %s: %s", dependency.source, dependency.target, exc)
                return False
            if self._graph.has_edge(dependency.source, dependency.target):
                return False
            self._graph.add_edge(
                dependency.source,
                dependency.target,
                type=dependency.type.value,
                source_file=dependency.source_file,
                line=dependency.line,
            )
            return True

    def project_refs(self) -> Dict[str, ProjectRef]:
        """Known projects by name."""
        return {name: node.to_ref() for name, node in self._nodes.items()}

    def projects(self) -> List[ProjectNode]:
        """Project nodes in insertion order."""
        return list(self._nodes.values())

    def get_project(self, name: str) -> Optional[ProjectNode]:
        return self._nodes.get(name)

    def dependencies(self) -> List[ProjectDependency]:
        """All edges as ProjectDependency models."""
        return [
            ProjectDependency(
                source=source,
                target=target,
                source_file=data["source_file"],
                line=data.get("line"),
            )
            for source, target, data in self._graph.edges(data=True)
        ]

    def dependencies_of(self, name: str) -> List[str]:
        """Projects ``name`` depends on."""
        if name not in self._graph:
            return []
        return sorted(self._graph.successors(name))

    def dependents_of(self, name: str) -> List[str]:
        """Projects depending on ``name``."""
        if name not in self._graph:
            return []
        return sorted(self._graph.predecessors(name))

    def find_cycles(self, limit: Optional[int] = None) -> List[List[str]]:
        """Enumerate dependency cycles.

        Args:
            limit: Maximum number of cycles; None or non-positive for all
                (may be expensive on large graphs).

        Returns:
            List[List[str]]: Cycles as project names in traversal order.
        """
        cycles = nx.simple_cycles(self._graph)
        if limit is not None and limit > 0:
            cycles = islice(cycles, limit)
        return [[str(node) for node in cycle] for cycle in cycles]

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def get_summary(self) -> Dict[str, Any]:
        """Counts for logging and CLI output."""
        return {
            "workspace": str(self.workspace_root) if self.workspace_root else None,
            "projects": self.node_count(),
            "dependencies": self.edge_count(),
            "targets": sum(len(node.targets) for node in self._nodes.values()),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Node-link data with full project nodes under ``projects``."""
        data = nx.readwrite.json_graph.node_link_data(self._graph, edges="edges")
        data["projects"] = {node.root: node.to_dict() for node in self._nodes.values()}
        data["dependencies"] = [dep.to_dict() for dep in self.dependencies()]
        return data

    @classmethod
    def from_results(
        cls,
        nodes: Mapping[str, ProjectNode],
        dependencies: Iterable[ProjectDependency],
        workspace_root: Optional[Path] = None,
    ) -> "ProjectGraph":
        """Build a graph from node-building and dependency-building output.

        Args:
            nodes: Project nodes keyed by project root.
            dependencies: Edges from the dependency pass.
            workspace_root: Workspace the results were computed for.
        """
        graph = cls(workspace_root=workspace_root)
        for node in nodes.values():
            graph.add_project(node)
        added = sum(1 for dep in dependencies if graph.add_dependency(dep))
        logger.info(
            "ProjectGraph built: %d project(s), %d dependency edge(s)",
            graph.node_count(),
            added,
        )
        return graph
