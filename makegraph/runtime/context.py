"""Pass contexts handed to node building and dependency building.

These are the read-only views the host orchestrator provides: the workspace
root and, for the dependency pass, the project set from node building plus
an optional "changed" subset for incremental runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from makegraph.graph.mapper import DependencyMapper
from makegraph.graph.schema import ProjectNode, ProjectRef
from makegraph.utils.path_utils import absolute_join, join_root
from makegraph.utils.scanner import MAKEFILE_NAME

logger = logging.getLogger("makegraph.runtime.context")


@dataclass
class CreateNodesContext:
    """Context for the node-building pass.

    Args:
        workspace_root: Absolute workspace root; Makefile paths are relative
            to it.
    """

    workspace_root: Path

    def __post_init__(self) -> None:
        self.workspace_root = Path(self.workspace_root).resolve()


@dataclass
class CreateDependenciesContext:
    """Context for the dependency-building pass.

    Args:
        workspace_root: Absolute workspace root.
        projects: Every known project by name. Edges may only target these.
        changed_projects: Names to analyze in incremental mode; None
            analyzes every project.
    """

    workspace_root: Path
    projects: Dict[str, ProjectRef]
    changed_projects: Optional[List[str]] = None

    def __post_init__(self) -> None:
        self.workspace_root = Path(self.workspace_root).resolve()
        self.projects = dict(self.projects)

    @cached_property
    def mapper(self) -> DependencyMapper:
        """Longest-prefix mapper over the full project set."""
        return DependencyMapper(self.workspace_root, self.projects)

    def project_dir(self, project: ProjectRef) -> Path:
        """Absolute directory of a project."""
        return Path(absolute_join(self.workspace_root, project.root))

    def makefile_path(self, project: ProjectRef) -> Path:
        """Absolute path of a project's Makefile."""
        return self.project_dir(project) / MAKEFILE_NAME

    def makefile_evidence(self, project: ProjectRef) -> str:
        """Workspace-relative Makefile path, as recorded on edges."""
        return join_root(project.root, MAKEFILE_NAME)

    def projects_to_scan(self) -> List[ProjectRef]:
        """Projects visited by this pass, in project-set order.

        Incremental mode only changes which projects are visited; targets
        are still resolved against the full project set.
        """
        if self.changed_projects is None:
            return list(self.projects.values())

        wanted = set(self.changed_projects)
        unknown = sorted(wanted - set(self.projects))
        if unknown:
            logger.debug("Ignoring unknown changed project(s): %s", ", ".join(unknown))
        return [ref for name, ref in self.projects.items() if name in wanted]

    @classmethod
    def from_nodes(
        cls,
        workspace_root: Path,
        nodes: Mapping[str, ProjectNode],
        changed_projects: Optional[Sequence[str]] = None,
    ) -> "CreateDependenciesContext":
        """Build a context from node-building output keyed by project root."""
        projects = {node.name: node.to_ref() for node in nodes.values()}
        return cls(
            workspace_root=workspace_root,
            projects=projects,
            changed_projects=list(changed_projects) if changed_projects is not None else None,
        )
