"""Candidate path to project dependency mapping.

Strategies produce raw evidence: a path that one project's files or Makefile
reference. ``DependencyMapper`` turns each candidate into an
``EdgeResolution`` by longest-prefix matching against the known project
roots; ``collapse_resolutions`` keeps one edge per ``(source, target)`` pair.
"""

# Candidates that fail resolution are dropped, never raised: one bad edge
# must not abort a dependency pass.


from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from makegraph.graph.schema import (
    EdgeResolution,
    EdgeStatus,
    ProjectDependency,
    ProjectRef,
    validate_dependency,
)
from makegraph.utils.path_utils import absolute_join, is_within, normalize_relative

logger = logging.getLogger("makegraph.graph.mapper")


class ProjectRootIndex:
    """Absolute project roots, ordered for longest-prefix lookup."""

    def __init__(self, workspace_root: Path, projects: Iterable[ProjectRef]) -> None:
        """Build the index.

        Args:
            workspace_root: Workspace root directory.
            projects: Known projects.
        """
        self.workspace_root = Path(workspace_root).resolve()
        by_root: Dict[str, List[str]] = defaultdict(list)
        for project in projects:
            by_root[self.absolute_root(project.root)].append(project.name)
        # Deepest roots first so the first hit is the longest prefix.
        self._roots = sorted(by_root.items(), key=lambda item: len(item[0]), reverse=True)

    def absolute_root(self, project_root: str) -> str:
        """Absolute, lexically normalized directory of a project root."""
        return absolute_join(self.workspace_root, project_root or ".")

    def match(self, absolute_path: str) -> List[str]:
        """Return the project names owning ``absolute_path``.

        Returns:
            List[str]: Names registered at the longest matching root; empty
            when no project contains the path, more than one name when the
            root is registered ambiguously.
        """
        for root, names in self._roots:
            if is_within(absolute_path, root):
                return list(names)
        return []

    def __len__(self) -> int:
        return len(self._roots)


class DependencyMapper:
    """Resolve parent-relative candidate paths to sibling projects."""

    def __init__(
        self,
        workspace_root: Path,
        projects: Mapping[str, ProjectRef],
    ) -> None:
        self.projects = dict(projects)
        self.index = ProjectRootIndex(workspace_root, self.projects.values())

    def resolve(
        self,
        source: ProjectRef,
        candidate: str,
        evidence_file: str,
        line: Optional[int] = None,
    ) -> EdgeResolution:
        """Resolve one candidate path referenced by ``source``.

        Only parent-relative paths (``../...``) are considered: anything else
        stays inside the project, where Make already tracks it. The candidate
        is resolved against the source project root and attributed to the
        project with the longest matching root.

        Args:
            source: Project whose file references the candidate.
            candidate: Path relative to the source project root.
            evidence_file: Workspace-relative file justifying the edge.
            line: Optional line of the reference within ``evidence_file``.

        Returns:
            EdgeResolution: RESOLVED with a dependency, or the reason the
            candidate produced no edge.
        """
        normalized = normalize_relative(candidate)
        if not normalized.startswith("../"):
            return EdgeResolution(EdgeStatus.NOT_CANDIDATE, source.name, candidate)

        resolved = absolute_join(self.index.absolute_root(source.root), normalized)
        owners = self.index.match(resolved)

        if not owners:
            logger.debug("No project owns %s (from %s)", resolved, evidence_file)
            return EdgeResolution(EdgeStatus.NO_MATCH, source.name, candidate)

        if len(owners) > 1:
            return EdgeResolution(
                EdgeStatus.INVALID,
                source.name,
                candidate,
                reason=f"ambiguous owners: {', '.join(sorted(owners))}",
            )

        target = owners[0]
        if target == source.name:
            return EdgeResolution(EdgeStatus.SELF_REFERENCE, source.name, candidate)

        try:
            dependency = ProjectDependency(
                source=source.name,
                target=target,
                source_file=evidence_file,
                line=line,
            )
            validate_dependency(dependency, self.projects)
        except ValueError as exc:
            logger.debug(
                "Dropping edge %s -> %s (%s): %s", source.name, target, candidate, exc
            )
            return EdgeResolution(
                EdgeStatus.INVALID, source.name, candidate, reason=str(exc)
            )

        return EdgeResolution(
            EdgeStatus.RESOLVED, source.name, candidate, dependency=dependency
        )


def collapse_resolutions(resolutions: Iterable[EdgeResolution]) -> List[ProjectDependency]:
    """Keep resolved edges, first evidence per ``(source, target)`` pair.

    Args:
        resolutions: Results in discovery order.

    Returns:
        List[ProjectDependency]: Deduplicated edges in first-seen order.
    """
    edges: Dict[tuple, ProjectDependency] = {}
    for resolution in resolutions:
        if not resolution.is_edge:
            continue
        dependency = resolution.dependency
        edges.setdefault(dependency.key, dependency)
    return list(edges.values())


def summarize_resolutions(resolutions: Iterable[EdgeResolution]) -> Dict[str, int]:
    """Count resolutions by status, for logging."""
    counts: Dict[str, int] = defaultdict(int)
    for resolution in resolutions:
        counts[resolution.status.value] += 1
    return dict(counts)
