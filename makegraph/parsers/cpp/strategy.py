"""Source-level include scanning as a dependency strategy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from makegraph.graph.schema import EdgeResolution, ProjectRef
from makegraph.parsers.base import BaseDependencyStrategy, BaseIncludeScanner

if TYPE_CHECKING:
    from makegraph.runtime.context import CreateDependenciesContext

logger = logging.getLogger("makegraph.parsers.cpp.strategy")


class IncludeScanStrategy(BaseDependencyStrategy):
    """Dependencies evidenced by the headers a project's sources include.

    The include scanner (lexical or compiler-backed) is chosen by the
    ``dependency_compiler`` setting; the including file is the evidence.
    """

    NAME = "includes"

    def __init__(self, scanner: BaseIncludeScanner) -> None:
        self.scanner = scanner

    def find_dependencies(
        self,
        project: ProjectRef,
        context: "CreateDependenciesContext",
    ) -> List[EdgeResolution]:
        project_dir = context.project_dir(project)
        if not project_dir.is_dir():
            logger.debug("Project directory missing for %s: %s", project.name, project_dir)
            return []

        mapper = context.mapper
        return [
            mapper.resolve(project, edge.include_path, edge.source_file, edge.line)
            for edge in self.scanner.scan(project_dir, project.root)
        ]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scanner={self.scanner.NAME!r})"
