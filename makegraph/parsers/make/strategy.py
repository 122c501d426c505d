"""Static include-path analysis of a project's Makefile.

Every ``-I`` search path and every parent-relative rule prerequisite in the
project's Makefile is a candidate reference into another project. The
Makefile line is kept as evidence.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from makegraph.graph.schema import EdgeResolution, ProjectRef
from makegraph.parsers.base import BaseDependencyStrategy
from makegraph.parsers.make.makefile import (
    extract_include_flags,
    parse_file_rules,
    read_makefile,
)
from makegraph.utils.path_utils import is_parent_relative

if TYPE_CHECKING:
    from makegraph.runtime.context import CreateDependenciesContext

logger = logging.getLogger("makegraph.parsers.make.strategy")


class MakefileReferenceStrategy(BaseDependencyStrategy):
    """Dependencies evidenced by ``-I`` flags and rule prerequisites."""

    NAME = "makefile"

    def find_dependencies(
        self,
        project: ProjectRef,
        context: "CreateDependenciesContext",
    ) -> List[EdgeResolution]:
        text = read_makefile(context.makefile_path(project))
        if text is None:
            return []

        evidence = context.makefile_evidence(project)
        mapper = context.mapper
        results: List[EdgeResolution] = []

        for flag in extract_include_flags(text):
            if is_parent_relative(flag.path):
                results.append(mapper.resolve(project, flag.path, evidence, flag.line))

        for rule in parse_file_rules(text):
            for prerequisite in rule.prerequisites:
                if is_parent_relative(prerequisite):
                    results.append(
                        mapper.resolve(project, prerequisite, evidence, rule.line)
                    )

        logger.debug(
            "%s: %d Makefile reference(s) in %s", project.name, len(results), evidence
        )
        return results
