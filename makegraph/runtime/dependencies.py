"""Dependency-building pass.

Runs every enabled dependency strategy for each visited project, unions the
resolutions and collapses them to one edge per ``(source, target)`` pair,
keeping the first evidence found. The only failure that aborts the pass is a
configuration error (the selected compiler is unavailable); everything else
degrades to fewer edges.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from makegraph.config.schema import MakeGraphConfig
from makegraph.graph.mapper import collapse_resolutions, summarize_resolutions
from makegraph.graph.schema import EdgeResolution, ProjectDependency
from makegraph.parsers.base import (
    _SAFE_EXCEPTIONS,
    BaseDependencyStrategy,
    ConfigurationError,
)
from makegraph.parsers.cpp.compiler import resolve_compiler
from makegraph.parsers.cpp.strategy import IncludeScanStrategy
from makegraph.parsers.make.strategy import MakefileReferenceStrategy
from makegraph.parsers.registry import ScannerRegistry
from makegraph.runtime.context import CreateDependenciesContext

logger = logging.getLogger("makegraph.runtime.dependencies")


def build_strategies(options: Optional[MakeGraphConfig] = None) -> List[BaseDependencyStrategy]:
    """Instantiate the dependency strategies for a pass, in evidence order.

    The compiler is checked here, once per pass, so a missing toolchain is
    reported before any project is scanned.

    Raises:
        ConfigurationError: The selected compiler is unavailable or the mode
            has no registered scanner.
    """
    options = options or MakeGraphConfig.default()
    mode = options.dependency_compiler
    compiler = resolve_compiler(mode)

    try:
        scanner_cls = ScannerRegistry.get_instance().get_scanner(mode)
    except KeyError as exc:
        raise ConfigurationError(str(exc)) from exc

    scanner = scanner_cls.from_config(options, compiler=compiler)
    logger.debug("Include scanner for '%s': %s", mode, type(scanner).__name__)
    return [IncludeScanStrategy(scanner), MakefileReferenceStrategy()]


def create_dependencies(
    options: Optional[MakeGraphConfig],
    context: CreateDependenciesContext,
    strategies: Optional[List[BaseDependencyStrategy]] = None,
) -> List[ProjectDependency]:
    """Infer cross-project dependency edges.

    Args:
        options: Workspace configuration; defaults when None.
        context: Dependency pass context with the full project set.
        strategies: Strategies to run; built from ``options`` when None.

    Returns:
        List[ProjectDependency]: Deduplicated, validated edges in discovery
        order.

    Raises:
        ConfigurationError: The selected compiler is unavailable.
    """
    if strategies is None:
        strategies = build_strategies(options)

    projects = context.projects_to_scan()
    logger.info(
        "Analyzing %d of %d project(s) with %s",
        len(projects),
        len(context.projects),
        ", ".join(s.NAME for s in strategies),
    )

    resolutions: List[EdgeResolution] = []
    for project in projects:
        found: List[EdgeResolution] = []
        for strategy in strategies:
            try:
                found.extend(strategy.find_dependencies(project, context))
            except ConfigurationError:
                raise
            except _SAFE_EXCEPTIONS as exc:
                logger.warning(
                    "Strategy %s failed for %s: %s", strategy.NAME, project.name, exc
                )
        edges = {r.dependency.target for r in found if r.is_edge}
        if edges:
            logger.info("%s -> %s", project.name, ", ".join(sorted(edges)))
        resolutions.extend(found)

    dependencies = collapse_resolutions(resolutions)
    logger.debug("Resolution summary: %s", summarize_resolutions(resolutions))
    logger.info("Found %d dependency edge(s)", len(dependencies))
    return dependencies
