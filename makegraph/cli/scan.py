"""Scan command implementations: ``nodes``, ``deps`` and ``scan``."""

import logging
import time
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from makegraph.cli.options import config_from_args, workspace_from_args
from makegraph.export.json import export_json, write_json
from makegraph.graph.manager import ProjectGraph
from makegraph.parsers.base import AggregateNodesError, ConfigurationError
from makegraph.runtime.api import build_nodes, scan_workspace
from makegraph.runtime.context import CreateDependenciesContext
from makegraph.runtime.dependencies import create_dependencies

logger = logging.getLogger("makegraph.cli.scan")

# Failures reported as a non-zero exit instead of a traceback.
RECOVERABLE_COMMAND_ERRORS = (
    ConfigurationError,
    AggregateNodesError,
    ValidationError,
    OSError,
    ValueError,
)


def _emit(data, output: Optional[str], console: Optional[Console] = None) -> None:
    if output:
        write_json(data, output)
        logger.info("Output: %s", output)
    else:
        (console or Console()).print_json(data=data)


def _report_failure(command: str, exc: Exception) -> int:
    if isinstance(exc, ConfigurationError):
        logger.error("%s", exc)
    else:
        logger.error("%s failed: %s", command, exc)
    return 1


def render_summary(graph: ProjectGraph, console: Optional[Console] = None) -> None:
    """Print projects and their dependencies as a table."""
    table = Table(title="Make projects")
    table.add_column("Project", style="bold")
    table.add_column("Root")
    table.add_column("Targets")
    table.add_column("Depends on")

    for node in graph.projects():
        table.add_row(
            node.name,
            node.root,
            ", ".join(node.targets) or "-",
            ", ".join(graph.dependencies_of(node.name)) or "-",
        )

    console = console or Console()
    console.print(table)
    summary = graph.get_summary()
    console.print(
        f"{summary['projects']} project(s), {summary['targets']} target(s), "
        f"{summary['dependencies']} dependency edge(s)"
    )


def nodes_command(args) -> int:
    """Run the node-building pass and emit project nodes keyed by root.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    try:
        workspace = workspace_from_args(args)
        config = config_from_args(args, workspace)
        nodes = build_nodes(workspace, config)
    except RECOVERABLE_COMMAND_ERRORS as e:
        return _report_failure("nodes", e)

    _emit({root: node.to_dict() for root, node in nodes.items()}, getattr(args, "output", None))
    return 0


def deps_command(args) -> int:
    """Run the dependency pass and emit the edge list.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    try:
        workspace = workspace_from_args(args)
        config = config_from_args(args, workspace)
        nodes = build_nodes(workspace, config)
        context = CreateDependenciesContext.from_nodes(
            workspace, nodes, getattr(args, "changed", None)
        )
        dependencies = create_dependencies(config, context)
    except RECOVERABLE_COMMAND_ERRORS as e:
        return _report_failure("deps", e)

    _emit([dep.to_dict() for dep in dependencies], getattr(args, "output", None))
    return 0


def scan_command(args) -> int:
    """Run both passes; write the graph or print a summary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    start_time = time.time()
    try:
        workspace = workspace_from_args(args)
        config = config_from_args(args, workspace)
        logger.info("Scanning %s (compiler=%s)", workspace, config.dependency_compiler)
        graph = scan_workspace(workspace, config)
    except RECOVERABLE_COMMAND_ERRORS as e:
        return _report_failure("scan", e)

    elapsed = time.time() - start_time
    logger.info("Scan completed in %.2fs", elapsed)
    logger.info("Graph: %d nodes, %d edges", graph.node_count(), graph.edge_count())

    output = getattr(args, "output", None)
    if output:
        export_json(graph, output)
    else:
        render_summary(graph)
    return 0
