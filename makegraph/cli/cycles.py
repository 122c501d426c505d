"""CLI command reporting dependency cycles between projects.

The inferred graph is allowed to contain cycles; this command only reports
them. With ``--fail-on-cycle`` it fails the process so that CI pipelines can
enforce acyclicity.
"""

from __future__ import annotations

import logging
from typing import List

from makegraph.cli.options import config_from_args, workspace_from_args
from makegraph.cli.scan import RECOVERABLE_COMMAND_ERRORS
from makegraph.runtime.api import scan_workspace

logger = logging.getLogger("makegraph.cli.cycles")


def cycles_command(args) -> int:
    """Execute cycle inspection.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    try:
        workspace = workspace_from_args(args)
        config = config_from_args(args, workspace)
        graph = scan_workspace(workspace, config)
    except RECOVERABLE_COMMAND_ERRORS as e:
        logger.error("cycles failed: %s", e)
        return 1

    # Interpret limit: <= 0 means "no limit".
    limit_arg = getattr(args, "limit", None)
    limit = limit_arg if isinstance(limit_arg, int) and limit_arg > 0 else None

    cycles: List[List[str]] = graph.find_cycles(limit=limit)
    if not cycles:
        logger.info("Project graph has no dependency cycles")
        return 0

    logger.warning("Detected %d cycle(s) in project graph", len(cycles))

    for idx, cycle in enumerate(cycles, start=1):
        # Present a closed loop for readability: A -> B -> C -> A
        pretty_cycle = cycle + [cycle[0]] if cycle else cycle
        logger.warning("Cycle %d: %s", idx, " -> ".join(pretty_cycle))

        for source, target in zip(pretty_cycle, pretty_cycle[1:]):
            data = graph.native_graph.get_edge_data(source, target) or {}
            logger.warning(
                "    - %s -> %s (evidence: %s)",
                source,
                target,
                data.get("source_file", "unknown"),
            )

    if getattr(args, "fail_on_cycle", False):
        logger.error("Dependency cycles detected")
        return 1

    return 0
