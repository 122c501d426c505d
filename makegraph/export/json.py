"""JSON export for project graphs and pass results."""

import json
import logging
from pathlib import Path
from typing import Any

from makegraph.graph.manager import ProjectGraph

logger = logging.getLogger("makegraph.export.json")


def write_json(data: Any, output_path: Path) -> None:
    """Write JSON-serializable data, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_json(graph: ProjectGraph, output_path: Path) -> None:
    """Export graph to JSON format.

    Args:
        graph: Project graph to export.
        output_path: Output file path.
    """
    logger.info("Exporting graph to JSON: %s", output_path)

    write_json(graph.to_dict(), output_path)

    logger.info("JSON export completed: %d nodes, %d edges",
                graph.node_count(), graph.edge_count())
