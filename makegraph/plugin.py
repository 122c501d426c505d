"""Extension points consumed by the host orchestrator.

``create_nodes`` is invoked with the Makefiles matching ``MAKEFILE_GLOB``
that changed; ``create_dependencies`` is invoked with the full project set
(and optionally the changed subset). Both are pure functions of the
filesystem and their arguments.
"""

from dataclasses import dataclass
from typing import Callable

from makegraph.parsers.make.detector import MAKEFILE_GLOB
from makegraph.runtime.dependencies import create_dependencies
from makegraph.runtime.nodes import create_nodes


@dataclass(frozen=True)
class MakePlugin:
    """Bundle of the plugin's extension points."""

    name: str
    create_nodes_glob: str
    create_nodes: Callable
    create_dependencies: Callable


plugin = MakePlugin(
    name="makegraph",
    create_nodes_glob=MAKEFILE_GLOB,
    create_nodes=create_nodes,
    create_dependencies=create_dependencies,
)

__all__ = [
    "MAKEFILE_GLOB",
    "MakePlugin",
    "create_dependencies",
    "create_nodes",
    "plugin",
]
