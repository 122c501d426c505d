"""Configuration schema and loading for makegraph."""

from .loader import find_workspace_config, load_config
from .schema import DependencyCompiler, MakeGraphConfig

__all__ = [
    "DependencyCompiler",
    "MakeGraphConfig",
    "find_workspace_config",
    "load_config",
]
