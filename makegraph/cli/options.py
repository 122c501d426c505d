"""Shared option handling for CLI commands."""

import logging
from pathlib import Path

from makegraph.config.loader import load_config
from makegraph.config.schema import MakeGraphConfig

logger = logging.getLogger("makegraph.cli.options")


def workspace_from_args(args) -> Path:
    """Resolve the workspace argument.

    Raises:
        NotADirectoryError: The workspace does not exist.
    """
    workspace = Path(getattr(args, "workspace", ".")).expanduser().resolve()
    if not workspace.is_dir():
        raise NotADirectoryError(f"Workspace is not a directory: {workspace}")
    return workspace


def config_from_args(args, workspace: Path) -> MakeGraphConfig:
    """Load the configuration and apply command-line overrides.

    ``-c/--config`` wins over a workspace ``makegraph.toml``; ``--compiler``
    and ``--max-files`` win over both.
    """
    config = load_config(getattr(args, "config", None), workspace_root=workspace)
    config = config.with_overrides(
        dependency_compiler=getattr(args, "compiler", None),
        max_files_per_project=getattr(args, "max_files", None),
    )
    logger.debug("Effective configuration: %s", config.to_dict())
    return config
