"""Helpers for loading makegraph configuration from TOML/JSON sources.

This module provides a single entry point `load_config` that accepts various
configuration sources:

* None -> workspace config file if one exists, else defaults
* dict -> MakeGraphConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from makegraph.config.schema import MakeGraphConfig

logger = logging.getLogger("makegraph.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]

WORKSPACE_CONFIG_FILES = ("makegraph.toml", "makegraph.json")

# Section name accepted when the options are nested (e.g. [makegraph] in TOML).
CONFIG_SECTION = "makegraph"


def find_workspace_config(workspace_root: Path) -> Optional[Path]:
    """Return the first workspace-level config file present, if any."""
    for name in WORKSPACE_CONFIG_FILES:
        candidate = Path(workspace_root) / name
        if candidate.is_file():
            return candidate
    return None


def _unwrap_section(data: Dict[str, Any]) -> Dict[str, Any]:
    section = data.get(CONFIG_SECTION)
    if isinstance(section, dict) and len(data) == 1:
        return section
    return data


def load_config(
    source: ConfigSource,
    workspace_root: Optional[Path] = None,
) -> MakeGraphConfig:
    """Load MakeGraphConfig from various configuration sources.

    Args:
        source: One of:
            * None: the workspace config file when ``workspace_root`` holds
              one, otherwise defaults
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)
        workspace_root: Workspace searched for ``makegraph.toml`` /
            ``makegraph.json`` when ``source`` is None.

    Returns:
        MakeGraphConfig instance.

    Raises:
        ValidationError: If the configuration values are invalid.
        ValueError: If the source cannot be parsed into a mapping.
    """
    if source is None:
        discovered = find_workspace_config(workspace_root) if workspace_root else None
        if discovered is None:
            logger.debug("No config source provided; using default MakeGraphConfig")
            return MakeGraphConfig.default()
        source = discovered

    if isinstance(source, dict):
        logger.debug("Loading MakeGraphConfig from provided dict")
        return MakeGraphConfig.from_dict(_unwrap_section(source))

    if isinstance(source, (str, Path)):
        path = Path(source)
        if path.is_file():
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = "json" if text.lstrip().startswith(("{", "[")) else "toml"
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = "json" if text.lstrip().startswith(("{", "[")) else "toml"
            logger.info("Loading configuration from inline %s string", fmt)

        try:
            data = json.loads(text) if fmt == "json" else tomllib.loads(text)
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ValueError(f"Cannot parse {fmt} configuration: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Top-level configuration must be a mapping/dict")

        return MakeGraphConfig.from_dict(_unwrap_section(data))

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


__all__ = ["find_workspace_config", "load_config"]
