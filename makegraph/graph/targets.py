"""Target assembly: parsed Makefile targets to TargetConfig maps.

``dependsOn`` carries the only coupling between a project's targets and the
dependency edges: build-equivalent targets gain ``^build`` and the
orchestrator expands it over whatever edges the dependency pass produced.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from makegraph.graph.schema import (
    MakeInvocation,
    TargetConfig,
    TargetHelp,
    TargetMetadata,
    WatchInvocation,
)
from makegraph.parsers.make.makefile import parse_makefile

logger = logging.getLogger("makegraph.graph.targets")

BUILD_TARGETS = ("build", "compile", "all")
BUILD_TARGET = "build"
RUN_TARGET = "run"
SERVE_TARGET = "serve"

SERVE_DESCRIPTION = "Watch for changes and automatically rebuild and rerun"


def qualify_target_name(make_target: str, target_name: Optional[str] = None) -> str:
    """Return the target key for a Make target, applying the optional prefix.

    Examples:
        >>> qualify_target_name("build")
        'build'
        >>> qualify_target_name("build", "make")
        'make:build'
    """
    if target_name:
        return f"{target_name}:{make_target}"
    return make_target


def is_build_target(make_target: str) -> bool:
    """Check whether a Make target is build-equivalent."""
    return make_target in BUILD_TARGETS


def build_serve_target(target_name: Optional[str] = None) -> TargetConfig:
    """Create the synthetic watch-and-rerun target wrapping ``run``."""
    serve_key = qualify_target_name(SERVE_TARGET, target_name)
    return TargetConfig(
        name=serve_key,
        invocation=WatchInvocation(run_target=qualify_target_name(RUN_TARGET, target_name)),
        metadata=TargetMetadata(
            description=SERVE_DESCRIPTION,
            help=TargetHelp(
                command=f"nx {serve_key}",
                example={"options": {"verbose": True}},
            ),
        ),
    )


def build_target_configs(
    project_root: str,
    parsed: Mapping[str, List[str]],
    target_name: Optional[str] = None,
) -> Dict[str, TargetConfig]:
    """Assemble the TargetConfig map for one project.

    Args:
        project_root: Workspace-relative project root, used as the Make cwd.
        parsed: Target name to prerequisite tokens, as returned by
            ``parse_makefile``.
        target_name: Optional target key prefix.

    Returns:
        Dict[str, TargetConfig]: Keyed by (prefixed) target name, in parse
        order, with the synthetic ``serve`` target last when generated.
    """
    targets: Dict[str, TargetConfig] = {}

    for make_target, prerequisites in parsed.items():
        depends_on: List[str] = []
        if is_build_target(make_target):
            depends_on.append("^" + qualify_target_name(BUILD_TARGET, target_name))

        for prerequisite in prerequisites:
            # File prerequisites are Make's business; only peer targets order here.
            if prerequisite == make_target or prerequisite not in parsed:
                continue
            peer = qualify_target_name(prerequisite, target_name)
            if peer not in depends_on:
                depends_on.append(peer)

        key = qualify_target_name(make_target, target_name)
        targets[key] = TargetConfig(
            name=key,
            invocation=MakeInvocation(target=make_target, cwd=project_root),
            depends_on=depends_on,
            metadata=TargetMetadata(description=f"Run make {make_target}"),
        )

    has_build = any(is_build_target(t) for t in parsed)
    if has_build and RUN_TARGET in parsed:
        serve = build_serve_target(target_name)
        if serve.name in targets:
            logger.debug("Replacing Makefile-defined %s in %s", serve.name, project_root)
            # Re-insert so the synthetic target stays last.
            del targets[serve.name]
        targets[serve.name] = serve

    return targets


def create_targets_for_makefile(
    makefile_path: Path,
    project_root: str,
    target_name: Optional[str] = None,
) -> Dict[str, TargetConfig]:
    """Parse a Makefile and assemble its targets.

    Args:
        makefile_path: Absolute path of the Makefile.
        project_root: Workspace-relative project root.
        target_name: Optional target key prefix.

    Returns:
        Dict[str, TargetConfig]: Empty when the Makefile is unreadable.
    """
    parsed = parse_makefile(makefile_path)
    targets = build_target_configs(project_root, parsed, target_name=target_name)
    logger.debug("Assembled %d target(s) for %s", len(targets), project_root)
    return targets


__all__ = [
    "BUILD_TARGETS",
    "RUN_TARGET",
    "SERVE_TARGET",
    "build_serve_target",
    "build_target_configs",
    "create_targets_for_makefile",
    "is_build_target",
    "qualify_target_name",
]
