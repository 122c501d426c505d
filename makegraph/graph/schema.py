"""Canonical project graph models and validation.

This module is the single source of truth for the shapes handed to the host
orchestrator: project nodes, their target configurations and the inferred
dependency edges. Models serialize with ``by_alias=True`` to the camelCase
JSON the orchestrator consumes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from makegraph.utils.path_utils import is_within_project

logger = logging.getLogger("makegraph.graph.schema")


class DependencyType(str, Enum):
    """Dependency edge types understood by the orchestrator."""

    # Inferred from static analysis of Makefiles or sources.
    STATIC = "static"


class EdgeStatus(str, Enum):
    """Outcome of resolving one candidate path to a dependency edge."""

    RESOLVED = "resolved"
    NOT_CANDIDATE = "not_candidate"
    NO_MATCH = "no_match"
    SELF_REFERENCE = "self_reference"
    INVALID = "invalid"


@dataclass(frozen=True)
class IncludeEdge:
    """A header reference found in one of a project's files.

    Attributes:
        include_path: Path as written in the directive, or as emitted by the
            compiler and normalized relative to the project directory.
        source_file: Workspace-relative path of the including file.
        line: 1-based line of the directive when known.
    """

    include_path: str
    source_file: str
    line: Optional[int] = None


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with orchestrator field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProjectRef(_AliasedModel):
    """Name and workspace-relative root of a known project."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    root: str


class MakeInvocation(_AliasedModel):
    """Run one Make target in the project directory."""

    kind: Literal["make"] = "make"
    target: str
    cwd: str


class WatchInvocation(_AliasedModel):
    """Watch a project and its dependencies, rerunning a target on change."""

    kind: Literal["watch"] = "watch"
    project: str = "{projectName}"
    run_target: str = Field(alias="runTarget")
    include_dependent_projects: bool = Field(default=True, alias="includeDependentProjects")
    initial_run: bool = Field(default=True, alias="initialRun")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def command(self) -> str:
        """Shell command form for orchestrators that run plain commands."""
        flags = [f"--projects={self.project}"]
        if self.include_dependent_projects:
            flags.append("--includeDependentProjects")
        if self.initial_run:
            flags.append("--initialRun")
        return (
            f"nx watch {' '.join(flags)} -- nx run {self.project}:{self.run_target}"
        )


Invocation = Annotated[
    Union[MakeInvocation, WatchInvocation],
    Field(discriminator="kind"),
]


class TargetHelp(_AliasedModel):
    """Usage hint shown by orchestrator help output."""

    command: str
    example: Dict[str, Any] = Field(default_factory=dict)


class TargetMetadata(_AliasedModel):
    """Human-facing target metadata."""

    technologies: List[str] = Field(default_factory=lambda: ["make"])
    description: str
    help: Optional[TargetHelp] = None


class TargetConfig(_AliasedModel):
    """Assembled configuration for one runnable target.

    ``depends_on`` holds ``^<target>`` entries (same-named target of every
    dependency project) and names of other targets of the same project.
    """

    name: str
    invocation: Invocation
    depends_on: List[str] = Field(default_factory=list, alias="dependsOn")
    metadata: TargetMetadata

    @field_validator("depends_on")
    @classmethod
    def validate_unique(cls, v: List[str]) -> List[str]:
        """dependsOn is an ordered set."""
        if len(set(v)) != len(v):
            raise ValueError(f"dependsOn contains duplicates: {v}")
        return v


class ProjectNode(_AliasedModel):
    """One project: a directory holding a Makefile."""

    root: str
    name: str
    makefile: str
    targets: Dict[str, TargetConfig] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_peer_references(self) -> "ProjectNode":
        """Every intra-project dependsOn entry must name a known target."""
        for key, target in self.targets.items():
            for dep in target.depends_on:
                if not dep.startswith("^") and dep not in self.targets:
                    raise ValueError(
                        f"Target '{key}' of project '{self.name}' depends on "
                        f"unknown target '{dep}'"
                    )
        return self

    def to_ref(self) -> ProjectRef:
        """Return the name/root pair used by dependency building."""
        return ProjectRef(name=self.name, root=self.root)


class ProjectDependency(_AliasedModel):
    """An inferred project -> project edge with its evidence."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str
    target: str
    type: DependencyType = DependencyType.STATIC
    source_file: str = Field(alias="sourceFile")
    line: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def forbid_self_loop(self) -> "ProjectDependency":
        """Self-loops carry no information and are never emitted."""
        if self.source == self.target:
            raise ValueError(f"Self-referencing dependency on '{self.source}'")
        return self

    @property
    def key(self) -> tuple[str, str]:
        """Deduplication key."""
        return (self.source, self.target)


@dataclass(frozen=True)
class EdgeResolution:
    """Result of resolving one candidate; only RESOLVED carries an edge."""

    status: EdgeStatus
    source: str
    candidate: str
    dependency: Optional[ProjectDependency] = None
    reason: Optional[str] = None

    @property
    def is_edge(self) -> bool:
        return self.status is EdgeStatus.RESOLVED and self.dependency is not None


def validate_dependency(
    dependency: ProjectDependency,
    projects: Mapping[str, ProjectRef],
) -> None:
    """Validate an edge against the current project set.

    Args:
        dependency: Edge to check.
        projects: Known projects by name.

    Raises:
        ValueError: If either end is unknown, the edge is a self-loop, or the
            evidence file does not belong to the source project.
    """
    if dependency.source not in projects:
        raise ValueError(f"Source project '{dependency.source}' does not exist")
    if dependency.target not in projects:
        raise ValueError(f"Target project '{dependency.target}' does not exist")
    if dependency.source == dependency.target:
        raise ValueError(f"Self-referencing dependency on '{dependency.source}'")

    evidence = dependency.source_file.strip()
    if not evidence:
        raise ValueError("Static dependencies require a source file")
    source_root = projects[dependency.source].root
    if not is_within_project(evidence, source_root):
        raise ValueError(
            f"Source file '{evidence}' is outside project root '{source_root}'"
        )
