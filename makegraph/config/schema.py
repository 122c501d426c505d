"""Configuration schema definitions using Pydantic for validation.

A single ``MakeGraphConfig`` carries the workspace-level options of both
extension points. Keys are accepted in snake_case or in the camelCase used by
orchestrator configuration files (``dependencyCompiler``, ``targetName``).
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from makegraph.graph.naming import DEFAULT_GROUPING_DIRS
from makegraph.utils.scanner import DEFAULT_EXCLUDE_DIRS

DependencyCompiler = Literal["gcc", "clang", "manual"]


class MakeGraphConfig(BaseModel):
    """Top-level configuration for node and dependency building.

    Attributes:
        target_name: Optional prefix; target keys become ``<prefix>:<target>``.
        dependency_compiler: Include resolution strategy. ``gcc`` and
            ``clang`` run the compiler in ``-MM`` mode and require it to be
            installed; ``manual`` uses lexical include scanning.
        max_files_per_project: Cap on source files scanned per project.
        exclude_dirs: Directory names skipped while scanning sources.
        grouping_dirs: Top-level directories dropped from project names
            when exactly one segment follows them.
        max_workers: Worker threads for node building and compiler runs.
        compiler_timeout: Timeout for a single compiler invocation (seconds).
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    target_name: Optional[str] = None
    dependency_compiler: DependencyCompiler = "gcc"
    max_files_per_project: Optional[int] = Field(default=None, ge=1)
    exclude_dirs: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    grouping_dirs: List[str] = Field(default_factory=lambda: list(DEFAULT_GROUPING_DIRS))
    max_workers: int = Field(default=8, ge=1, le=64)
    compiler_timeout: float = Field(default=60.0, ge=1.0, le=600.0)

    @field_validator("target_name")
    @classmethod
    def validate_target_name(cls, v: Optional[str]) -> Optional[str]:
        """Reject empty prefixes and prefixes that would break target keys."""
        if v is None:
            return v
        v = v.strip()
        if not v or ":" in v or any(ch.isspace() for ch in v):
            raise ValueError(
                f"Invalid targetName '{v}': must be non-empty without ':' or whitespace"
            )
        return v

    @field_validator("exclude_dirs", "grouping_dirs")
    @classmethod
    def validate_dir_names(cls, v: List[str]) -> List[str]:
        """Directory entries are bare names, not paths."""
        for name in v:
            if not name or "/" in name or "\\" in name:
                raise ValueError(f"Invalid directory name: {name!r}")
        return v

    @classmethod
    def default(cls) -> "MakeGraphConfig":
        """Return a configuration with all defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MakeGraphConfig":
        """Create configuration from dictionary.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self, by_alias: bool = True) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(by_alias=by_alias)

    def with_overrides(self, **overrides: Any) -> "MakeGraphConfig":
        """Return a validated copy with non-None overrides applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)
