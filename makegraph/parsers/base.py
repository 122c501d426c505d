"""Base detector, include scanner and dependency strategy interfaces.

Dependency discovery is evidence gathering from independent heuristics. Each
heuristic implements three narrow roles:

1. Detector - lightweight scanning to find Makefiles (project roots)
2. IncludeScanner - per-project extraction of referenced header paths
3. DependencyStrategy - given a project and the full project set, return
   candidate edges

The caller unions and deduplicates strategy outputs regardless of which
strategies are enabled.
"""

# Scanners catch a fixed set of recoverable exceptions so that one unreadable
# file or failing compiler run never aborts a whole pass.


from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from makegraph.graph.schema import EdgeResolution, IncludeEdge, ProjectRef
from makegraph.utils.scanner import DEFAULT_EXCLUDE_DIRS, find_makefiles

if TYPE_CHECKING:
    from makegraph.runtime.context import CreateDependenciesContext

logger = logging.getLogger("makegraph.parsers.base")


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================

class MakeGraphError(Exception):
    """Base class for all makegraph errors."""
    pass


class ConfigurationError(MakeGraphError):
    """Fatal configuration problem; aborts the whole pass.

    No partial graph is produced when this is raised.
    """
    pass


class ToolchainUnavailableError(ConfigurationError):
    """The explicitly selected preprocessor toolchain is not usable."""

    def __init__(self, compiler: str, detail: Optional[str] = None) -> None:
        self.compiler = compiler
        self.detail = detail
        message = (
            f"Compiler '{compiler}' is not available. "
            f"Install {compiler} or set dependencyCompiler to 'manual' "
            "in the workspace configuration (makegraph.toml)."
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RecoverableError(MakeGraphError):
    """Base class for recoverable errors.

    These errors indicate expected failure conditions that can be handled
    gracefully by skipping the current item and continuing processing.
    """
    pass


class AggregateNodesError(MakeGraphError):
    """One or more Makefiles failed during node building.

    Attributes:
        errors: ``(makefile, exception)`` pairs, in input order.
        partial_results: Results of the Makefiles that succeeded.
    """

    def __init__(self, errors: List[tuple], partial_results: List[tuple]) -> None:
        self.errors = errors
        self.partial_results = partial_results
        files = ", ".join(str(f) for f, _ in errors)
        super().__init__(f"Failed to create nodes for {len(errors)} file(s): {files}")


# =============================================================================
# Exception Categories for Graceful Handling
# =============================================================================

# External process errors - recoverable
_EXTERNAL_ERRORS = (
    subprocess.CalledProcessError,
    subprocess.TimeoutExpired,
)

# I/O errors - recoverable (file not found, permission denied, etc.)
_IO_ERRORS = (
    OSError,
    UnicodeDecodeError,
)

# TypeError, AttributeError and friends indicate programming errors and
# are left to propagate.
_SAFE_EXCEPTIONS = _EXTERNAL_ERRORS + _IO_ERRORS + (RecoverableError, ValueError)


class BaseDetector(ABC):
    """Base class for project detectors.

    Detectors perform lightweight scanning to identify the files that define
    projects.
    """

    NAME: str = "base"

    def __init__(
        self,
        workspace_root: Path,
        ignore_patterns: Optional[Sequence[str]] = None,
    ) -> None:
        """Initialize detector.

        Args:
            workspace_root: Workspace root path.
            ignore_patterns: Extra glob patterns excluded from detection.
        """
        self.workspace_root = Path(workspace_root)
        self.ignore_patterns = list(ignore_patterns or [])
        logger.debug("Detector %s initialized", self.NAME)

    @abstractmethod
    def detect(self) -> List[str]:
        """Detect project-defining files in the workspace.

        Returns:
            List[str]: Workspace-relative paths.
        """
        raise NotImplementedError

    def scan_workspace(self) -> List[str]:
        """Scan the workspace for Makefiles, respecting .gitignore."""
        return find_makefiles(self.workspace_root, ignore_patterns=self.ignore_patterns)


class BaseIncludeScanner(ABC):
    """Base class for include scanners.

    Include scanners extract the header paths a project's files reference.
    ``scan`` must only read files below ``project_dir`` (excluding nested
    projects) so that it is safe to run for several projects concurrently.
    """

    NAME: str = "base"
    EXTENSIONS: Sequence[str] = ()

    def __init__(
        self,
        exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
        max_files: Optional[int] = None,
    ) -> None:
        """Initialize scanner.

        Args:
            exclude_dirs: Directory names never descended into.
            max_files: Optional cap on files scanned per project.
        """
        self.exclude_dirs = tuple(exclude_dirs)
        self.max_files = max_files

    @classmethod
    def from_config(cls, config: Any, compiler: Optional[str] = None) -> "BaseIncludeScanner":
        """Build a scanner from a MakeGraphConfig.

        Args:
            config: Workspace configuration.
            compiler: Resolved compiler command, for compiler-backed scanners.
        """
        return cls(
            exclude_dirs=config.exclude_dirs,
            max_files=config.max_files_per_project,
        )

    @abstractmethod
    def scan(self, project_dir: Path, project_root: str) -> List[IncludeEdge]:
        """Scan one project directory.

        Args:
            project_dir: Absolute project directory.
            project_root: Workspace-relative project root, used to express
                source files relative to the workspace.

        Returns:
            List[IncludeEdge]: One entry per distinct include path, first
            occurrence kept.
        """
        raise NotImplementedError


class BaseDependencyStrategy(ABC):
    """Base class for dependency strategies.

    A strategy turns one kind of evidence into candidate edges. It returns
    every resolution, including the ones that produced no edge, so callers
    can tell "nothing found" apart from "found but invalid".
    """

    NAME: str = "base"

    @abstractmethod
    def find_dependencies(
        self,
        project: ProjectRef,
        context: "CreateDependenciesContext",
    ) -> List[EdgeResolution]:
        """Return candidate edges for ``project``.

        Args:
            project: Project being analyzed.
            context: Dependency pass context holding the full project set.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.NAME!r})"
