"""Preprocessor-assisted include scanner (``gcc -MM`` / ``clang -MM``).

The compiler reports exactly the user headers the real build would see,
given the ``-I`` flags declared in the project's Makefile. A file that does
not compile contributes no headers; it does not stop the scan.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from makegraph.graph.schema import IncludeEdge
from makegraph.parsers.base import BaseIncludeScanner, ToolchainUnavailableError
from makegraph.parsers.cpp.code_parser import SOURCE_EXTENSIONS
from makegraph.parsers.make.makefile import extract_include_flags, read_makefile
from makegraph.utils.path_utils import (
    join_root,
    normalize_relative,
    relative_posix,
    to_posix,
)
from makegraph.utils.scanner import DEFAULT_EXCLUDE_DIRS, MAKEFILE_NAME, walk_project_files

logger = logging.getLogger("makegraph.parsers.cpp.compiler")

SUPPORTED_COMPILERS = ("gcc", "clang")
MANUAL_MODE = "manual"

# Target name passed with -MT so the output starts with a known prefix.
_DEP_TARGET = "dummy"

# A depfile token: escaped characters (e.g. "\ ") or runs of non-space.
_DEP_TOKEN_RE = re.compile(r"(?:\\.|[^\s\\])+")
_DEP_ESCAPE_RE = re.compile(r"\\(.)")


def resolve_compiler(mode: Optional[str] = None) -> Optional[str]:
    """Return the compiler command for ``mode``, or None for manual scanning.

    Args:
        mode: ``gcc`` (default), ``clang`` or ``manual``.

    Returns:
        Optional[str]: Compiler command; None when ``mode`` is ``manual``.

    Raises:
        ToolchainUnavailableError: The selected compiler is missing or does
            not run.
        ValueError: ``mode`` is not a known strategy.
    """
    compiler = mode or "gcc"
    if compiler == MANUAL_MODE:
        return None
    if compiler not in SUPPORTED_COMPILERS:
        raise ValueError(
            f"Unknown dependency compiler '{compiler}'; "
            f"expected one of {SUPPORTED_COMPILERS + (MANUAL_MODE,)}"
        )

    if shutil.which(compiler) is None:
        raise ToolchainUnavailableError(compiler, "not found on PATH")

    try:
        subprocess.run(
            [compiler, "--version"],
            capture_output=True,
            check=True,
            timeout=30,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as exc:
        raise ToolchainUnavailableError(compiler, str(exc)) from exc

    logger.debug("Using compiler '%s' for dependency detection", compiler)
    return compiler


def parse_dependency_output(output: str) -> List[str]:
    """Parse ``-MM`` output into a flat list of dependency paths.

    The output has the form ``target: dep1 dep2 \\`` with backslash line
    continuations; spaces inside paths are escaped as ``\\ ``.

    Examples:
        >>> parse_dependency_output("dummy: main.c ../lib/a.h b.h")
        ['main.c', '../lib/a.h', 'b.h']
    """
    text = output.replace("\\\r\n", " ").replace("\\\n", " ")
    _, sep, rest = text.partition(":")
    if not sep:
        return []
    deps: List[str] = []
    for token in _DEP_TOKEN_RE.findall(rest):
        dep = _DEP_ESCAPE_RE.sub(r"\1", token).replace("$$", "$")
        if dep:
            deps.append(dep)
    return deps


class CompilerIncludeScanner(BaseIncludeScanner):
    """Include scanner backed by the compiler's dependency-listing mode."""

    NAME = "compiler"
    EXTENSIONS = SOURCE_EXTENSIONS

    def __init__(
        self,
        compiler: str,
        exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
        max_files: Optional[int] = None,
        max_workers: int = 8,
        timeout: float = 60.0,
    ) -> None:
        """Initialize scanner.

        Args:
            compiler: Compiler command (``gcc`` or ``clang``).
            exclude_dirs: Directory names never descended into.
            max_files: Optional cap on source files per project.
            max_workers: Concurrent compiler invocations.
            timeout: Timeout per compiler invocation, in seconds.
        """
        super().__init__(exclude_dirs=exclude_dirs, max_files=max_files)
        self.compiler = compiler
        self.max_workers = max_workers
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Any, compiler: Optional[str] = None) -> "CompilerIncludeScanner":
        if compiler is None:
            raise ValueError("CompilerIncludeScanner requires a resolved compiler")
        return cls(
            compiler=compiler,
            exclude_dirs=config.exclude_dirs,
            max_files=config.max_files_per_project,
            max_workers=config.max_workers,
            timeout=config.compiler_timeout,
        )

    def build_command(self, source_file: str, include_flags: Sequence[str]) -> List[str]:
        """Compose the ``-MM`` invocation for one project-relative source file."""
        cmd = [self.compiler, "-MM", "-MT", _DEP_TARGET]
        cmd.extend(f"-I{path}" for path in include_flags)
        cmd.append(source_file)
        return cmd

    def dependencies_for_file(
        self,
        source_file: str,
        project_dir: Path,
        include_flags: Sequence[str],
    ) -> List[str]:
        """List the headers one source file depends on.

        Paths are returned relative to ``project_dir``; headers outside the
        project come back as ``../...`` paths.

        Args:
            source_file: Source path relative to ``project_dir``.
            project_dir: Absolute project directory (compiler cwd).
            include_flags: ``-I`` paths from the project Makefile.

        Returns:
            List[str]: Header paths; empty when compilation fails.
        """
        cmd = self.build_command(source_file, include_flags)
        try:
            completed = subprocess.run(
                cmd,
                cwd=project_dir,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except (subprocess.TimeoutExpired, OSError) as exc:
            logger.debug("%s failed for %s: %s", self.compiler, source_file, exc)
            return []

        if completed.returncode != 0:
            logger.debug(
                "%s -MM exited %d for %s: %s",
                self.compiler,
                completed.returncode,
                source_file,
                (completed.stderr or "").strip().partition("\n")[0],
            )
            return []

        deps: List[str] = []
        for dep in parse_dependency_output(completed.stdout):
            if Path(dep).is_absolute():
                dep = relative_posix(dep, project_dir)
            else:
                dep = normalize_relative(to_posix(dep))
            if dep != normalize_relative(source_file):
                deps.append(dep)
        return deps

    def scan(self, project_dir: Path, project_root: str) -> List[IncludeEdge]:
        """Run the compiler over every compilable source file of a project.

        Invocations run concurrently; results are merged in file order so the
        first evidence for a header is deterministic.
        """
        text = read_makefile(Path(project_dir) / MAKEFILE_NAME)
        include_flags = [flag.path for flag in extract_include_flags(text or "")]

        sources = [
            relative_posix(path, project_dir)
            for path in walk_project_files(
                project_dir, self.EXTENSIONS, self.exclude_dirs, self.max_files
            )
        ]
        if not sources:
            return []

        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(sources)),
            thread_name_prefix="makegraph-cc",
        ) as executor:
            results = list(
                executor.map(
                    lambda src: self.dependencies_for_file(src, project_dir, include_flags),
                    sources,
                )
            )

        edges: Dict[str, IncludeEdge] = {}
        for source, deps in zip(sources, results):
            source_file = join_root(project_root, source)
            for dep in deps:
                if dep not in edges:
                    edges[dep] = IncludeEdge(dep, source_file)

        logger.debug(
            "%s scanned %d source file(s) in %s: %d header(s)",
            self.compiler,
            len(sources),
            project_root,
            len(edges),
        )
        return list(edges.values())
