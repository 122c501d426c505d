"""Lexical C/C++ include scanner.

Extracts ``#include`` paths from source and header files without a
toolchain. Comments and string/character literal contents are scrubbed first
so that include-like text inside them is not reported. This can both over-
and under-match (conditional compilation is ignored, macro includes are
missed) but it never fails.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Tuple

from makegraph.graph.schema import IncludeEdge
from makegraph.parsers.base import BaseIncludeScanner
from makegraph.utils.path_utils import join_root, relative_posix
from makegraph.utils.scanner import walk_project_files

logger = logging.getLogger("makegraph.parsers.cpp.code_parser")

SOURCE_EXTENSIONS = (".c", ".cpp", ".cc", ".cxx", ".c++", ".C")
HEADER_EXTENSIONS = (".h", ".hpp", ".hh", ".hxx", ".h++")

INCLUDE_RE = re.compile(r'^\s*#\s*include\s*[<"]([^">]+)[">]', flags=re.MULTILINE)

# Tried left to right at each position: an include directive at the start of
# a line, optionally after same-line block comments, is kept with those
# comments blanked. Everything else is blanked.
_SCRUB_RE = re.compile(
    r"""
    (?P<include>^[ \t]*(?:/\*[^\n]*?\*/[ \t]*)*\#[ \t]*include[ \t]*(?:"[^"\n]*"|<[^>\n]*>))
    |(?P<block>/\*.*?\*/)
    |(?P<line>//[^\n]*)
    |(?P<string>"(?:\\.|[^"\\\n])*")
    |(?P<char>'(?:\\.|[^'\\\n])*')
    """,
    re.VERBOSE | re.MULTILINE | re.DOTALL,
)

_INLINE_BLOCK_RE = re.compile(r"/\*.*?\*/")


def _scrub(match: "re.Match[str]") -> str:
    kind = match.lastgroup
    text = match.group(0)
    if kind == "include":
        return _INLINE_BLOCK_RE.sub(" ", text)
    if kind == "block":
        # Keep line numbering stable.
        return "\n" * text.count("\n")
    if kind == "line":
        return ""
    if kind == "string":
        return '""'
    return "''"


def scrub_source(text: str) -> str:
    """Blank comments and literal contents, preserving include directives."""
    return _SCRUB_RE.sub(_scrub, text)


def extract_includes(text: str) -> List[Tuple[str, int]]:
    """Return ``(include_path, line)`` pairs in order of appearance."""
    cleaned = scrub_source(text)
    includes: List[Tuple[str, int]] = []
    for match in INCLUDE_RE.finditer(cleaned):
        path = match.group(1).strip()
        if path:
            lineno = cleaned.count("\n", 0, match.start(1)) + 1
            includes.append((path, lineno))
    return includes


class LexicalIncludeScanner(BaseIncludeScanner):
    """Regex include scanner over scrubbed C/C++ sources and headers."""

    NAME = "manual"
    EXTENSIONS = SOURCE_EXTENSIONS + HEADER_EXTENSIONS

    def parse_file(self, file_path: Path) -> List[Tuple[str, int]]:
        """Extract includes from one file.

        Unreadable files yield nothing.
        """
        try:
            raw = file_path.read_bytes()
        except OSError as exc:
            logger.debug("Failed reading %s: %s", file_path, exc)
            return []
        return extract_includes(raw.decode("utf8", errors="ignore"))

    def scan(self, project_dir: Path, project_root: str) -> List[IncludeEdge]:
        """Scan a project tree for include directives.

        Args:
            project_dir: Absolute project directory.
            project_root: Workspace-relative project root.

        Returns:
            List[IncludeEdge]: One entry per distinct include path.
        """
        edges: Dict[str, IncludeEdge] = {}
        files = 0
        for file_path in walk_project_files(
            project_dir, self.EXTENSIONS, self.exclude_dirs, self.max_files
        ):
            files += 1
            source_file = join_root(project_root, relative_posix(file_path, project_dir))
            for include_path, lineno in self.parse_file(file_path):
                if include_path not in edges:
                    edges[include_path] = IncludeEdge(include_path, source_file, lineno)

        logger.debug(
            "Scanned %d file(s) in %s: %d unique include(s)",
            files,
            project_root,
            len(edges),
        )
        return list(edges.values())
