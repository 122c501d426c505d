"""Line-oriented Makefile scanner.

This is deliberately not a Make grammar. It recognizes ``name: prerequisites``
lines, ``-I`` include flags and, for dependency evidence, any rule line
including file rules such as ``foo.o: ../lib/foo.h``. Known false negatives:

* rule continuation lines (``a: b \\`` followed by more prerequisites)
* pattern rules (``%.o: %.c``) and variable-expanded target names
* targets introduced through ``include``d Makefiles or conditionals

Malformed lines are never errors; they simply do not match.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger("makegraph.parsers.make.makefile")

# Target definitions: an identifier at the start of the line followed by a colon.
TARGET_RE = re.compile(r"^([A-Za-z0-9_-]+):(.*)$")

# -I<path>, -I <path>, -I"<path>"; preceded by line start, whitespace, '=' or a quote.
INCLUDE_FLAG_RE = re.compile(
    r"""(?:^|(?<=[\s='"]))-I[ \t]*("[^"\n]*"|'[^'\n]*'|[^\s'"]+)""",
    re.MULTILINE,
)

_DISCARD_PREFIXES = ("/", "@", '"')


@dataclass
class MakeRule:
    """A rule line found by the broad evidence scan.

    Attributes:
        targets: Raw text before the colon (may name several files).
        prerequisites: Filtered prerequisite tokens.
        line: 1-based line number of the rule.
    """

    targets: str
    prerequisites: List[str] = field(default_factory=list)
    line: int = 0


@dataclass(frozen=True)
class IncludeFlag:
    """An ``-I`` include search path and the line it appears on."""

    path: str
    line: int


def _strip_inline_noise(rest: str) -> str:
    """Cut a rule remainder at comments and inline recipes."""
    for marker in ("#", ";"):
        idx = rest.find(marker)
        if idx != -1:
            rest = rest[:idx]
    return rest


def filter_prerequisites(rest: str) -> List[str]:
    """Tokenize the text after a rule's colon into prerequisite candidates.

    A token is dropped when it is empty, contains ``$`` (unresolved
    variable), starts with ``/`` (absolute file), ``@`` (shell fragment) or
    ``"``. The order-only separator ``|`` is dropped as well.
    """
    tokens: List[str] = []
    for token in _strip_inline_noise(rest).split():
        if not token or token == "|":
            continue
        if "$" in token or token.startswith(_DISCARD_PREFIXES):
            continue
        tokens.append(token)
    return tokens


def _is_assignment(rest: str) -> bool:
    """``NAME:=value`` / ``NAME::=value`` are assignments, not rules."""
    return rest.startswith("=") or rest.startswith(":=") or rest.startswith("::=")


def parse_makefile_text(text: str) -> Dict[str, List[str]]:
    """Extract targets and their raw prerequisite tokens.

    Targets starting with ``.`` (special targets such as ``.PHONY``) or
    ``_`` (internal by convention) are not reported. When a target is
    defined more than once the last definition wins.

    Args:
        text: Makefile contents.

    Returns:
        Dict[str, List[str]]: Target name to prerequisite tokens, in order of
        first definition.
    """
    targets: Dict[str, List[str]] = {}
    for line in text.splitlines():
        match = TARGET_RE.match(line)
        if not match:
            continue
        name, rest = match.group(1), match.group(2)
        if name.startswith((".", "_")):
            continue
        if _is_assignment(rest):
            continue
        if rest.startswith(":"):
            # Double-colon rule.
            rest = rest[1:]
        targets[name] = filter_prerequisites(rest)
    return targets


def read_makefile(makefile_path: Path) -> Optional[str]:
    """Read a Makefile, returning None when it is absent or unreadable."""
    try:
        return Path(makefile_path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Cannot read %s: %s", makefile_path, exc)
        return None


def parse_makefile(makefile_path: Path) -> Dict[str, List[str]]:
    """Parse the Makefile at ``makefile_path``.

    An absent or unreadable file yields no targets rather than an error.
    """
    text = read_makefile(makefile_path)
    if text is None:
        return {}
    targets = parse_makefile_text(text)
    logger.debug("Parsed %d target(s) from %s", len(targets), makefile_path)
    return targets


def parse_file_rules(text: str) -> List[MakeRule]:
    """Scan every rule line, file rules included, for dependency evidence.

    Recipe lines (leading whitespace), comments, directives without a colon
    and variable assignments are skipped.
    """
    rules: List[MakeRule] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line or line[0].isspace() or line.startswith("#"):
            continue
        idx = line.find(":")
        if idx <= 0:
            continue
        head, rest = line[:idx].strip(), line[idx + 1:]
        if not head or "=" in head or _is_assignment(rest):
            continue
        if rest.startswith(":"):
            rest = rest[1:]
        prerequisites = filter_prerequisites(rest)
        if prerequisites:
            rules.append(MakeRule(targets=head, prerequisites=prerequisites, line=lineno))
    return rules


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def extract_include_flags(text: str) -> List[IncludeFlag]:
    """Collect ``-I`` include paths appearing anywhere in the Makefile.

    Flags whose path contains an unresolved variable (``$``) are ignored.
    Duplicates keep their first occurrence.
    """
    flags: List[IncludeFlag] = []
    seen = set()
    for match in INCLUDE_FLAG_RE.finditer(text):
        path = _unquote(match.group(1)).strip()
        if not path or "$" in path or path in seen:
            continue
        seen.add(path)
        lineno = text.count("\n", 0, match.start()) + 1
        flags.append(IncludeFlag(path=path, line=lineno))
    return flags


__all__ = [
    "IncludeFlag",
    "MakeRule",
    "extract_include_flags",
    "filter_prerequisites",
    "parse_file_rules",
    "parse_makefile",
    "parse_makefile_text",
    "read_makefile",
]
