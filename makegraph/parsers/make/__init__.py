"""Makefile parsing, detection and Makefile-evidence strategy."""

from .detector import MAKEFILE_GLOB, MakefileDetector
from .makefile import (
    IncludeFlag,
    MakeRule,
    extract_include_flags,
    parse_file_rules,
    parse_makefile,
    parse_makefile_text,
)
from .strategy import MakefileReferenceStrategy

__all__ = [
    "IncludeFlag",
    "MAKEFILE_GLOB",
    "MakeRule",
    "MakefileDetector",
    "MakefileReferenceStrategy",
    "extract_include_flags",
    "parse_file_rules",
    "parse_makefile",
    "parse_makefile_text",
]
