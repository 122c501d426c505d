"""Parsers package.

Makefile parsing and the include scanners are registered from here.
"""

import logging

from makegraph.parsers.cpp.code_parser import LexicalIncludeScanner
from makegraph.parsers.cpp.compiler import (
    MANUAL_MODE,
    SUPPORTED_COMPILERS,
    CompilerIncludeScanner,
)
from makegraph.parsers.registry import ScannerRegistry, register_scanner

logger = logging.getLogger("makegraph.parsers")

register_scanner(MANUAL_MODE, LexicalIncludeScanner)
for _compiler in SUPPORTED_COMPILERS:
    register_scanner(_compiler, CompilerIncludeScanner)

logger.debug(
    "Include scanners registered: %s",
    ", ".join(ScannerRegistry.get_instance().list_modes()),
)

__all__ = [
    "CompilerIncludeScanner",
    "LexicalIncludeScanner",
    "ScannerRegistry",
    "register_scanner",
]
