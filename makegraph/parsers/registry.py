"""Scanner registry mapping ``dependency_compiler`` modes to include scanners.

Each mode (``gcc``, ``clang``, ``manual``) registers the scanner class that
implements it here.
"""

import logging
from typing import Dict, List, Optional, Type

from makegraph.parsers.base import BaseIncludeScanner

logger = logging.getLogger("makegraph.parsers.registry")


class ScannerRegistry:
    """Global registry for include scanner implementations."""

    _instance: Optional["ScannerRegistry"] = None

    def __init__(self) -> None:
        """Initialize the registry."""
        # mode -> IncludeScanner class
        self._scanners: Dict[str, Type[BaseIncludeScanner]] = {}

    @classmethod
    def get_instance(cls) -> "ScannerRegistry":
        """Get singleton instance.

        Returns:
            ScannerRegistry: Global registry instance.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register_scanner(self, mode: str, scanner_class: Type[BaseIncludeScanner]) -> None:
        """Register the scanner implementing a dependency detection mode.

        Args:
            mode: Mode identifier (e.g., 'gcc', 'manual').
            scanner_class: Scanner class to register.
        """
        if mode in self._scanners:
            logger.warning(
                "Overwriting existing scanner for mode '%s': %s -> %s",
                mode,
                self._scanners[mode].__name__,
                scanner_class.__name__,
            )
        self._scanners[mode] = scanner_class
        logger.debug("Registered scanner for '%s': %s", mode, scanner_class.__name__)

    def get_scanner(self, mode: str) -> Type[BaseIncludeScanner]:
        """Get the scanner class for a mode.

        Raises:
            KeyError: If no scanner is registered for ``mode``.
        """
        try:
            return self._scanners[mode]
        except KeyError:
            raise KeyError(
                f"No include scanner registered for '{mode}'; "
                f"available: {', '.join(self.list_modes()) or 'none'}"
            ) from None

    def list_modes(self) -> List[str]:
        """List registered modes."""
        return sorted(self._scanners)


def register_scanner(mode: str, scanner_class: Type[BaseIncludeScanner]) -> None:
    """Register a scanner on the global registry."""
    ScannerRegistry.get_instance().register_scanner(mode, scanner_class)


__all__ = ["ScannerRegistry", "register_scanner"]
