"""Makefile detector for discovering projects."""

import logging
from typing import List

from makegraph.parsers.base import BaseDetector

logger = logging.getLogger("makegraph.parsers.make.detector")

MAKEFILE_GLOB = "**/Makefile"


class MakefileDetector(BaseDetector):
    """Detector for Makefiles; each one defines a project at its directory."""

    NAME = "makefile"

    def detect(self) -> List[str]:
        """Detect all Makefiles in the workspace.

        Returns:
            List of workspace-relative Makefile paths, sorted.
        """
        detected = self.scan_workspace()
        for makefile in detected:
            logger.debug("Detected Makefile: %s", makefile)
        logger.info("MakefileDetector found %d Makefile(s)", len(detected))
        return detected
