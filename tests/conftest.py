"""Shared fixtures for makegraph tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest


@pytest.fixture
def make_workspace(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Return a helper writing ``{relative_path: content}`` under tmp_path."""

    def _write(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write
