"""End-to-end tests for the dependency-building pass."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from makegraph.config.schema import MakeGraphConfig
from makegraph.graph.schema import ProjectRef
from makegraph.parsers.base import ConfigurationError, ToolchainUnavailableError
from makegraph.parsers.cpp import compiler as compiler_module
from makegraph.runtime.api import build_nodes, scan_workspace
from makegraph.runtime.context import CreateDependenciesContext
from makegraph.runtime.dependencies import build_strategies, create_dependencies

MANUAL = MakeGraphConfig(dependency_compiler="manual")

WORKSPACE = {
    "A/Makefile": "build: foo.o\nfoo.o: ../B/include/foo.h\n\tcc -c foo.c\n",
    "A/foo.c": '#include "local.h"\n',
    "B/Makefile": "build:\n\tcc -c b.c\nrun: build\n",
    "B/include/foo.h": "",
    "C/Makefile": "all:\n",
    "C/main.c": '#include "../B/include/foo.h"\n#include "../C/self.h"\n',
}


def _edges(dependencies):
    return [(d.source, d.target, d.source_file, d.line) for d in dependencies]


def _context(root: Path, changed=None) -> CreateDependenciesContext:
    return CreateDependenciesContext.from_nodes(root, build_nodes(root, MANUAL), changed)


def test_manual_mode_edges(make_workspace) -> None:
    """Makefile file rules and source includes both produce edges."""
    root = make_workspace(WORKSPACE)

    dependencies = create_dependencies(MANUAL, _context(root))

    assert _edges(dependencies) == [
        ("A", "B", "A/Makefile", 2),
        ("C", "B", "C/main.c", 1),
    ]
    assert all(d.source != d.target for d in dependencies)


def test_dependency_pass_is_idempotent(make_workspace) -> None:
    root = make_workspace(WORKSPACE)

    first = create_dependencies(MANUAL, _context(root))
    second = create_dependencies(MANUAL, _context(root))

    assert [d.to_dict() for d in first] == [d.to_dict() for d in second]


def test_incremental_mode_visits_changed_projects_only(make_workspace) -> None:
    """Only changed projects are sources; targets still span the full set."""
    root = make_workspace(WORKSPACE)

    dependencies = create_dependencies(MANUAL, _context(root, changed=["C", "unknown"]))

    assert _edges(dependencies) == [("C", "B", "C/main.c", 1)]


def test_missing_project_directory_contributes_nothing(tmp_path: Path) -> None:
    """A project known to the host but gone from disk is skipped quietly."""
    context = CreateDependenciesContext(
        workspace_root=tmp_path,
        projects={"gone": ProjectRef(name="gone", root="gone")},
    )

    assert create_dependencies(MANUAL, context) == []


def test_missing_compiler_aborts_pass(monkeypatch: pytest.MonkeyPatch, make_workspace) -> None:
    """An explicitly selected but absent compiler is a configuration error."""
    root = make_workspace(WORKSPACE)
    monkeypatch.setattr(compiler_module.shutil, "which", lambda name: None)

    with pytest.raises(ToolchainUnavailableError) as excinfo:
        create_dependencies(MakeGraphConfig(dependency_compiler="clang"), _context(root))

    assert isinstance(excinfo.value, ConfigurationError)
    # Manual mode under the same absence still works.
    assert create_dependencies(MANUAL, _context(root))


def test_compiler_mode_resolves_through_include_flags(
    monkeypatch: pytest.MonkeyPatch, make_workspace
) -> None:
    """-I../B/include plus #include "foo.h" yields A -> B via the compiler."""
    root = make_workspace(
        {
            "A/Makefile": "CFLAGS=-I../B/include\nbuild:\n\tgcc $(CFLAGS) main.c\n",
            "A/main.c": '#include "foo.h"\n',
            "B/Makefile": "build:\n",
            "B/include/foo.h": "",
        }
    )
    monkeypatch.setattr(compiler_module.shutil, "which", lambda name: f"/usr/bin/{name}")

    def _run(cmd, **kwargs):
        if "--version" in cmd:
            return subprocess.CompletedProcess(cmd, 0, stdout="gcc 13", stderr="")
        assert "-I../B/include" in cmd
        return subprocess.CompletedProcess(
            cmd, 0, stdout="dummy: main.c ../B/include/foo.h\n", stderr=""
        )

    monkeypatch.setattr(compiler_module.subprocess, "run", _run)
    options = MakeGraphConfig(dependency_compiler="gcc")
    context = CreateDependenciesContext.from_nodes(root, build_nodes(root, options))

    dependencies = create_dependencies(options, context)

    # The include scan runs first, so the source file is the recorded evidence.
    assert _edges(dependencies) == [("A", "B", "A/main.c", None)]


def test_strategy_order() -> None:
    strategies = build_strategies(MANUAL)

    assert [s.NAME for s in strategies] == ["includes", "makefile"]


def test_build_targets_depend_on_dependency_builds(make_workspace) -> None:
    """build gains ^build whether or not the project has dependencies."""
    root = make_workspace(WORKSPACE)

    graph = scan_workspace(root, MANUAL)

    a = graph.get_project("A")
    b = graph.get_project("B")
    assert a.targets["build"].depends_on == ["^build"]
    assert b.targets["build"].depends_on == ["^build"]
    assert "serve" in b.targets
    assert "serve" not in a.targets
    assert graph.dependencies_of("A") == ["B"]
    assert graph.dependencies_of("B") == []
