"""Tests for makegraph CLI entrypoints."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import makegraph.main as main
from makegraph.parsers.cpp import compiler as compiler_module

WORKSPACE = {
    "A/Makefile": "build: foo.o\nfoo.o: ../B/include/foo.h\n",
    "B/Makefile": "build:\nrun: build\n",
    "B/include/foo.h": "",
}


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main, "setup_logging", lambda *a, **k: None)


def test_main_dispatches_scan_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Verify that `main` parses args and dispatches scan_command."""
    captured: dict[str, object] = {}

    def fake_scan_command(args) -> int:
        captured["args"] = args
        return 0

    monkeypatch.setattr(main, "scan_command", fake_scan_command)

    exit_code = main.main(["--compiler", "manual", "scan", str(tmp_path), "-o", "g.json"])

    assert exit_code == 0
    parsed = captured["args"]
    assert parsed.workspace == str(tmp_path)
    assert parsed.output == "g.json"
    assert parsed.compiler == "manual"


def test_main_requires_command(capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure missing subcommands make the CLI print help and fail."""
    assert main.main([]) == 1
    assert "makegraph" in capsys.readouterr().out


def test_scan_writes_graph(make_workspace) -> None:
    root = make_workspace(WORKSPACE)
    output = root / "out" / "graph.json"

    exit_code = main.main(["--compiler", "manual", "scan", str(root), "-o", str(output)])

    assert exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert [(e["source"], e["target"]) for e in data["edges"]] == [("A", "B")]


def test_nodes_and_deps_commands(make_workspace) -> None:
    root = make_workspace(WORKSPACE)
    nodes_out = root / "nodes.json"
    deps_out = root / "deps.json"

    assert main.main(["nodes", str(root), "-o", str(nodes_out)]) == 0
    assert main.main(["--compiler", "manual", "deps", str(root), "-o", str(deps_out)]) == 0

    nodes = json.loads(nodes_out.read_text(encoding="utf-8"))
    assert set(nodes) == {"A", "B"}
    assert list(nodes["B"]["targets"]) == ["build", "run", "serve"]

    deps = json.loads(deps_out.read_text(encoding="utf-8"))
    assert deps == [
        {"source": "A", "target": "B", "type": "static", "sourceFile": "A/Makefile", "line": 2}
    ]


def test_missing_compiler_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, make_workspace
) -> None:
    """A configuration error is reported as exit code 1."""
    root = make_workspace(WORKSPACE)
    monkeypatch.setattr(compiler_module.shutil, "which", lambda name: None)

    assert main.main(["--compiler", "clang", "deps", str(root), "-o", str(root / "d.json")]) == 1
    assert not (root / "d.json").exists()


def test_cycles_command(make_workspace) -> None:
    root = make_workspace(
        {
            "A/Makefile": "x.o: ../B/x.h\n",
            "B/Makefile": "y.o: ../A/y.h\n",
        }
    )
    args = ["--compiler", "manual", "cycles", str(root)]

    assert main.main(args) == 0
    assert main.main(args + ["--fail-on-cycle"]) == 1


def test_config_file_option(make_workspace) -> None:
    """-c accepts inline configuration."""
    root = make_workspace(WORKSPACE)
    output = root / "nodes.json"

    assert main.main(["-c", '{"targetName": "mk"}', "nodes", str(root), "-o", str(output)]) == 0

    nodes = json.loads(output.read_text(encoding="utf-8"))
    assert "mk:build" in nodes["A"]["targets"]
