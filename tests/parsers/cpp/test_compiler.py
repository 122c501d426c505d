"""Tests for the compiler-assisted include scanner.

No compiler is needed: ``shutil.which`` and ``subprocess.run`` are patched.
"""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import List

import pytest

from makegraph.parsers.base import ToolchainUnavailableError
from makegraph.parsers.cpp import compiler as compiler_module
from makegraph.parsers.cpp.compiler import (
    CompilerIncludeScanner,
    parse_dependency_output,
    resolve_compiler,
)


def _completed(cmd, returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


def test_parse_dependency_output_handles_continuations() -> None:
    """Backslash continuations and escaped spaces are understood."""
    output = "dummy: src/main.c \\\n ../B/include/foo.h \\\n my\\ header.h\n"

    assert parse_dependency_output(output) == [
        "src/main.c",
        "../B/include/foo.h",
        "my header.h",
    ]


def test_parse_dependency_output_without_rule() -> None:
    """Output without a colon yields nothing."""
    assert parse_dependency_output("") == []


def test_resolve_compiler_manual_needs_no_toolchain(monkeypatch: pytest.MonkeyPatch) -> None:
    """Manual mode never looks for a compiler."""

    def _fail(name):
        raise AssertionError("which() must not be called")

    monkeypatch.setattr(compiler_module.shutil, "which", _fail)

    assert resolve_compiler("manual") is None


def test_resolve_compiler_missing_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing compiler raises with remediation guidance."""
    monkeypatch.setattr(compiler_module.shutil, "which", lambda name: None)

    with pytest.raises(ToolchainUnavailableError) as excinfo:
        resolve_compiler("clang")

    assert excinfo.value.compiler == "clang"
    assert "manual" in str(excinfo.value)


def test_resolve_compiler_broken_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    """A compiler that fails --version is unavailable too."""
    monkeypatch.setattr(compiler_module.shutil, "which", lambda name: f"/usr/bin/{name}")

    def _run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(compiler_module.subprocess, "run", _run)

    with pytest.raises(ToolchainUnavailableError):
        resolve_compiler("gcc")


def test_resolve_compiler_available(monkeypatch: pytest.MonkeyPatch) -> None:
    """A working compiler is returned by name; gcc is the default."""
    monkeypatch.setattr(compiler_module.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(compiler_module.subprocess, "run", lambda cmd, **kw: _completed(cmd))

    assert resolve_compiler(None) == "gcc"
    assert resolve_compiler("clang") == "clang"


def test_resolve_compiler_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        resolve_compiler("tcc")


def test_build_command() -> None:
    """-I flags precede the source file."""
    scanner = CompilerIncludeScanner("gcc")

    assert scanner.build_command("src/main.c", ["../B/include"]) == [
        "gcc",
        "-MM",
        "-MT",
        "dummy",
        "-I../B/include",
        "src/main.c",
    ]


def test_dependencies_for_file_normalizes_paths(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Absolute headers become project-relative; the source itself is dropped."""
    project_dir = tmp_path / "A"
    project_dir.mkdir()
    absolute_header = project_dir / "inc" / "local.h"
    stdout = f"dummy: src/main.c ../B/include/foo.h {absolute_header}\n"
    monkeypatch.setattr(
        compiler_module.subprocess, "run", lambda cmd, **kw: _completed(cmd, stdout=stdout)
    )

    deps = CompilerIncludeScanner("gcc").dependencies_for_file("src/main.c", project_dir, [])

    assert deps == ["../B/include/foo.h", "inc/local.h"]


def test_dependencies_for_file_failure_yields_nothing(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Compile errors and timeouts degrade to zero dependencies."""
    scanner = CompilerIncludeScanner("gcc")

    monkeypatch.setattr(
        compiler_module.subprocess,
        "run",
        lambda cmd, **kw: _completed(cmd, returncode=1, stderr="main.c:1: error"),
    )
    assert scanner.dependencies_for_file("main.c", tmp_path, []) == []

    def _timeout(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout", 1))

    monkeypatch.setattr(compiler_module.subprocess, "run", _timeout)
    assert scanner.dependencies_for_file("main.c", tmp_path, []) == []


def test_scan_uses_makefile_include_flags(
    monkeypatch: pytest.MonkeyPatch, make_workspace
) -> None:
    """Each source file is compiled with the Makefile -I flags from the project dir."""
    root = make_workspace(
        {
            "A/Makefile": "CFLAGS = -I../B/include\nbuild:\n",
            "A/main.c": '#include "foo.h"\n',
            "A/other.c": "int x;\n",
            "A/util.h": "",
        }
    )
    calls: List[tuple] = []
    lock = threading.Lock()

    def _run(cmd, **kwargs):
        with lock:
            calls.append((tuple(cmd), Path(kwargs["cwd"])))
        if cmd[-1] == "main.c":
            return _completed(cmd, stdout="dummy: main.c ../B/include/foo.h\n")
        return _completed(cmd, stdout=f"dummy: {cmd[-1]}\n")

    monkeypatch.setattr(compiler_module.subprocess, "run", _run)

    edges = CompilerIncludeScanner("gcc", max_workers=2).scan(root / "A", "A")

    assert [(e.include_path, e.source_file) for e in edges] == [
        ("../B/include/foo.h", "A/main.c"),
    ]
    assert sorted(cmd[-1] for cmd, _ in calls) == ["main.c", "other.c"]
    assert all("-I../B/include" in cmd for cmd, _ in calls)
    assert all(cwd == root / "A" for _, cwd in calls)


def test_undecodable_compiler_output_only_skips_that_file(
    monkeypatch: pytest.MonkeyPatch, make_workspace
) -> None:
    """Non-UTF-8 diagnostics from one file leave the other files' headers intact."""
    root = make_workspace(
        {
            "A/Makefile": "build:\n",
            "A/bad.c": "",
            "A/good.c": "",
        }
    )

    def _run(cmd, **kwargs):
        if cmd[-1] == "bad.c":
            raw_out, raw_err, code = b"", b"bad.c:1: error: \xff\xfe\n", 1
        else:
            raw_out, raw_err, code = b"dummy: good.c ../B/foo.h\n", b"", 0
        # Decode the way subprocess.run would for the given keyword arguments.
        encoding = kwargs.get("encoding") or ("utf-8" if kwargs.get("text") else None)
        errors = kwargs.get("errors") or "strict"
        if encoding:
            raw_out = raw_out.decode(encoding, errors)
            raw_err = raw_err.decode(encoding, errors)
        return _completed(cmd, returncode=code, stdout=raw_out, stderr=raw_err)

    monkeypatch.setattr(compiler_module.subprocess, "run", _run)

    edges = CompilerIncludeScanner("gcc", max_workers=2).scan(root / "A", "A")

    assert [(e.include_path, e.source_file) for e in edges] == [("../B/foo.h", "A/good.c")]
