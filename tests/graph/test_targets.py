"""Tests for target assembly and the graph schema."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from makegraph.graph.schema import (
    DependencyType,
    MakeInvocation,
    ProjectDependency,
    ProjectNode,
    TargetConfig,
    TargetMetadata,
    WatchInvocation,
)
from makegraph.graph.targets import (
    build_target_configs,
    create_targets_for_makefile,
    qualify_target_name,
)

PARSED = {
    "all": ["build", "test"],
    "build": ["main.o"],
    "test": ["build", "build"],
    "run": ["build"],
}

SERVE_COMMAND = (
    "nx watch --projects={projectName} --includeDependentProjects --initialRun"
    " -- nx run {projectName}:run"
)


def test_build_equivalent_targets_get_aggregate_dependency() -> None:
    """build/compile/all depend on ^build first, then on peer targets."""
    targets = build_target_configs("app", PARSED)

    assert targets["all"].depends_on == ["^build", "build", "test"]
    assert targets["build"].depends_on == ["^build"]
    assert targets["test"].depends_on == ["build"]
    assert targets["run"].depends_on == ["build"]


def test_file_prerequisites_are_not_dependencies() -> None:
    """Prerequisites that are not targets of the project are Make's business."""
    targets = build_target_configs("app", {"lib": ["lib.o", "../x/y.h"], "check": ["lib"]})

    assert targets["lib"].depends_on == []
    assert targets["check"].depends_on == ["lib"]


def test_self_prerequisite_is_ignored() -> None:
    targets = build_target_configs("app", {"build": ["build"]})

    assert targets["build"].depends_on == ["^build"]


def test_invocation_and_metadata() -> None:
    """Each target runs make with the project root as cwd."""
    target = build_target_configs("libs/core", {"test": []})["test"]

    assert isinstance(target.invocation, MakeInvocation)
    assert target.invocation.target == "test"
    assert target.invocation.cwd == "libs/core"
    assert target.metadata.technologies == ["make"]
    assert target.metadata.description == "Run make test"


def test_serve_generated_for_build_and_run() -> None:
    """build + run yields a synthetic serve target, last and without dependsOn."""
    targets = build_target_configs("app", PARSED)

    assert list(targets)[-1] == "serve"
    serve = targets["serve"]
    assert isinstance(serve.invocation, WatchInvocation)
    assert serve.invocation.command == SERVE_COMMAND
    assert serve.depends_on == []
    assert serve.metadata.help.command == "nx serve"


@pytest.mark.parametrize(
    "parsed",
    [{"build": []}, {"run": []}, {"compile": [], "test": []}],
)
def test_no_serve_without_build_and_run(parsed) -> None:
    assert "serve" not in build_target_configs("app", parsed)


def test_serve_replaces_makefile_serve() -> None:
    """A Makefile-defined serve is replaced by the synthetic one."""
    targets = build_target_configs("app", {"serve": ["build"], "compile": [], "run": []})

    assert list(targets) == ["compile", "run", "serve"]
    assert isinstance(targets["serve"].invocation, WatchInvocation)


def test_target_name_prefix() -> None:
    """The prefix applies to keys, peer references, ^build and serve."""
    targets = build_target_configs("app", PARSED, target_name="make")

    assert qualify_target_name("x", "make") == "make:x"
    assert list(targets) == ["make:all", "make:build", "make:test", "make:run", "make:serve"]
    assert targets["make:all"].depends_on == ["^make:build", "make:build", "make:test"]
    assert targets["make:all"].invocation.target == "all"
    assert targets["make:serve"].invocation.command.endswith("{projectName}:make:run")


def test_serialization_uses_orchestrator_names() -> None:
    """Models dump to camelCase keys."""
    target = build_target_configs("app", {"build": []})["build"]
    data = target.to_dict()

    assert data["dependsOn"] == ["^build"]
    assert data["invocation"] == {
        "kind": "make",
        "target": "build",
        "cwd": "app",
    }

    dep = ProjectDependency(source="a", target="b", source_file="a/main.c")
    assert dep.to_dict() == {
        "source": "a",
        "target": "b",
        "type": "static",
        "sourceFile": "a/main.c",
    }
    assert [member.value for member in DependencyType] == ["static"]


def test_create_targets_for_makefile(tmp_path: Path) -> None:
    makefile = tmp_path / "Makefile"
    makefile.write_text("build:\n\tcc main.c\nrun: build\n", encoding="utf-8")

    targets = create_targets_for_makefile(makefile, ".")

    assert list(targets) == ["build", "run", "serve"]
    assert create_targets_for_makefile(tmp_path / "missing" / "Makefile", "missing") == {}


def test_project_node_rejects_unknown_peer() -> None:
    """dependsOn may only name targets of the same project."""
    bad = TargetConfig(
        name="build",
        invocation=MakeInvocation(target="build", cwd="app"),
        depends_on=["missing"],
        metadata=TargetMetadata(description="Run make build"),
    )

    with pytest.raises(ValidationError):
        ProjectNode(root="app", name="app", makefile="app/Makefile", targets={"build": bad})


def test_self_dependency_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ProjectDependency(source="a", target="a", source_file="a/x.c")
