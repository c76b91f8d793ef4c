"""Tests for resolve.py and arguments.py."""

from pathlib import Path

import pytest

from conftest import app_project, make_testable
from selectest.errors import (
    SchemeNotFoundError,
    SchemeNotPassedError,
    TargetNotFoundError,
    TestPlanNotFoundError,
)
from selectest.kernel.arguments import argument_value, graph_path, scheme_name, selected_test_plan
from selectest.kernel.graph import Graph, Project, Scheme, Target, TestAction, TestPlan
from selectest.kernel.resolve import resolve
from selectest.kernel.test_identifier import TestIdentifier

ROOT = Path("/workspace/App")


def _plan(name: str, targets, is_default: bool = False) -> TestPlan:
    return TestPlan(
        path=ROOT / f"{name}.xctestplan",
        test_targets=tuple(make_testable(ROOT, target) for target in targets),
        is_default=is_default,
    )


def _project_with_plans(*plans, explicit=()) -> Project:
    return Project(
        path=ROOT,
        targets=tuple(Target(name=name) for name in ("AUnitTests", "BUnitTests", "CUnitTests")),
        schemes=(
            Scheme(
                name="App",
                test_action=TestAction(
                    targets=tuple(make_testable(ROOT, name) for name in explicit),
                    test_plans=tuple(plans) or None,
                ),
            ),
        ),
    )


def test_resolves_scheme_targets_in_declaration_order():
    names = ("CUnitTests", "AUnitTests", "BUnitTests")
    graph = Graph(projects={ROOT: app_project(ROOT, target_names=names)})

    resolution = resolve(graph, "App")

    assert resolution.identifiers == [TestIdentifier(name) for name in names]
    assert [resolved.graph_target.path for resolved in resolution.targets] == [ROOT] * 3


def test_test_plan_override_uses_named_plan():
    """A named non-default plan wins over the default plan."""
    project = _project_with_plans(
        _plan("Default", ["AUnitTests"], is_default=True),
        _plan("Nightly", ["BUnitTests", "CUnitTests"]),
    )
    graph = Graph(projects={ROOT: project})

    resolution = resolve(graph, "App", "Nightly")

    assert resolution.identifiers == [TestIdentifier("BUnitTests"), TestIdentifier("CUnitTests")]


def test_default_plan_used_without_test_plan_name():
    project = _project_with_plans(
        _plan("Nightly", ["BUnitTests"]),
        _plan("Default", ["AUnitTests", "CUnitTests"], is_default=True),
    )

    resolution = resolve(Graph(projects={ROOT: project}), "App")

    assert resolution.identifiers == [TestIdentifier("AUnitTests"), TestIdentifier("CUnitTests")]


def test_explicit_targets_used_when_no_plans():
    project = _project_with_plans(explicit=("BUnitTests",))

    resolution = resolve(Graph(projects={ROOT: project}), "App")

    assert resolution.identifiers == [TestIdentifier("BUnitTests")]


def test_explicit_targets_win_over_non_default_plans():
    project = _project_with_plans(_plan("Nightly", ["BUnitTests", "CUnitTests"]), explicit=("AUnitTests",))

    resolution = resolve(Graph(projects={ROOT: project}), "App")

    assert resolution.identifiers == [TestIdentifier("AUnitTests")]


def test_explicit_targets_win_over_default_plan():
    project = _project_with_plans(
        _plan("Default", ["BUnitTests"], is_default=True), explicit=("AUnitTests", "CUnitTests")
    )

    resolution = resolve(Graph(projects={ROOT: project}), "App")

    assert resolution.identifiers == [TestIdentifier("AUnitTests"), TestIdentifier("CUnitTests")]


def test_plans_without_default_and_no_explicit_targets_resolve_to_nothing():
    project = _project_with_plans(_plan("Nightly", ["BUnitTests"]))

    assert resolve(Graph(projects={ROOT: project}), "App").identifiers == []


def test_unknown_test_plan_fails():
    project = _project_with_plans(_plan("Default", ["AUnitTests"], is_default=True))

    with pytest.raises(TestPlanNotFoundError) as excinfo:
        resolve(Graph(projects={ROOT: project}), "App", "Missing")

    assert excinfo.value.test_plan_name == "Missing"


def test_missing_scheme_reports_requested_name():
    project = Project(path=ROOT, schemes=(Scheme(name="DifferentScheme"),))

    with pytest.raises(SchemeNotFoundError) as excinfo:
        resolve(Graph(projects={ROOT: project}), "MyScheme")

    assert excinfo.value.scheme_name == "MyScheme"
    assert "MyScheme" in str(excinfo.value)


def test_scheme_found_in_second_project():
    other = Path("/workspace/Other")
    graph = Graph(projects={
        other: Project(path=other, schemes=(Scheme(name="Other"),)),
        ROOT: app_project(ROOT),
    })

    resolution = resolve(graph, "App")

    assert resolution.scheme.name == "App"
    assert len(resolution.targets) == 2


def test_skipped_and_duplicate_testables_are_not_candidates():
    project = Project(
        path=ROOT,
        targets=(Target(name="AUnitTests"), Target(name="BUnitTests")),
        schemes=(
            Scheme(
                name="App",
                test_action=TestAction(targets=(
                    make_testable(ROOT, "AUnitTests"),
                    make_testable(ROOT, "BUnitTests", skipped=True),
                    make_testable(ROOT, "AUnitTests"),
                )),
            ),
        ),
    )

    resolution = resolve(Graph(projects={ROOT: project}), "App")

    assert resolution.identifiers == [TestIdentifier("AUnitTests")]


def test_reference_to_unknown_target_fails():
    project = Project(
        path=ROOT,
        targets=(Target(name="AUnitTests"),),
        schemes=(Scheme(name="App", test_action=TestAction(targets=(make_testable(ROOT, "Ghost"),))),),
    )

    with pytest.raises(TargetNotFoundError) as excinfo:
        resolve(Graph(projects={ROOT: project}), "App")

    assert excinfo.value.target_name == "Ghost"


def test_scheme_argument_parsing():
    assert scheme_name(["test", "-scheme", "App"]) == "App"
    assert selected_test_plan(["test", "-scheme", "App", "-testPlan", "Nightly"]) == "Nightly"
    assert selected_test_plan(["test", "-scheme", "App"]) is None
    assert argument_value(["-destination", "platform=iOS Simulator"], "-destination") == "platform=iOS Simulator"


@pytest.mark.parametrize("arguments", [
    ["test"],
    ["test", "-scheme"],
    ["test", "-scheme", "-testPlan", "Nightly"],
])
def test_scheme_not_passed(arguments):
    with pytest.raises(SchemeNotPassedError):
        scheme_name(arguments)


def test_graph_path_prefers_workspace_then_project(tmp_path):
    assert graph_path(["-project", "App.xcodeproj", "-workspace", "App.xcworkspace"], tmp_path) == (
        tmp_path / "App.xcworkspace"
    )
    assert graph_path(["-project", "/abs/App.xcodeproj"], tmp_path) == Path("/abs/App.xcodeproj")
    assert graph_path(["test"], tmp_path) == tmp_path
