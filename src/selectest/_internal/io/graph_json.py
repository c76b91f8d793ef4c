"""Load and validate a graph.json build description."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from selectest.errors import GraphMappingError
from selectest.kernel.graph import Graph

GRAPH_FILENAME = "graph.json"
XCODE_CONTAINER_SUFFIXES = (".xcworkspace", ".xcodeproj")


def graph_file(path: Path) -> Path:
    """Locate graph.json: the path itself, graph.json next to an Xcode
    workspace or project, or graph.json inside a directory."""
    if path.suffix in XCODE_CONTAINER_SUFFIXES:
        return path.parent / GRAPH_FILENAME
    if path.is_dir():
        return path / GRAPH_FILENAME
    return path


def parse_graph(data: Dict[str, Any], base_path: Path) -> Graph:
    """Validate a graph dict; relative project paths are resolved against base_path.

    Raises:
        GraphMappingError: on any structural problem
    """
    if not isinstance(data, dict):
        raise GraphMappingError("graph.json must contain an object")
    projects = data.get("projects")
    if not isinstance(projects, dict):
        raise GraphMappingError("graph.json missing projects object")

    resolved_projects: Dict[str, Any] = {}
    for key, project in projects.items():
        project_path = _absolute(base_path, key)
        if not isinstance(project, dict):
            raise GraphMappingError(f"project {key} must be an object")
        project = dict(project)
        project["path"] = str(_absolute(base_path, project.get("path", key)))
        resolved_projects[str(project_path)] = _resolve_references(project, base_path)

    payload = dict(data)
    payload["projects"] = resolved_projects
    payload["path"] = str(_absolute(base_path, data.get("path", ".")))
    try:
        return Graph(**payload)
    except ValidationError as e:
        raise GraphMappingError(f"Invalid graph: {e}") from e


def _absolute(base_path: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else (base_path / path)


def _resolve_reference(reference: Any, base_path: Path) -> Any:
    if isinstance(reference, dict) and "project_path" in reference:
        reference = dict(reference)
        reference["project_path"] = str(_absolute(base_path, reference["project_path"]))
    return reference


def _resolve_testables(testables: Any, base_path: Path) -> Any:
    if not isinstance(testables, list):
        return testables
    resolved = []
    for testable in testables:
        if isinstance(testable, dict) and "target" in testable:
            testable = dict(testable)
            testable["target"] = _resolve_reference(testable["target"], base_path)
        resolved.append(testable)
    return resolved


def _resolve_references(project: Dict[str, Any], base_path: Path) -> Dict[str, Any]:
    """Make every TargetReference.project_path absolute so references match graph keys."""
    targets = []
    for target in project.get("targets", []):
        if isinstance(target, dict):
            target = dict(target)
            target["dependencies"] = [
                _resolve_reference(dependency, base_path)
                for dependency in target.get("dependencies", [])
            ]
        targets.append(target)
    project["targets"] = targets

    schemes = []
    for scheme in project.get("schemes", []):
        test_action = scheme.get("test_action") if isinstance(scheme, dict) else None
        if isinstance(test_action, dict):
            scheme = dict(scheme)
            test_action = dict(test_action)
            test_action["targets"] = _resolve_testables(test_action.get("targets", []), base_path)
            if isinstance(test_action.get("test_plans"), list):
                plans = []
                for plan in test_action["test_plans"]:
                    if isinstance(plan, dict):
                        plan = dict(plan)
                        plan["path"] = str(_absolute(base_path, plan.get("path", "")))
                        plan["test_targets"] = _resolve_testables(plan.get("test_targets", []), base_path)
                    plans.append(plan)
                test_action["test_plans"] = plans
            scheme["test_action"] = test_action
        schemes.append(scheme)
    project["schemes"] = schemes
    return project


class JsonGraphMapper:
    """Graph mapper reading graph.json; relative paths are relative to the file.

    When graph_path is set it is used instead of the path passed to map().
    """

    def __init__(self, graph_path: Optional[Path] = None):
        self.graph_path = graph_path

    def map(self, path: Path) -> Graph:
        path = graph_file(Path(self.graph_path if self.graph_path is not None else path))
        if not path.exists():
            raise GraphMappingError(f"Missing {GRAPH_FILENAME} at {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise GraphMappingError(f"{path} is not valid JSON: {e}") from e
        return parse_graph(data, path.parent.resolve())
