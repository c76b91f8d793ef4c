"""Graph models for the build description of a single invocation.

The graph is produced once per run by a graph mapper and never mutated.
Models are frozen and use tuples for sequences so projects and targets
can be used as dictionary keys (the hash mapping is keyed on GraphTarget).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TargetReference(BaseModel):
    """Identifies a target by the path of its project and its name."""
    project_path: Path
    name: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class Target(BaseModel):
    """A buildable target. Names are unique within a project."""
    name: str
    product: str = "unit_tests"  # app, framework, unit_tests, ui_tests, ...
    sources: Tuple[str, ...] = ()  # project-relative paths
    dependencies: Tuple[TargetReference, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")


class TestableTarget(BaseModel):
    """A target listed in a scheme's test action or in a test plan."""
    __test__ = False

    target: TargetReference
    skipped: bool = False
    parallelizable: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


class TestPlan(BaseModel):
    """An ordered set of testable targets stored in an .xctestplan file."""
    __test__ = False

    path: Path
    test_targets: Tuple[TestableTarget, ...] = ()
    is_default: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def name(self) -> str:
        """Plan name as passed to -testPlan (base name without extension)."""
        return PurePath(self.path).stem


class TestAction(BaseModel):
    """Test configuration of a scheme: explicit targets or test plans."""
    __test__ = False

    targets: Tuple[TestableTarget, ...] = ()
    test_plans: Optional[Tuple[TestPlan, ...]] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("test_plans")
    @classmethod
    def validate_test_plans(cls, v: Optional[Tuple[TestPlan, ...]]) -> Optional[Tuple[TestPlan, ...]]:
        """At most one plan may be flagged as the default."""
        if v is None:
            return v
        defaults = [plan.name for plan in v if plan.is_default]
        if len(defaults) > 1:
            raise ValueError(f"Only one default test plan is allowed, got: {sorted(defaults)}")
        return v

    def default_test_plan(self) -> Optional[TestPlan]:
        """Return the plan flagged as default, if any."""
        for plan in self.test_plans or ():
            if plan.is_default:
                return plan
        return None


class Scheme(BaseModel):
    """A named build/test configuration."""
    name: str
    shared: bool = True
    test_action: Optional[TestAction] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class Project(BaseModel):
    """A project: its path, targets and schemes."""
    path: Path
    name: str = ""
    targets: Tuple[Target, ...] = ()
    schemes: Tuple[Scheme, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("targets")
    @classmethod
    def validate_targets(cls, v: Tuple[Target, ...]) -> Tuple[Target, ...]:
        """Target names must be unique within a project."""
        seen = set()
        duplicates = set()
        for target in v:
            if target.name in seen:
                duplicates.add(target.name)
            seen.add(target.name)
        if duplicates:
            raise ValueError(f"Duplicate target names not allowed: {sorted(duplicates)}")
        return v

    def target_named(self, name: str) -> Optional[Target]:
        for target in self.targets:
            if target.name == name:
                return target
        return None


class Graph(BaseModel):
    """Immutable snapshot of the build description: project path -> Project."""
    name: str = "Workspace"
    path: Path = Path(".")
    projects: Dict[Path, Project] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def schemes(self) -> Iterator[Scheme]:
        """Iterate over every scheme of every project, in project order."""
        for project in self.projects.values():
            yield from project.schemes

    def graph_target(self, reference: TargetReference) -> Optional["GraphTarget"]:
        """Resolve a target reference to its GraphTarget, or None."""
        project = self.projects.get(reference.project_path)
        if project is None:
            return None
        target = project.target_named(reference.name)
        if target is None:
            return None
        return GraphTarget(path=reference.project_path, target=target, project=project)

    def graph_targets(self) -> Iterator["GraphTarget"]:
        for path, project in self.projects.items():
            for target in project.targets:
                yield GraphTarget(path=path, target=target, project=project)


@dataclass(frozen=True)
class GraphTarget:
    """Resolved target identity. Hash mappings are keyed on this, not on the
    bare target name, because two projects may define same-named targets."""
    path: Path
    target: Target
    project: Project

    @property
    def reference(self) -> TargetReference:
        return TargetReference(project_path=self.path, name=self.target.name)
