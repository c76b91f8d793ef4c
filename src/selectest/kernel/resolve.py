"""Resolve the test targets a scheme (or one of its test plans) would run.

Resolution rules:
- The scheme is looked up by name across every project of the graph.
- With a test plan name, the plan whose file base name matches is used,
  whether or not it is the default plan.
- Without one, the scheme's explicit test targets are used; when the
  scheme defines test plans instead, the default plan is used.
- Targets flagged as skipped in the scheme are never candidates: they are
  not executed, so they can neither be skipped nor recorded as passing.
- Declaration order is preserved and duplicates are dropped, so skip
  arguments built from the result are deterministic.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..errors import SchemeNotFoundError, TargetNotFoundError, TestPlanNotFoundError
from .graph import Graph, GraphTarget, Scheme, TestableTarget
from .test_identifier import TestIdentifier


@dataclass(frozen=True)
class ResolvedTarget:
    """A candidate test target: identifier plus the identity used for hashing."""
    identifier: TestIdentifier
    graph_target: GraphTarget


@dataclass(frozen=True)
class Resolution:
    """Result of target resolution, in declaration order."""
    scheme: Scheme
    test_plan_name: Optional[str]
    targets: Tuple[ResolvedTarget, ...]

    @property
    def identifiers(self) -> List[TestIdentifier]:
        return [resolved.identifier for resolved in self.targets]


def find_scheme(graph: Graph, scheme_name: str) -> Scheme:
    """Return the first scheme named scheme_name, in project order.

    Raises:
        SchemeNotFoundError: if no project defines it
    """
    for scheme in graph.schemes():
        if scheme.name == scheme_name:
            return scheme
    raise SchemeNotFoundError(scheme_name)


def candidate_testables(scheme: Scheme, test_plan_name: Optional[str] = None) -> Sequence[TestableTarget]:
    """Testable targets of the scheme.

    A named plan wins. Otherwise the explicit target list is used when it is
    non-empty, else the default plan.
    """
    test_action = scheme.test_action
    if test_plan_name is not None:
        for plan in (test_action.test_plans if test_action else None) or ():
            if plan.name == test_plan_name:
                return plan.test_targets
        raise TestPlanNotFoundError(scheme.name, test_plan_name)

    if test_action is None:
        return ()
    if test_action.targets:
        return test_action.targets
    default_plan = test_action.default_test_plan()
    return default_plan.test_targets if default_plan is not None else ()


def resolve(graph: Graph, scheme_name: str, test_plan_name: Optional[str] = None) -> Resolution:
    """Resolve the ordered candidate test targets of a scheme.

    Raises:
        SchemeNotFoundError: if no project defines the scheme
        TestPlanNotFoundError: if test_plan_name matches none of the scheme's plans
        TargetNotFoundError: if a testable target references a target missing from the graph
    """
    scheme = find_scheme(graph, scheme_name)

    resolved: List[ResolvedTarget] = []
    seen = set()
    for testable in candidate_testables(scheme, test_plan_name):
        if testable.skipped:
            continue
        reference = testable.target
        if reference in seen:
            continue
        seen.add(reference)
        graph_target = graph.graph_target(reference)
        if graph_target is None:
            raise TargetNotFoundError(str(reference.project_path), reference.name)
        resolved.append(
            ResolvedTarget(
                identifier=TestIdentifier(target=graph_target.target.name),
                graph_target=graph_target,
            )
        )

    return Resolution(scheme=scheme, test_plan_name=test_plan_name, targets=tuple(resolved))
