"""Error taxonomy for selectest.

Every failure aborts the run. Cache backend and build tool failures are
surfaced as-is; nothing is downgraded to a cache miss.
"""

from typing import Optional


class SelectestError(Exception):
    """Base exception for all selectest errors."""
    pass


class XcodeBuildServiceError(SelectestError):
    """Base exception for failures of the xcodebuild dispatch flow."""
    pass


class SchemeNotPassedError(XcodeBuildServiceError):
    """Raised when the passthrough arguments carry no -scheme designation."""
    def __init__(self):
        super().__init__(
            "No scheme was passed. Pass one with '-scheme <name>' so the tests to run can be resolved."
        )


class SchemeNotFoundError(XcodeBuildServiceError):
    """Raised when no project in the graph defines the requested scheme."""
    def __init__(self, scheme_name: str):
        self.scheme_name = scheme_name
        super().__init__(
            f"Couldn't find the scheme {scheme_name}. Make sure it's defined in one of the graph's projects."
        )


class TestPlanNotFoundError(XcodeBuildServiceError):
    """Raised when -testPlan names a plan the scheme does not define."""
    __test__ = False

    def __init__(self, scheme_name: str, test_plan_name: str):
        self.scheme_name = scheme_name
        self.test_plan_name = test_plan_name
        super().__init__(
            f"Couldn't find the test plan {test_plan_name} in the scheme {scheme_name}."
        )


class TargetNotFoundError(XcodeBuildServiceError):
    """Raised when a testable target reference points at a target missing from the graph."""
    def __init__(self, project_path: str, target_name: str):
        self.project_path = project_path
        self.target_name = target_name
        super().__init__(
            f"The target {target_name} referenced from {project_path} is not part of the graph."
        )


class MissingHashError(XcodeBuildServiceError):
    """Raised when the hash mapping lacks an entry for a resolved test target."""
    def __init__(self, target_names: list[str]):
        self.target_names = sorted(target_names)
        super().__init__(
            f"No selective testing hash was computed for: {', '.join(self.target_names)}"
        )


class InvalidTestIdentifierError(SelectestError, ValueError):
    """Raised when a string cannot be parsed as a test identifier."""
    def __init__(self, value: str, reason: Optional[str] = None):
        self.value = value
        msg = f"Invalid test identifier '{value}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class GraphMappingError(SelectestError, ValueError):
    """Raised when a graph description cannot be loaded or validated."""
    pass


class HashingError(SelectestError):
    """Raised when target hashes cannot be computed."""
    pass


class CacheStorageError(SelectestError):
    """Raised when the cache backend fails to fetch or store entries."""
    pass
