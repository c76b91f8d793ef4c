"""Inspection of passthrough xcodebuild arguments.

xcodebuild takes single-dash flags followed by their value
(``-scheme App``). Only the flags that drive test selection are read here;
the argument list itself is never modified.
"""

from pathlib import Path
from typing import Optional, Sequence

from ..errors import SchemeNotPassedError

SCHEME_FLAG = "-scheme"
TEST_PLAN_FLAG = "-testPlan"
WORKSPACE_FLAG = "-workspace"
PROJECT_FLAG = "-project"


def argument_value(arguments: Sequence[str], flag: str) -> Optional[str]:
    """Return the value following the first occurrence of flag, or None."""
    try:
        index = list(arguments).index(flag)
    except ValueError:
        return None
    if index + 1 >= len(arguments):
        return None
    value = arguments[index + 1]
    if not value or value.startswith("-"):
        return None
    return value


def scheme_name(arguments: Sequence[str]) -> str:
    """Return the -scheme value.

    Raises:
        SchemeNotPassedError: if the flag or its value is missing
    """
    name = argument_value(arguments, SCHEME_FLAG)
    if name is None:
        raise SchemeNotPassedError()
    return name


def selected_test_plan(arguments: Sequence[str]) -> Optional[str]:
    return argument_value(arguments, TEST_PLAN_FLAG)


def graph_path(arguments: Sequence[str], working_directory: Path) -> Path:
    """Path the graph should be mapped at.

    -workspace wins over -project; relative values are resolved against the
    working directory. Without either flag the working directory is used.
    """
    for flag in (WORKSPACE_FLAG, PROJECT_FLAG):
        value = argument_value(arguments, flag)
        if value is not None:
            path = Path(value)
            return path if path.is_absolute() else working_directory / path
    return working_directory
