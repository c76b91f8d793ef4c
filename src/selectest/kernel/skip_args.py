"""Compose xcodebuild arguments that skip cached test identifiers."""

from typing import Iterable, List, Sequence

from .test_identifier import TestIdentifier

SKIP_TESTING_PREFIX = "-skip-testing:"


def skip_testing_argument(identifier: TestIdentifier) -> str:
    return f"{SKIP_TESTING_PREFIX}{identifier}"


def compose_skip_arguments(
    arguments: Sequence[str], skippable: Iterable[TestIdentifier]
) -> List[str]:
    """Append one -skip-testing directive per identifier after the original arguments.

    Original tokens are kept verbatim and in order. Directives already
    present are not repeated, so composing twice equals composing once.
    An empty skip set returns a copy of the original arguments.
    """
    composed = list(arguments)
    present = set(composed)
    for identifier in skippable:
        token = skip_testing_argument(identifier)
        if token in present:
            continue
        present.add(token)
        composed.append(token)
    return composed
