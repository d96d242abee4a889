"""Equality predicates for collection membership.

Added/removed detection in TrackedCollection is only as good as the equality
used to match elements, so the predicate is always explicit and pluggable.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from deepdiff import DeepDiff

type Equality[T] = Callable[[T, T], bool]


def value_equality(a: Any, b: Any) -> bool:
    """Match elements with their own `__eq__`.

    Types that don't define `__eq__` fall back to identity.
    """
    return a == b


def identity_equality(a: Any, b: Any) -> bool:
    """Match only the exact same object."""
    return a is b


def structural_equality(a: Any, b: Any) -> bool:
    """Match elements whose attribute trees are equal.

    Useful for plain classes without a meaningful `__eq__`, where value
    equality would degenerate to identity.
    """
    if a is b:
        return True
    return not DeepDiff(a, b)


EQUALITIES: dict[str, Equality[Any]] = {
    "value": value_equality,
    "identity": identity_equality,
    "structural": structural_equality,
}
