"""Field classification: which fields of a type are tracked, and how.

Every tracked type gets an ordered tuple of FieldDescriptors, built once and
cached. Descriptors come from an explicit `register_fields()` call when there
is one, otherwise they are derived from the type's declarations:

- dataclass fields, or public class annotations for plain classes
- public properties (computed state is observable state too)

A field is a leaf when its declared type is a scalar the runtime already
knows how to print (str, numbers, dates, enums, UUIDs, ...), or a class that
declares the leaf capability. Everything else, collections included, is
structured and gets canonicalized by the serializer before comparison.

Usage:
    @dataclass
    class Person:
        id: int
        last: str
        tags: list[str]

    describe(Person)
    # (FieldDescriptor('id', LEAF), FieldDescriptor('last', LEAF),
    #  FieldDescriptor('tags', STRUCTURED))
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import inspect
import sys
import types
import typing
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from fractions import Fraction
from typing import Annotated, Any, ClassVar, Literal, Union, get_args, get_origin
from uuid import UUID

from object_tracker.fields.FieldDescriptor import FieldDescriptor, FieldKind

LEAF_ATTRIBUTE = "__tracker_leaf__"
"""Class attribute a type sets to True to be compared as a leaf."""

_LEAF_TYPES: tuple[type, ...] = (
    str,
    int,
    float,
    complex,
    bool,
    bytes,
    Decimal,
    Fraction,
    datetime,
    date,
    time,
    timedelta,
    UUID,
    type(None),
)

_registered_leaves: set[type] = set()
_registered_fields: dict[type, tuple[FieldDescriptor, ...]] = {}


class _Unresolved:
    """Stands in for an annotation that can't be evaluated (e.g. a local class)."""


def register_leaf(cls: type) -> type:
    """Mark a type as a leaf so fields declared with it compare via `str()`.

    Can be used as a class decorator.
    """
    _registered_leaves.add(cls)
    describe.cache_clear()
    return cls


def register_fields(cls: type, *fields: FieldDescriptor) -> None:
    """Replace derived descriptors of `cls` with an explicit list.

    Raises:
        ValueError: If two descriptors share a name
    """
    names = [f.name for f in fields]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        raise ValueError(f"Duplicate field names for {cls.__name__}: {sorted(duplicates)}")
    _registered_fields[cls] = tuple(fields)
    describe.cache_clear()


def unregister(cls: type) -> None:
    """Drop any explicit registration (leaf or fields) for `cls`."""
    _registered_leaves.discard(cls)
    _registered_fields.pop(cls, None)
    describe.cache_clear()


def is_leaf_type(tp: Any) -> bool:
    """Decide from a declared type whether values compare as leaves."""
    if tp is None:
        return True

    origin = get_origin(tp)
    if origin is Annotated:
        return is_leaf_type(get_args(tp)[0])
    if origin is Literal:
        return True
    if origin is Union or origin is types.UnionType:
        # Optional[X] is a leaf when X is
        return all(is_leaf_type(arg) for arg in get_args(tp))
    if origin is not None:
        # Parameterized generics: list[int], dict[str, X], ...
        return False

    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:  # typing.NewType
        return is_leaf_type(supertype)

    if not isinstance(tp, type):
        return False
    if tp in _registered_leaves or getattr(tp, LEAF_ATTRIBUTE, False) is True:
        return True
    if issubclass(tp, enum.Enum):
        return True
    if issubclass(tp, (str, bytes)):
        return True
    if issubclass(tp, Iterable):
        return False
    return issubclass(tp, _LEAF_TYPES)


def _classify(tp: Any) -> FieldKind:
    return FieldKind.LEAF if is_leaf_type(tp) else FieldKind.STRUCTURED


def _resolve(annotation: Any, owner: type) -> Any:
    """Resolve a single string annotation in the namespace of the class that declared it."""
    if not isinstance(annotation, str):
        return annotation

    def holder() -> None: ...

    holder.__annotations__ = {"return": annotation}
    module = sys.modules.get(owner.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    try:
        return typing.get_type_hints(holder, globalns=globalns, localns=dict(vars(owner)))["return"]
    except (NameError, AttributeError, TypeError, SyntaxError):
        return _Unresolved


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, AttributeError, TypeError):
        # Some annotation references a name that isn't importable at module level.
        # Resolve each one on its own so the rest still classify precisely.
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, annotation in inspect.get_annotations(klass).items():
                hints[name] = _resolve(annotation, klass)
        return hints


def _is_class_var(tp: Any) -> bool:
    return tp is ClassVar or get_origin(tp) is ClassVar


def _declared_fields(cls: type) -> list[FieldDescriptor]:
    hints = _type_hints(cls)

    if dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
    else:
        names = []
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name in inspect.get_annotations(klass):
                if name not in names:
                    names.append(name)

    return [
        FieldDescriptor(name, _classify(hints.get(name, _Unresolved)))
        for name in names
        if not name.startswith("_") and not _is_class_var(hints.get(name))
    ]


def _property_fields(cls: type, taken: set[str]) -> list[FieldDescriptor]:
    result: list[FieldDescriptor] = []
    seen: set[str] = set(taken)
    for klass in reversed(cls.__mro__):
        for name, member in vars(klass).items():
            if name.startswith("_") or name in seen or not isinstance(member, property):
                continue
            seen.add(name)
            try:
                returns = typing.get_type_hints(member.fget).get("return", _Unresolved)
            except (NameError, AttributeError, TypeError):
                returns = _Unresolved
            result.append(FieldDescriptor(name, _classify(returns)))

    # A subclass may shadow an inherited property with a plain attribute
    return [f for f in result if isinstance(inspect.getattr_static(cls, f.name, None), property)]


@functools.cache
def describe(cls: type) -> tuple[FieldDescriptor, ...]:
    """Ordered descriptors of every trackable field of `cls`.

    Computed once per type. Explicit registrations win over derivation.
    """
    if cls in _registered_fields:
        return _registered_fields[cls]
    declared = _declared_fields(cls)
    properties = _property_fields(cls, {f.name for f in declared})
    return tuple(declared + properties)


def select_fields(
    cls: type, inclusions: Iterable[str] = ()
) -> tuple[FieldDescriptor, ...]:
    """Descriptors of `cls` narrowed by an inclusion filter.

    Args:
        cls: The tracked type
        inclusions: Field names to keep. Empty keeps every field. Names that
            don't match a field are ignored.

    Returns:
        The kept descriptors, in declaration order
    """
    wanted = frozenset(inclusions)
    fields = describe(cls)
    if not wanted:
        return fields
    return tuple(f for f in fields if f.name in wanted)


def structured_names(fields: Iterable[FieldDescriptor]) -> frozenset[str]:
    """Names of the structured fields among `fields`."""
    return frozenset(f.name for f in fields if f.is_structured)
