"""Snapshot utility for capturing a value's observable state as strings.

A snapshot maps each tracked field name to a canonical string, so two
snapshots of the same value compare field by field with plain string
equality. Leaf fields use `str(value)`; structured fields go through the
serializer, which the caller can swap (see TrackerConfig).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from object_tracker.fields.FieldDescriptor import FieldDescriptor

type Snapshot = dict[str, str]

MISSING = ""
"""Canonical string recorded for a field whose value is None or absent."""


def canonical_string(
    descriptor: FieldDescriptor, value: Any, serializer: Callable[[Any], str]
) -> str:
    """Render one field value the way snapshots store it."""
    if value is None:
        return MISSING
    if descriptor.is_structured:
        return serializer(value)
    return str(value)


def snapshot(
    value: Any, fields: Iterable[FieldDescriptor], serializer: Callable[[Any], str]
) -> Snapshot:
    """Capture the current state of `value` for change detection.

    Args:
        value: The object to snapshot
        fields: Descriptors of the fields to capture, in output order
        serializer: Canonicalizes structured field values

    Returns:
        Field name -> canonical string, one entry per descriptor

    Raises:
        Whatever the serializer raises for a value it can't handle
    """
    return {
        descriptor.name: canonical_string(descriptor, descriptor.read(value), serializer)
        for descriptor in fields
    }
