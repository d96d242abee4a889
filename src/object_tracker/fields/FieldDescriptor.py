from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from glom import PathAccessError, glom


class FieldKind(enum.Enum):
    """How a field's value is turned into its comparable string."""

    LEAF = "leaf"
    """Compared through `str(value)`."""

    STRUCTURED = "structured"
    """Compared through the configured serializer."""


def _read_attribute(value: Any, name: str) -> Any:
    """Read `name` from `value`; a missing attribute or key reads as None.

    Anything else a getter raises propagates unchanged.
    """
    try:
        return glom(value, name)
    except PathAccessError as err:
        if isinstance(err.exc, (AttributeError, KeyError)):
            return None
        raise err.exc from err


@dataclass(frozen=True)
class FieldDescriptor:
    """One tracked field of a type.

    Attributes:
        name: Field name, used as the key in snapshots and change records.
        kind: Leaf or structured classification, fixed for the type.
        accessor: Reads the field from an instance. When unset the field is
            read as an attribute by name; a missing attribute reads as None.
    """

    name: str
    kind: FieldKind = FieldKind.LEAF
    accessor: Callable[[Any], Any] | None = field(default=None, compare=False, repr=False)

    @property
    def is_structured(self) -> bool:
        return self.kind is FieldKind.STRUCTURED

    def read(self, value: Any) -> Any:
        if self.accessor is None:
            return _read_attribute(value, self.name)
        return self.accessor(value)
