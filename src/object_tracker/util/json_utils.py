from __future__ import annotations

import dataclasses
import json as _json
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any
from uuid import UUID


def _to_jsonable(obj: Any) -> Any:
    """`default` hook for json.dumps covering the types tracked objects usually hold.

    Returns a shallow conversion so the json module keeps walking nested values
    and its circular reference check stays in effect.

    Raises:
        TypeError: If the value has no JSON conversion
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    if isinstance(obj, (Decimal, Fraction, UUID, complex)):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return obj.hex()
    if isinstance(obj, (set, frozenset)):
        # Set iteration order is arbitrary
        return sorted(obj, key=repr)
    if isinstance(obj, Mapping):
        return dict(obj)
    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class json:
    """Typed wrapper around the standard json module."""

    @staticmethod
    def to_string(json_val: Any) -> str:
        """Convert a Python value to a JSON string.

        Mapping key order is preserved, which keeps rendered change records in
        field order.

        Args:
            json_val: A JSON-compatible Python value

        Returns:
            The JSON string representation
        """
        if isinstance(json_val, Mapping) and not isinstance(json_val, dict):
            json_val = dict(json_val)
        return _json.dumps(json_val)

    @staticmethod
    def canonical(value: Any) -> str:
        """Render any tracked value as a canonical, comparable JSON string.

        Dict keys are sorted and sets are ordered, so equal structures render
        identically across runs. Dataclasses, enums, dates, decimals, UUIDs and
        plain objects (public attributes) are converted along the way.

        Args:
            value: The value to canonicalize

        Returns:
            The canonical JSON string

        Raises:
            TypeError: If some nested value has no JSON conversion
            ValueError: If the value contains a circular reference
        """
        return _json.dumps(value, default=_to_jsonable, sort_keys=True)
