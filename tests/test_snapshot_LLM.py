"""Tests for the snapshot utility."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

import pytest

from object_tracker.fields.FieldDescriptor import FieldDescriptor, FieldKind
from object_tracker.snapshot import MISSING, canonical_string, snapshot


@dataclass
class Order:
    number: int
    placed: date
    note: str | None
    lines: list[str]


def fields() -> tuple[FieldDescriptor, ...]:
    return (
        FieldDescriptor("number"),
        FieldDescriptor("placed"),
        FieldDescriptor("note"),
        FieldDescriptor("lines", FieldKind.STRUCTURED),
    )


def tagged(value: Any) -> str:
    return f"S({len(value)})"


class TestSnapshot:
    """Tests for snapshot()."""

    def test_leaf_fields_use_str(self) -> None:
        """Leaf values are recorded with str()."""
        order = Order(7, date(2024, 1, 31), "rush", [])
        result = snapshot(order, fields(), tagged)

        assert result["number"] == "7"
        assert result["placed"] == "2024-01-31"
        assert result["note"] == "rush"

    def test_structured_fields_use_serializer(self) -> None:
        """Structured values go through the serializer."""
        order = Order(7, date(2024, 1, 31), None, ["a", "b"])
        assert snapshot(order, fields(), tagged)["lines"] == "S(2)"

    def test_none_uses_missing_sentinel(self) -> None:
        """None is recorded as the empty-string sentinel, for leaves and structures."""
        order = Order(7, date(2024, 1, 31), None, None)  # type: ignore[arg-type]
        result = snapshot(order, fields(), tagged)

        assert result["note"] == MISSING == ""
        assert result["lines"] == MISSING

    def test_keys_follow_descriptor_order(self) -> None:
        """One key per descriptor, in descriptor order."""
        order = Order(7, date(2024, 1, 31), None, [])
        result = snapshot(order, reversed(fields()), tagged)

        assert list(result) == ["lines", "note", "placed", "number"]

    def test_serializer_errors_propagate(self) -> None:
        """Serializer failures aren't caught."""

        def broken(_: Any) -> str:
            raise TypeError("unsupported")

        order = Order(7, date(2024, 1, 31), None, ["a"])
        with pytest.raises(TypeError, match="unsupported"):
            snapshot(order, fields(), broken)


class TestCanonicalString:
    """Tests for canonical_string()."""

    def test_leaf_skips_serializer(self) -> None:
        """Leaf values never reach the serializer."""
        assert canonical_string(FieldDescriptor("n"), 3.5, tagged) == "3.5"

    def test_structured_calls_serializer(self) -> None:
        """Structured values are serialized."""
        descriptor = FieldDescriptor("n", FieldKind.STRUCTURED)
        assert canonical_string(descriptor, [1, 2, 3], tagged) == "S(3)"
