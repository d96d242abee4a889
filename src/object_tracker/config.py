"""Pluggable collaborators shared by Trackable and TrackedCollection."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Self, dataclass_transform

from object_tracker.util.equality import EQUALITIES, Equality, value_equality
from object_tracker.util.json_utils import json

type Serializer = Callable[[Any], str]
"""Turns a structured field value (or a whole collection element) into a comparable string."""

type Encoder = Callable[[Mapping[str, str]], str]
"""Renders a before/after mapping as exported text."""


@dataclass_transform(frozen_default=True, kw_only_default=True)
def configclass[T](cls: type[T]) -> type[T]:
    return dataclass(frozen=True, kw_only=True)(cls)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"OBJECT_TRACKER_{key}", default)


@configclass
class TrackerConfig:
    """Collaborators used while snapshotting, diffing and exporting.

    Attributes:
        serializer: Canonicalizes structured field values. Also renders elements
            for `items_added_json()` / `items_removed_json()`.
        encoder: Renders the before/after mappings of a change record.
        equality: Matches collection elements for added/removed detection and
            for `TrackedCollection.remove()`.
        max_workers: Threads used to diff collection elements. 1 diffs inline.
    """

    serializer: Serializer = field(default=json.canonical)
    encoder: Encoder = field(default=json.to_string)
    equality: Equality[Any] = field(default=value_equality)
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    def with_options(self, **changes: Any) -> Self:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> Self:
        """Build a config from OBJECT_TRACKER_* environment variables.

        Raises:
            ValueError: If OBJECT_TRACKER_EQUALITY names an unknown predicate or
                OBJECT_TRACKER_MAX_WORKERS is not a positive integer
        """
        equality_name = _env("EQUALITY", "value").lower()
        if equality_name not in EQUALITIES:
            raise ValueError(
                f"Invalid equality: {equality_name}. Must be one of {set(EQUALITIES)}"
            )
        return cls(
            equality=EQUALITIES[equality_name],
            max_workers=int(_env("MAX_WORKERS", "1")),
        )


DEFAULT_CONFIG = TrackerConfig()
