from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class ChangeRecord:
    """Before and after values of the fields that differ from the baseline.

    Both mappings share the same keys, in field order, and are read-only. An
    empty record means nothing changed.
    """

    before: Mapping[str, str] = field(default_factory=dict)
    after: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only copies
        object.__setattr__(self, "before", MappingProxyType(dict(self.before)))
        object.__setattr__(self, "after", MappingProxyType(dict(self.after)))

    @property
    def fields(self) -> tuple[str, ...]:
        """Names of the changed fields."""
        return tuple(self.before)

    def __bool__(self) -> bool:
        return bool(self.before)

    def __len__(self) -> int:
        return len(self.before)

    def render(self, encoder: Callable[[Mapping[str, str]], str]) -> tuple[str, str]:
        """Render `before` and `after` as exported text.

        Returns:
            (before_text, after_text)
        """
        return encoder(self.before), encoder(self.after)


EMPTY_CHANGES = ChangeRecord()
