"""Trackable - snapshot an object now, report which fields changed later.

The baseline snapshot is taken in the constructor and never replaced, so every
`has_changes()` call compares the object's current state against the state it
had when tracking began. Calling it repeatedly without mutating the object
gives the same answer every time.

Usage:
    person = Person(id=1, last="Kueter")
    tracked = Trackable(person)

    person.last = "Silly"

    if tracked.has_changes():
        audit_log.write(tracked.before, tracked.after)
        # {"last": "Kueter"} {"last": "Silly"}
"""

from __future__ import annotations

from collections.abc import Iterable

from object_tracker.config import DEFAULT_CONFIG, TrackerConfig
from object_tracker.fields.classify import select_fields, structured_names
from object_tracker.fields.FieldDescriptor import FieldDescriptor
from object_tracker.observability.logging import get_logger
from object_tracker.snapshot import Snapshot, snapshot
from object_tracker.track.ChangeRecord import EMPTY_CHANGES, ChangeRecord

logger = get_logger("trackable")


class Trackable[T]:
    """Tracks field-level changes of a single object.

    The tracked object is only read, never modified. Field classification is
    resolved once, at construction, from the object's type.

    Attributes:
        value: The object being tracked.
        id: Free-form tag for correlating this tracker in the caller's records.
        before: JSON text of the changed fields' baseline values, or "" if the
            last `has_changes()` found nothing.
        after: JSON text of the changed fields' current values, or "".
    """

    value: T
    id: int
    before: str
    after: str
    _config: TrackerConfig
    _inclusions: tuple[str, ...]
    _fields: tuple[FieldDescriptor, ...]
    _structured: frozenset[str]
    _baseline: Snapshot
    _changes: ChangeRecord

    def __init__(
        self,
        value: T,
        *inclusions: str,
        config: TrackerConfig = DEFAULT_CONFIG,
        id: int = 0,
    ) -> None:
        """Start tracking `value`, capturing its baseline immediately.

        Args:
            value: The object to track
            *inclusions: Names of the fields to track. If none are given, every
                classified field is tracked.
            config: Serializer and encoder to use
            id: Optional tag for the caller's bookkeeping

        Raises:
            Whatever the serializer raises while capturing structured fields
        """
        self.value = value
        self.id = id
        self.before = ""
        self.after = ""
        self._config = config
        self._inclusions = tuple(dict.fromkeys(inclusions))
        self._fields = select_fields(type(value), self._inclusions)
        self._structured = structured_names(self._fields)
        self._changes = EMPTY_CHANGES
        self._baseline = self._capture()
        logger.debug(
            "trackable.baseline",
            type=type(value).__name__,
            fields=len(self._baseline),
        )

    @property
    def inclusions(self) -> tuple[str, ...]:
        """The inclusion filter, without duplicates. Empty means every field."""
        return self._inclusions

    @property
    def fields(self) -> tuple[str, ...]:
        """Names of the tracked fields, in snapshot order."""
        return tuple(self._baseline)

    @property
    def structured_fields(self) -> frozenset[str]:
        """Names of the tracked fields compared through the serializer."""
        return self._structured

    @property
    def baseline(self) -> Snapshot:
        """A copy of the snapshot taken when tracking began."""
        return dict(self._baseline)

    @property
    def changes(self) -> ChangeRecord:
        """The change record produced by the last `has_changes()` call."""
        return self._changes

    def _capture(self) -> Snapshot:
        return snapshot(self.value, self._fields, self._config.serializer)

    def has_changes(self) -> bool:
        """Determine whether any tracked field differs from the baseline.

        Replaces `changes`, `before` and `after` with the result of this call.

        Returns:
            True if at least one field changed, False otherwise

        Raises:
            Whatever the serializer raises for the current state
        """
        self._changes = EMPTY_CHANGES
        self.before = ""
        self.after = ""

        current = self._capture()
        before: dict[str, str] = {}
        after: dict[str, str] = {}
        for name, original in self._baseline.items():
            latest = current[name]
            if original != latest:
                before[name] = original
                after[name] = latest

        if not before:
            logger.debug("trackable.diff", type=type(self.value).__name__, changed=[])
            return False

        self._changes = ChangeRecord(before=before, after=after)
        self.before, self.after = self._changes.render(self._config.encoder)
        logger.debug(
            "trackable.diff",
            type=type(self.value).__name__,
            changed=list(before),
        )
        return True

    def __repr__(self) -> str:
        return f"Trackable({self.value!r}, fields={self.fields!r})"
