"""TrackedCollection - field changes and membership changes for a list of objects.

Each element that goes through the collection (the initial batch, and anything
passed to `add()`) gets its own Trackable. Membership changes are computed
separately by comparing the caller's list against a copy frozen at
construction, so they show up no matter how the list was modified.

The two views are deliberately independent:
- Appending straight to the caller's list makes the item show up in
  `items_added()`, but it has no Trackable, so its field edits are never
  reported.
- Removing straight from the caller's list leaves its Trackable in place, so
  the removed item keeps appearing in `tracked_changes` if its fields differ
  from the baseline.

Usage:
    people = [Person(1, "Ryan", "Kueter"), Person(2, "John", "Doe")]
    tracked = TrackedCollection(people)

    people[0].last_name = "Silly"
    tracked.add(Person(3, "Jane", "Roe"))

    if tracked.has_changes():
        for change in tracked.tracked_changes:
            audit_log.write(change.item.id, change.before, change.after)
        audit_log.write_all(tracked.items_added_json())
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from object_tracker.config import DEFAULT_CONFIG, TrackerConfig
from object_tracker.observability.logging import get_logger
from object_tracker.track.ChangeRecord import ChangeRecord
from object_tracker.track.Trackable import Trackable
from object_tracker.util.equality import Equality

logger = get_logger("tracked_collection")


@dataclass(frozen=True)
class ElementChange[T]:
    """A changed element together with its before/after text.

    Attributes:
        item: The tracked element itself, for correlation by the caller.
        before: JSON text of the changed fields' baseline values.
        after: JSON text of the changed fields' current values.
        changes: The same change as mappings.
    """

    item: T
    before: str
    after: str
    changes: ChangeRecord


def _difference[T](left: Sequence[T], right: Sequence[T], equality: Equality[T]) -> list[T]:
    """Distinct elements of `left` with no equal element in `right`, in `left` order."""
    result: list[T] = []
    for item in left:
        if any(equality(item, other) for other in right):
            continue
        if any(equality(item, kept) for kept in result):
            continue
        result.append(item)
    return result


class TrackedCollection[T]:
    """Tracks a list of objects: per-element field changes plus items added/removed.

    Attributes:
        tracked_changes: Element changes found by the last `has_changes()` call,
            in tracking order.
    """

    tracked_changes: list[ElementChange[T]]
    _original: tuple[T, ...]
    _current: list[T]
    _trackables: list[Trackable[T]]
    _inclusions: tuple[str, ...]
    _config: TrackerConfig
    _lock: threading.Lock

    def __init__(
        self,
        items: list[T],
        *inclusions: str,
        config: TrackerConfig = DEFAULT_CONFIG,
    ) -> None:
        """Start tracking `items` and every element currently in it.

        Args:
            items: The caller's list. It is kept by reference: later changes the
                caller makes to it are what `items_added()` / `items_removed()`
                report.
            *inclusions: Names of the fields to track on every element. If none
                are given, every classified field is tracked.
            config: Serializer, encoder, equality and worker count to use

        Raises:
            Whatever the serializer raises while capturing baselines
        """
        self._config = config
        self._inclusions = tuple(dict.fromkeys(inclusions))
        self._current = items
        self._original = tuple(items)
        self._trackables = [self._track(item) for item in items]
        self._lock = threading.Lock()
        self.tracked_changes = []
        logger.debug("tracked_collection.created", items=len(self._original))

    def _track(self, item: T) -> Trackable[T]:
        return Trackable(item, *self._inclusions, config=self._config)

    @property
    def original(self) -> tuple[T, ...]:
        """The elements as they were when tracking began."""
        return self._original

    @property
    def current(self) -> list[T]:
        """The caller's list, as it is now."""
        return self._current

    @property
    def trackables(self) -> tuple[Trackable[T], ...]:
        """The per-element trackers, in tracking order."""
        return tuple(self._trackables)

    @property
    def inclusions(self) -> tuple[str, ...]:
        """The inclusion filter shared by every element tracker."""
        return self._inclusions

    def has_changes(self, max_workers: int | None = None) -> bool:
        """Determine whether any element changed or any item was added/removed.

        Rebuilds `tracked_changes` from scratch. It is emptied first, so it stays
        empty if an element diff raises.

        Args:
            max_workers: Threads used to diff the elements. Defaults to the
                config's `max_workers`; 1 diffs inline.

        Returns:
            True if any tracked element changed, or items were added or removed

        Raises:
            Whatever the serializer raises for an element's current state
        """
        workers = max_workers if max_workers is not None else self._config.max_workers
        self.tracked_changes = []
        found: list[tuple[int, ElementChange[T]]] = []

        def diff_element(index: int, trackable: Trackable[T]) -> None:
            if not trackable.has_changes():
                return
            change = ElementChange(
                item=trackable.value,
                before=trackable.before,
                after=trackable.after,
                changes=trackable.changes,
            )
            with self._lock:
                found.append((index, change))

        trackables = list(self._trackables)
        if workers > 1 and len(trackables) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(diff_element, index, trackable)
                    for index, trackable in enumerate(trackables)
                ]
                for future in futures:
                    future.result()
        else:
            for index, trackable in enumerate(trackables):
                diff_element(index, trackable)

        found.sort(key=lambda pair: pair[0])
        self.tracked_changes = [change for _, change in found]

        added = self.items_added()
        removed = self.items_removed()
        logger.debug(
            "tracked_collection.diff",
            changed=len(self.tracked_changes),
            added=len(added),
            removed=len(removed),
        )
        return bool(self.tracked_changes or added or removed)

    def items_added(self) -> list[T]:
        """Items in the current list that weren't there when tracking began."""
        return _difference(self._current, self._original, self._config.equality)

    def items_removed(self) -> list[T]:
        """Items present when tracking began that are no longer in the current list."""
        return _difference(self._original, self._current, self._config.equality)

    def items_added_json(self) -> list[str]:
        """`items_added()` with each item rendered by the serializer."""
        return [self._config.serializer(item) for item in self.items_added()]

    def items_removed_json(self) -> list[str]:
        """`items_removed()` with each item rendered by the serializer."""
        return [self._config.serializer(item) for item in self.items_removed()]

    def add(self, item: T) -> None:
        """Append `item` to the current list and start tracking its fields.

        Raises:
            Whatever the serializer raises while capturing the item's baseline
        """
        trackable = self._track(item)
        self._current.append(item)
        self._trackables.append(trackable)
        logger.debug("tracked_collection.add", type=type(item).__name__)

    def remove(self, item: T) -> None:
        """Remove `item` from the current list and stop tracking it.

        The first equal element is removed from the list; an item that isn't in
        the list is ignored. Every tracker whose value is equal to `item` is
        dropped.
        """
        equality = self._config.equality
        for index, existing in enumerate(self._current):
            if equality(existing, item):
                del self._current[index]
                break
        before = len(self._trackables)
        self._trackables = [t for t in self._trackables if not equality(t.value, item)]
        logger.debug(
            "tracked_collection.remove",
            type=type(item).__name__,
            untracked=before - len(self._trackables),
        )

    def __len__(self) -> int:
        return len(self._current)

    def __iter__(self) -> Iterator[T]:
        return iter(self._current)
