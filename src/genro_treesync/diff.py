# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Structural diff between flattened snapshots, and change application.

watch() compares two entry lists by dotted path and returns Change
records. apply_changes() replays them on a nested value;
invert_changes() computes the list that undoes them.

Example:
    >>> old = flatten({'user': {'name': 'John'}})
    >>> new = flatten({'user': {'name': 'Jane', 'age': 30}})
    >>> [(c.type.value, c.path) for c in watch(old, new)]
    [('modified', 'user.name'), ('added', 'user.age')]
"""

from __future__ import annotations

import json
from collections.abc import Mapping, MutableMapping
from copy import deepcopy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable

from .access import MISSING, child_of, get_in, resolve_step, set_in
from .entry import UNDEFINED, Entry, sequence_flags
from .exceptions import InvalidArgumentError
from .path import Path, is_index, split_path


class ChangeType(str, Enum):
    """Kind of structural delta."""

    ADDED = 'added'
    REMOVED = 'removed'
    MODIFIED = 'modified'


@dataclass
class Change:
    """One structural delta between two snapshots.

    Attributes:
        type: added, removed or modified.
        path: Dotted path of the changed node.
        value: New value of an added node.
        old_value: Previous value (removed, modified).
        new_value: Current value (modified).
        steps: Structural path when known; preferred over path when applying.
        parent_kinds: Kind of the container each step addresses, when known.
    """

    type: ChangeType
    path: str
    value: Any = UNDEFINED
    old_value: Any = UNDEFINED
    new_value: Any = UNDEFINED
    steps: Path | None = field(default=None, compare=False)
    parent_kinds: tuple[str, ...] | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self.type = ChangeType(self.type)
        except ValueError:
            raise InvalidArgumentError(f"Unknown change type: {self.type!r}") from None
        if not isinstance(self.path, str) or not self.path:
            raise InvalidArgumentError(f"change path must be a non-empty string, not {self.path!r}")
        if self.steps is not None:
            self.steps = tuple(self.steps)
        if self.parent_kinds is not None:
            self.parent_kinds = tuple(self.parent_kinds)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Change:
        """Build a Change from a plain dict.

        Accepts both snake_case and camelCase value keys.
        """
        if 'type' not in data or 'path' not in data:
            raise InvalidArgumentError(f"change needs 'type' and 'path': {data!r}")
        return cls(
            type=data['type'],
            path=data['path'],
            value=data.get('value', UNDEFINED),
            old_value=data.get('old_value', data.get('oldValue', UNDEFINED)),
            new_value=data.get('new_value', data.get('newValue', UNDEFINED)),
            steps=data.get('steps'),
            parent_kinds=data.get('parent_kinds'),
        )

    def as_dict(self) -> dict[str, Any]:
        """Return the change as a dict, omitting absent values."""
        result: dict[str, Any] = {'type': self.type.value, 'path': self.path}
        for name in ('value', 'old_value', 'new_value'):
            current = getattr(self, name)
            if current is not UNDEFINED:
                result[name] = current
        return result

    def inverted(self) -> Change:
        """Return the change that undoes this one."""
        if self.type is ChangeType.ADDED:
            return Change(
                ChangeType.REMOVED, self.path,
                steps=self.steps, parent_kinds=self.parent_kinds,
            )
        if self.type is ChangeType.REMOVED:
            return Change(
                ChangeType.ADDED, self.path, value=self.old_value,
                steps=self.steps, parent_kinds=self.parent_kinds,
            )
        return Change(
            ChangeType.MODIFIED,
            self.path,
            old_value=self.new_value,
            new_value=self.old_value,
            steps=self.steps,
            parent_kinds=self.parent_kinds,
        )


@dataclass(frozen=True)
class DiffOptions:
    """Comparison rules for watch().

    Attributes:
        deep_compare: Compare canonical JSON serializations.
        strict_types: Without deep_compare, require same type and value.
            Otherwise a numeric string equals the number it spells.
    """

    deep_compare: bool = False
    strict_types: bool = False


def resolve_options(options: DiffOptions | Mapping | None, **kwargs: Any) -> DiffOptions:
    """Combine an options object or dict with keyword overrides."""
    if options is None:
        options = DiffOptions()
    elif isinstance(options, Mapping):
        options = DiffOptions(**options)
    return replace(options, **kwargs) if kwargs else options


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=repr)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float))


def _to_number(text: str) -> float | None:
    text = text.strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return None


def _loose_equal(old: Any, new: Any) -> bool:
    """Equality with string-to-number coercion."""
    if old is new or old == new:
        return True
    if (old is None or old is UNDEFINED) and (new is None or new is UNDEFINED):
        return True
    if isinstance(old, str) and _is_number(new):
        return _to_number(old) == new
    if isinstance(new, str) and _is_number(old):
        return _to_number(new) == old
    return False


def _strict_equal(old: Any, new: Any) -> bool:
    return old is new or (type(old) is type(new) and old == new)


def values_differ(old: Any, new: Any, options: DiffOptions) -> bool:
    """True if old and new count as different under options."""
    if options.deep_compare:
        return _canonical(old) != _canonical(new)
    if options.strict_types:
        return not _strict_equal(old, new)
    return not _loose_equal(old, new)


def _project(entries: Iterable[Entry]) -> dict[str, Entry]:
    """Map dot paths to entries; the last entry for a path wins."""
    return {entry.dot_path: entry for entry in entries}


def watch(
    old_entries: Iterable[Entry] = (),
    new_entries: Iterable[Entry] = (),
    options: DiffOptions | Mapping | None = None,
    **kwargs: Any,
) -> list[Change]:
    """Compare two flattened snapshots.

    Args:
        old_entries: The earlier snapshot.
        new_entries: The later snapshot.
        options: DiffOptions, or a dict of its fields.
        **kwargs: Field overrides (deep_compare, strict_types).

    Returns:
        Changes for paths of old_entries in order, then for paths only
        found in new_entries, in order.
    """
    opts = resolve_options(options, **kwargs)
    old_map = _project(old_entries)
    new_map = _project(new_entries)
    changes: list[Change] = []

    for path, old in old_map.items():
        new = new_map.get(path)
        if new is None:
            changes.append(Change(
                ChangeType.REMOVED, path, old_value=old.value,
                steps=old.path, parent_kinds=old.parent_kinds,
            ))
        elif values_differ(old.value, new.value, opts):
            changes.append(Change(
                ChangeType.MODIFIED, path,
                old_value=old.value, new_value=new.value,
                steps=new.path, parent_kinds=new.parent_kinds,
            ))

    for path, new in new_map.items():
        if path not in old_map:
            changes.append(Change(
                ChangeType.ADDED, path, value=new.value,
                steps=new.path, parent_kinds=new.parent_kinds,
            ))

    return changes


diff = watch


def as_change(change: Change | Mapping[str, Any]) -> Change:
    """Coerce a dict into a Change; Change instances pass through."""
    if isinstance(change, Change):
        return change
    if isinstance(change, Mapping):
        return Change.from_dict(change)
    raise InvalidArgumentError(f"not a change: {change!r}")


def invert_changes(changes: Iterable[Change | Mapping[str, Any]]) -> list[Change]:
    """Return the inverse of each change, in the same order.

    added becomes removed, removed becomes added with the old value,
    modified swaps old and new values.
    """
    return [as_change(change).inverted() for change in changes]


def _steps_of(change: Change) -> Path:
    if change.steps is not None:
        if not change.steps:
            raise InvalidArgumentError(f"Empty path in change {change!r}")
        return change.steps
    return tuple(split_path(change.path))


def apply_changes(
    target: Any = None,
    changes: Iterable[Change | Mapping[str, Any]] = (),
) -> Any:
    """Apply changes to target in place.

    removed deletes the node, and is a no-op when the node is missing;
    list removals run last, highest index first, so they do not shift
    each other. added and modified store value, or new_value when value
    is absent, creating intermediate containers as needed.

    Args:
        target: Nested value to mutate. None starts from an empty dict.
        changes: Change instances or dicts in Change.as_dict() shape.

    Returns:
        The mutated target.

    Raises:
        InvalidArgumentError: For unknown change types or empty paths.
            All changes are checked before the first one is applied.
    """
    if target is None:
        target = {}
    planned = [(change, _steps_of(change)) for change in map(as_change, changes)]
    list_removals: dict[tuple[int, int], tuple[list, int]] = {}

    for change, steps in planned:
        if change.type is ChangeType.REMOVED:
            parent = get_in(target, steps[:-1], MISSING)
            if parent is MISSING:
                continue
            step = resolve_step(parent, steps[-1])
            if child_of(parent, step) is MISSING:
                continue
            if isinstance(parent, list) and is_index(step):
                list_removals[(id(parent), step)] = (parent, step)
            elif isinstance(parent, MutableMapping):
                del parent[step]
            else:
                raise InvalidArgumentError(
                    f"cannot remove {change.path!r} from {type(parent).__name__} value"
                )
            continue

        value = change.value if change.value is not UNDEFINED else change.new_value
        set_in(
            target, steps, None if value is UNDEFINED else value,
            sequence_flags(steps, change.parent_kinds),
        )

    for parent, step in sorted(list_removals.values(), key=lambda item: -item[1]):
        del parent[step]

    return target


def from_diff(base: Any = None, diff: Iterable[Change | Mapping[str, Any]] = ()) -> Any:
    """Apply diff to a deep copy of base, leaving base untouched."""
    return apply_changes(deepcopy(base) if base is not None else {}, diff)
