# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Flattened entry records and runtime kind tags."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

from .path import Path, Step, encode_path, is_index


class _Undefined:
    """Marker for an absent value, distinct from None."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'UNDEFINED'

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict) -> _Undefined:
        return self

    def __reduce__(self) -> str:
        return 'UNDEFINED'


UNDEFINED = _Undefined()


class _Hole:
    """Marker for a list slot that no entry fills."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'HOLE'

    def __copy__(self) -> _Hole:
        return self

    def __deepcopy__(self, memo: dict) -> _Hole:
        return self


HOLE = _Hole()

CONTAINER_KINDS = frozenset({'object', 'map', 'array', 'set'})
SEQUENCE_KINDS = frozenset({'array', 'set'})


def kind_of(value: Any) -> str:
    """Return the kind tag of a value.

    Example:
        >>> kind_of({'a': 1}), kind_of([1]), kind_of(3.5), kind_of(None)
        ('object', 'array', 'number', 'null')
    """
    if value is None:
        return 'null'
    if value is UNDEFINED:
        return 'undefined'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float, complex)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, (bytes, bytearray)):
        return 'bytes'
    if isinstance(value, dict):
        return 'object'
    if isinstance(value, Mapping):
        return 'map'
    if isinstance(value, (list, tuple)):
        return 'array'
    if isinstance(value, (set, frozenset)):
        return 'set'
    return type(value).__name__.lower()


def is_container(value: Any) -> bool:
    """True if flatten descends into value."""
    return kind_of(value) in CONTAINER_KINDS


def iter_children(value: Any):
    """Yield (step, child) pairs of a container in definition order.

    Sets get a synthetic 0-based index in enumeration order.
    """
    if isinstance(value, Mapping):
        yield from value.items()
    else:
        yield from enumerate(value)


def thaw(value: Any) -> Any:
    """Return a mutable deep copy: mappings become dicts, sequences and sets lists."""
    kind = kind_of(value)
    if kind in ('object', 'map'):
        return {key: thaw(child) for key, child in value.items()}
    if kind in ('array', 'set'):
        return [thaw(child) for child in value]
    return deepcopy(value)


def empty_shell(value: Any) -> dict | list:
    """Return an empty mutable container shaped like value."""
    return {} if isinstance(value, Mapping) else []


def sequence_flags(path: Path, parent_kinds: tuple[str, ...] | None = None) -> tuple[bool, ...]:
    """Tell, for each step of path, whether it addresses a sequence slot.

    parent_kinds holds the kind of the container each step was read
    from. Without it, int steps are taken as sequence indexes.
    """
    if parent_kinds is None or len(parent_kinds) != len(path):
        return tuple(is_index(step) for step in path)
    return tuple(kind in SEQUENCE_KINDS for kind in parent_kinds)


class Entry:
    """A flattened record pairing a structural path with a value.

    Each entry has:
    - path: Tuple of steps from the root
    - dot_path: The dotted encoding of path
    - key: The last step of path (None for the root)
    - value: The leaf value, or the sub-structure for container entries
    - kind: Runtime kind tag of value at capture time
    - parent_kinds: Kind tags of the containers each step was read from,
      or None when the entry was not produced by flatten()

    Example:
        >>> entry = Entry(('user', 'name'), 'John')
        >>> entry.dot_path
        'user.name'
        >>> entry.kind
        'string'
    """

    __slots__ = ('path', 'dot_path', 'value', 'kind', 'parent_kinds')

    def __init__(
        self,
        path: Path,
        value: Any = None,
        kind: str | None = None,
        dot_path: str | None = None,
        parent_kinds: tuple[str, ...] | None = None,
    ) -> None:
        """Initialize an Entry.

        Args:
            path: Structural path of the node.
            value: The node's value.
            kind: Kind tag. If None, computed from value.
            dot_path: Dotted path. If None, encoded from path.
            parent_kinds: Kind of the container addressed by each step.
                Lets rebuild() tell an int dict key from a list index.
        """
        self.path = tuple(path)
        self.value = value
        self.kind = kind if kind is not None else kind_of(value)
        self.dot_path = dot_path if dot_path is not None else encode_path(self.path)
        self.parent_kinds = tuple(parent_kinds) if parent_kinds is not None else None

    @property
    def key(self) -> Step | None:
        """The last step of the path."""
        return self.path[-1] if self.path else None

    @property
    def is_container(self) -> bool:
        """True if this entry was captured from a container node."""
        return self.kind in CONTAINER_KINDS

    def __repr__(self) -> str:
        return f"Entry({self.dot_path!r}, value={self.value!r}, kind={self.kind!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return (
            self.path == other.path
            and self.kind == other.kind
            and self.value == other.value
        )

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> Entry:
        """Return an independent deep copy of this entry."""
        return Entry(
            self.path, deepcopy(self.value), self.kind, self.dot_path, self.parent_kinds,
        )

    def as_dict(self) -> dict[str, Any]:
        """Return the entry as a plain dict."""
        return {
            'path': list(self.path),
            'dot_path': self.dot_path,
            'key': self.key,
            'value': self.value,
            'kind': self.kind,
        }
