# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Flatten nested values into entries and rebuild them.

flatten() walks a value depth-first in definition order, children before
siblings, yielding one Entry per terminal value. With
include_containers=True it also yields one Entry per container node,
ahead of that container's children, so intermediate nodes are
addressable. Each entry records the kind of the containers along its
path, so an int key of a dict is not mistaken for a list index.

rebuild() is the inverse: it creates intermediate containers along each
entry's structural path and assigns the value at the last step.

rebuild_sparse() keeps list slots that no entry fills as HOLE, and
flatten() skips them, so removing a list item from a working set reads
as a removal rather than as a shift of the following items.

Example:
    >>> entries = flatten({'user': {'name': 'John', 'tags': ['a', 'b']}})
    >>> [e.dot_path for e in entries]
    ['user.name', 'user.tags.0', 'user.tags.1']
    >>> rebuild(entries)
    {'user': {'name': 'John', 'tags': ['a', 'b']}}
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from .entry import (
    HOLE,
    Entry,
    empty_shell,
    is_container,
    iter_children,
    kind_of,
    sequence_flags,
    thaw,
)
from .exceptions import InvalidArgumentError
from .path import Path, Step, is_index


def iter_flatten(
    value: Any,
    prefix: Path = (),
    include_containers: bool = False,
) -> Iterator[Entry]:
    """Yield entries of value in definition order.

    Args:
        value: The nested container to walk. None yields nothing.
        prefix: Path prepended to every entry path.
        include_containers: If True, also yield container nodes.

    Yields:
        Entry instances. HOLE slots are skipped.

    Raises:
        InvalidArgumentError: If value is not a container (on first use).
    """
    if value is None:
        return
    if not is_container(value):
        raise InvalidArgumentError(f"cannot flatten a {kind_of(value)} root, a container is required")
    prefix = tuple(prefix)
    prefix_kinds = tuple('array' if is_index(step) else 'object' for step in prefix)

    def _walk_gen(container: Any, path: Path, kinds: tuple[str, ...]) -> Iterator[Entry]:
        kinds = kinds + (kind_of(container),)
        for step, child in iter_children(container):
            if child is HOLE:
                continue
            child_path = path + (step,)
            if is_container(child):
                if include_containers:
                    yield Entry(child_path, compact(child), parent_kinds=kinds)
                yield from _walk_gen(child, child_path, kinds)
            else:
                yield Entry(child_path, child, parent_kinds=kinds)

    yield from _walk_gen(value, prefix, prefix_kinds)


def flatten(
    value: Any = None,
    prefix: Path = (),
    include_containers: bool = False,
) -> list[Entry]:
    """Flatten value into an ordered list of entries.

    Args:
        value: The nested container. None flattens to no entries.
        prefix: Path prepended to every entry path.
        include_containers: If True, container nodes get entries too.

    Returns:
        List of Entry in depth-first definition order.

    Raises:
        InvalidArgumentError: If value is neither None nor a container.
    """
    return list(iter_flatten(value, prefix, include_containers))


def compact(value: Any) -> Any:
    """Drop HOLE slots from the lists in value.

    Values holding no HOLE are returned as they are.
    """
    if isinstance(value, list):
        items = [compact(item) for item in value if item is not HOLE]
        if len(items) == len(value) and all(a is b for a, b in zip(items, value)):
            return value
        return items
    if type(value) is dict:
        items = {key: compact(child) for key, child in value.items()}
        if all(items[key] is child for key, child in value.items()):
            return value
        return items
    return value


def _has_descendants(entries: list[Entry]) -> set[int]:
    """Return positions of container entries with other entries beneath them."""
    container_paths: dict[Path, list[int]] = {}
    for position, entry in enumerate(entries):
        if entry.is_container and entry.path:
            container_paths.setdefault(entry.path, []).append(position)
    if not container_paths:
        return set()

    covered: set[int] = set()
    for entry in entries:
        for depth in range(1, len(entry.path)):
            positions = container_paths.get(entry.path[:depth])
            if positions:
                covered.update(positions)
    return covered


def _child_slot(ref: dict | list, step: Step, sequence: bool) -> Any:
    """Return the container at ref[step], creating a list or dict if missing."""
    if isinstance(ref, list):
        _pad(ref, step)
        if not is_container(ref[step]):
            ref[step] = [] if sequence else {}
        return ref[step]
    current = ref.get(step)
    if not is_container(current):
        current = ref[step] = [] if sequence else {}
    return current


def _pad(ref: list, index: Any) -> None:
    """Grow ref with HOLE so that index is addressable."""
    if not is_index(index) or index < 0:
        raise InvalidArgumentError(f"list step must be a non-negative int, not {index!r}")
    if index >= len(ref):
        ref.extend([HOLE] * (index + 1 - len(ref)))


def _peek(ref: dict | list, step: Step) -> Any:
    if isinstance(ref, list):
        return ref[step] if is_index(step) and 0 <= step < len(ref) else None
    return ref.get(step)


def _assign(ref: dict | list, step: Step, value: Any) -> None:
    if isinstance(ref, list):
        _pad(ref, step)
    ref[step] = value


def rebuild_sparse(entries: Iterable[Entry] = ()) -> dict:
    """Rebuild entries, leaving HOLE in list slots no entry fills.

    Raises:
        InvalidArgumentError: If an entry addresses a list with a step
            that is not a non-negative int.
    """
    entries = list(entries)
    shells = _has_descendants(entries)
    result: dict = {}

    for position, entry in enumerate(entries):
        path = entry.path
        if not path:
            continue
        sequences = sequence_flags(path, entry.parent_kinds)
        ref: Any = result
        for i, step in enumerate(path[:-1]):
            ref = _child_slot(ref, step, sequences[i + 1])

        last = path[-1]
        if position in shells:
            if not is_container(_peek(ref, last)):
                _assign(ref, last, empty_shell(entry.value))
        else:
            _assign(ref, last, thaw(entry.value))

    return result


def rebuild(entries: Iterable[Entry] = ()) -> dict:
    """Rebuild a nested structure from entries.

    Intermediate levels become lists where the entry's path crossed a
    sequence, and dicts otherwise; entries without recorded container
    kinds treat int steps as list indexes. Entries are applied in order
    and the last write for a path wins. A container entry with other
    entries beneath it only sets an empty shell of its shape; its
    descendants fill it. List slots no entry fills are dropped, so
    later items move down.

    Args:
        entries: Entry instances, as produced by flatten().

    Returns:
        A new dict sharing no mutable state with the entries.

    Raises:
        InvalidArgumentError: If an entry addresses a list with a step
            that is not a non-negative int.
    """
    return compact(rebuild_sparse(entries))
