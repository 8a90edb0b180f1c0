# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path-based access into nested values.

get_in()/set_in() take structural paths and are exact. get()/set() take
dotted paths; each segment is matched against the container it lands
on, so '0' indexes a list but stays the string key '0' in a dict.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Sequence

from .entry import HOLE
from .exceptions import InvalidArgumentError
from .path import Path, Step, is_index, parse_step, split_path

MISSING = object()


def resolve_step(container: Any, segment: Step) -> Step:
    """Adapt a step to the container it addresses.

    Strings of digits index sequences. In mappings a step falls back to
    its int or string twin when the step itself is absent.
    """
    if isinstance(container, Mapping):
        if segment in container:
            return segment
        if is_index(segment):
            alternate: Step = str(segment)
        elif isinstance(segment, str):
            alternate = parse_step(segment)[1]
        else:
            return segment
        return alternate if alternate in container else segment
    if isinstance(segment, str):
        is_idx, step = parse_step(segment)
        return step if is_idx else segment
    return segment


def child_of(container: Any, step: Step) -> Any:
    """Return container[step], or MISSING for absent steps and HOLE slots."""
    if isinstance(container, Mapping):
        return container.get(step, MISSING)
    if isinstance(container, (list, tuple)):
        if is_index(step) and -len(container) <= step < len(container):
            child = container[step]
            return MISSING if child is HOLE else child
        return MISSING
    return MISSING


def get_in(value: Any, path: Path, default: Any = None) -> Any:
    """Get the value at a structural path.

    Args:
        value: The nested value.
        path: Tuple of steps. The empty path returns value itself.
        default: Returned when any step is missing.
    """
    ref = value
    for segment in path:
        ref = child_of(ref, resolve_step(ref, segment))
        if ref is MISSING:
            return default
    return ref


def get(value: Any, dot_path: str, default: Any = None) -> Any:
    """Get the value at a dotted path, or default when missing.

    Example:
        >>> get({'users': [{'name': 'Ann'}]}, 'users.0.name')
        'Ann'
    """
    return get_in(value, split_path(dot_path), default)


def set_in(
    value: Any,
    path: Path,
    new_value: Any,
    sequences: Sequence[bool] | None = None,
) -> Any:
    """Set new_value at a structural path, creating containers on the way.

    A missing intermediate becomes a list when the step below it
    addresses a sequence, and a dict otherwise.

    Args:
        value: The nested value, mutated in place.
        path: Non-empty tuple of steps.
        new_value: The value to store.
        sequences: One flag per step, True where the step is a sequence
            index. Defaults to treating int steps as indexes.

    Returns:
        value, for chaining.

    Raises:
        InvalidArgumentError: If path is empty or crosses a terminal value.
    """
    path = tuple(path)
    if not path:
        raise InvalidArgumentError("Empty path")

    if sequences is None or len(sequences) != len(path):
        sequences = [is_index(step) for step in path]

    ref = value
    for i, segment in enumerate(path[:-1]):
        step = resolve_step(ref, segment)
        child = child_of(ref, step)
        if child is MISSING:
            child = [] if sequences[i + 1] else {}
            _store(ref, step, child)
        ref = child
    _store(ref, resolve_step(ref, path[-1]), new_value)
    return value


def set(value: Any, dot_path: str, new_value: Any) -> Any:
    """Set new_value at a dotted path, creating dicts on the way.

    Example:
        >>> set({}, 'config.db.port', 5432)
        {'config': {'db': {'port': 5432}}}
    """
    return set_in(value, split_path(dot_path), new_value)


def _store(container: Any, step: Step, new_value: Any) -> None:
    if isinstance(container, MutableMapping):
        container[step] = new_value
    elif isinstance(container, list) and is_index(step):
        if step >= len(container):
            container.extend([None] * (step - len(container)))
            container.append(new_value)
        else:
            container[step] = new_value
    else:
        raise InvalidArgumentError(
            f"cannot set {step!r} on {type(container).__name__} value"
        )
