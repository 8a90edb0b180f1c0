# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path encoding between structural paths and dotted strings.

A structural path is a tuple of steps: field names (str) or sequence
indexes (int). The dotted form joins the steps with '.', so it cannot
tell a digit-only field name from an index, and a step containing '.'
splits into two on decoding. Structural paths are authoritative; the
dotted form is a lookup and display convenience.

Example:
    >>> encode_path(('users', 0, 'name'))
    'users.0.name'
    >>> decode_path('users.0.name')
    ('users', 0, 'name')
"""

from __future__ import annotations

from typing import Any, Iterable, Union

from .exceptions import InvalidArgumentError

Step = Union[str, int]
Path = tuple


def is_index(step: Any) -> bool:
    """True if step addresses a sequence position (int, not bool)."""
    return isinstance(step, int) and not isinstance(step, bool)


def parse_step(segment: str) -> tuple[bool, Step]:
    """Parse a dotted segment, detecting sequence indexes.

    Args:
        segment: A single path segment (e.g., 'name' or '0').

    Returns:
        Tuple of (is_index, step) where step is an int for digit-only
        segments and the segment itself otherwise.
    """
    if segment.isascii() and segment.isdigit():
        return True, int(segment)
    return False, segment


def encode_path(path: Iterable[Any]) -> str:
    """Join structural steps into a dotted path."""
    return '.'.join(str(step) for step in path)


def decode_path(dot_path: str) -> Path:
    """Split a dotted path into structural steps.

    Digit-only segments become ints.

    Raises:
        InvalidArgumentError: If dot_path is empty or not a string.
    """
    if not isinstance(dot_path, str) or not dot_path:
        raise InvalidArgumentError(f"dot path must be a non-empty string, not {dot_path!r}")
    return tuple(parse_step(segment)[1] for segment in dot_path.split('.'))


def split_path(dot_path: str) -> list[str]:
    """Split a dotted path into raw string segments, without conversion."""
    if not isinstance(dot_path, str) or not dot_path:
        raise InvalidArgumentError(f"dot path must be a non-empty string, not {dot_path!r}")
    return dot_path.split('.')
