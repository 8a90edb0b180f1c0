# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Deep merge of nested mappings."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from .exceptions import InvalidArgumentError


def merge(target: MutableMapping | None = None, source: Mapping | None = None) -> Any:
    """Merge source into target in place, preferring source leaves.

    For each key in source:
    - If both values are mappings: recursively merge
    - Otherwise: source value replaces target value (lists included)

    Args:
        target: Mapping to update. None starts from an empty dict.
        source: Mapping to read from. None merges nothing.

    Returns:
        The mutated target.

    Raises:
        InvalidArgumentError: If target or source is not a mapping.

    Example:
        >>> merge({'a': {'b': 1}}, {'a': {'c': 2}})
        {'a': {'b': 1, 'c': 2}}
    """
    if target is None:
        target = {}
    if source is None:
        return target
    if not isinstance(target, MutableMapping):
        raise InvalidArgumentError(
            f"target must be a mutable mapping, not {type(target).__name__}"
        )
    if not isinstance(source, Mapping):
        raise InvalidArgumentError(
            f"source must be a mapping, not {type(source).__name__}"
        )

    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, MutableMapping):
            merge(current, value)
        else:
            target[key] = value
    return target
