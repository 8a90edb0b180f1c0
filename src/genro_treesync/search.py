# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Key and value search over flattened entries.

The search takes an ordered list of targets (the main target, then the
fallbacks) and scans the entries once per target. The first target that
matches anything wins; fallbacks are only tried while nothing matched.

Example:
    >>> entries = flatten({'user': {'name': 'John'}})
    >>> find_entries(entries, target='nickname', fallbacks=['name']).results[0].value
    'John'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from .entry import UNDEFINED, Entry, kind_of
from .exceptions import InvalidArgumentError, InvalidPatternError
from .path import Path, Step


class ReturnFormat(str, Enum):
    """Projection applied to each search hit."""

    FULL = 'full'
    DOT_PATHS = 'dotPaths'
    ENTRIES_ONLY = 'entriesOnly'


@dataclass(frozen=True)
class FindOptions:
    """Search configuration.

    Attributes:
        target: Main search target; blank strings are ignored.
        fallbacks: Targets tried in order while nothing matched.
        match_keys: Test the last path step of each entry.
        match_values: Test the value of each entry.
        case_insensitive: Fold case before comparing.
        use_regex: Treat targets as regular expressions (re.search).
        find_all: Collect every match instead of stopping at the first.
        mutate: Called with each matched Entry after its hit is taken, so
            a full hit keeps the value as found.
        only_types: Kind tags the value must have; empty allows all.
        return_format: 'full', 'dotPaths' or 'entriesOnly'.
        include_null: Consider entries whose value is None.
        include_undefined: Consider entries whose value is UNDEFINED.
        include_empty_string: Consider entries whose value is ''.
    """

    target: str = ''
    fallbacks: Sequence[str] = ()
    match_keys: bool = True
    match_values: bool = True
    case_insensitive: bool = False
    use_regex: bool = False
    find_all: bool = False
    mutate: Callable[[Entry], Any] | None = None
    only_types: Sequence[str] = ()
    return_format: ReturnFormat | str = ReturnFormat.FULL
    include_null: bool = True
    include_undefined: bool = True
    include_empty_string: bool = True

    def targets(self) -> list[str]:
        """Return the usable targets in search order."""
        fallbacks = self.fallbacks or ()
        if isinstance(fallbacks, str):
            fallbacks = (fallbacks,)
        candidates = [self.target, *fallbacks]
        return [t for t in candidates if isinstance(t, str) and t.strip()]


@dataclass
class SearchHit:
    """A search hit in the 'full' return format."""

    key: Step | None
    value: Any
    path: Path
    dot_path: str
    context: Any = None


@dataclass
class FindResult:
    """Outcome of a search."""

    matched: bool = False
    results: list = field(default_factory=list)


def resolve_options(options: FindOptions | Mapping | None, **kwargs: Any) -> FindOptions:
    """Combine an options object or dict with keyword overrides."""
    if options is None:
        options = FindOptions()
    elif isinstance(options, Mapping):
        options = FindOptions(**options)
    return replace(options, **kwargs) if kwargs else options


def _matcher(target: str, opts: FindOptions) -> Callable[[Any], bool]:
    """Build the predicate testing a key or value against target."""
    if opts.use_regex:
        try:
            pattern = re.compile(target, re.IGNORECASE if opts.case_insensitive else 0)
        except re.error as exc:
            raise InvalidPatternError(f"Invalid pattern {target!r}: {exc}") from exc
        return lambda candidate: pattern.search(str(candidate)) is not None

    if opts.case_insensitive:
        folded = target.casefold()
        return lambda candidate: str(candidate).casefold() == folded
    return lambda candidate: str(candidate) == target


def _admitted(value: Any, opts: FindOptions) -> bool:
    """Apply type and empty-value filters to a value."""
    if opts.only_types and kind_of(value) not in opts.only_types:
        return False
    if not opts.include_null and value is None:
        return False
    if not opts.include_undefined and value is UNDEFINED:
        return False
    if not opts.include_empty_string and isinstance(value, str) and value == '':
        return False
    return True


def _project(entry: Entry, fmt: ReturnFormat) -> Any:
    if fmt is ReturnFormat.DOT_PATHS:
        return entry.dot_path
    if fmt is ReturnFormat.ENTRIES_ONLY:
        return entry
    return SearchHit(entry.key, entry.value, entry.path, entry.dot_path)


def find_entries(
    entries: Iterable[Entry],
    options: FindOptions | Mapping | None = None,
    **kwargs: Any,
) -> FindResult:
    """Search entries for keys or values matching the targets.

    Args:
        entries: Entries to scan, in order.
        options: FindOptions, or a dict of its fields.
        **kwargs: Field overrides.

    Returns:
        FindResult. No usable target gives FindResult(False, []).

    Raises:
        InvalidPatternError: If use_regex and a tried target does not compile.
        InvalidArgumentError: If return_format is unknown.
    """
    opts = resolve_options(options, **kwargs)
    try:
        fmt = ReturnFormat(opts.return_format)
    except ValueError:
        raise InvalidArgumentError(f"Unknown return format: {opts.return_format!r}") from None

    targets = opts.targets()
    if not targets:
        return FindResult(False, [])

    entries = list(entries)
    seen: set[str] = set()
    results: list = []

    for target in targets:
        is_match = _matcher(target, opts)
        for entry in entries:
            value = entry.value
            if not _admitted(value, opts):
                continue

            matched = opts.match_keys and entry.key is not None and is_match(entry.key)
            if not matched and opts.match_values:
                matched = is_match(value)
            if not matched or entry.dot_path in seen:
                continue

            seen.add(entry.dot_path)
            hit = _project(entry, fmt)
            if opts.mutate is not None:
                opts.mutate(entry)
            results.append(hit)
            if not opts.find_all:
                return FindResult(True, results)

        if results:
            break

    return FindResult(bool(results), results)
