# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""SyncTool - Flattened working copy of a nested structure.

This module provides the SyncTool class, which keeps an immutable
baseline of a nested value next to a mutable flattened working set, and
composes flattening, diffing, merging, search and live watching on top
of them.

Key Features:
    - **Baseline**: Deep copy taken at construction, never updated
    - **Working set**: Ordered Entry list edited by dotted path
    - **Change tracking**: Diff of the working set against the baseline
    - **Revert**: Inverse application of any change list
    - **Search**: Key/value search with fallback targets
    - **Live watch**: Polling notifier owned by the instance

Example:
    Basic usage::

        tool = SyncTool({'user': {'name': 'John', 'age': 30}})
        tool.update_entry('user.name', 'Jane')

        changes = tool.get_changes()
        # [Change(type=<ChangeType.MODIFIED: 'modified'>, path='user.name', ...)]

        tool.revert_changes(changes)
        tool.rebuild()['user']['name']  # 'John'

    With container entries::

        tool = SyncTool({'user': {'name': 'John'}}, include_containers=True)
        tool.find(target='user').results[0].value  # {'name': 'John'}
"""

from __future__ import annotations

import logging
from copy import deepcopy
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Iterator

from .. import access
from ..diff import (
    Change,
    DiffOptions,
    apply_changes,
    from_diff,
    invert_changes,
    watch,
)
from ..entry import Entry, is_container
from ..exceptions import InvalidArgumentError
from ..flatten import flatten, rebuild, rebuild_sparse
from ..live import ChangesCallback, LiveWatcher
from ..merge import merge
from ..path import decode_path
from ..search import FindOptions, FindResult, find_entries

logger = logging.getLogger(__name__)


class SyncTool:
    """A nested structure tracked as a baseline plus a flattened working set.

    SyncTool provides:
    - get_original() / get_flat() / rebuild(): Independent copies of the state
    - update_entry(path, value) / remove_entry(path): Edit the working set
    - get_changes(): Diff of the working set against the baseline
    - merge_with(source) / revert_changes(diff): Bulk edits
    - find(...) / to_tree(predicate): Search and filtered rebuild
    - watch_live(callback) / stop_watch(): Polling notifier

    The pure operations are also exposed as static methods.

    Attributes:
        include_containers: If True, the working set holds one entry per
            container node as well as per leaf.
    """

    __slots__ = ('_original', '_entries', '_watcher', '_include_containers')

    def __init__(
        self,
        initial: Any = None,
        include_containers: bool = False,
    ) -> None:
        """Initialize a SyncTool.

        Args:
            initial: Nested container to track. None tracks an empty dict.
                The value is deep-copied; later changes to it are not seen.
            include_containers: Flatten with one entry per container node.

        Raises:
            InvalidArgumentError: If initial is not a container.

        Example:
            >>> SyncTool({'a': 1, 'b': [1, 2]})
            >>> SyncTool({'a': {'b': 1}}, include_containers=True)
        """
        if initial is None:
            initial = {}
        if not is_container(initial):
            raise InvalidArgumentError(
                f"initial must be a container, not {type(initial).__name__}"
            )
        self._original = deepcopy(initial)
        self._include_containers = include_containers
        self._entries: list[Entry] = self._flatten(deepcopy(initial))
        self._watcher: LiveWatcher | None = None

    # ==================== Static Operations ====================

    flatten = staticmethod(flatten)
    rebuild_entries = staticmethod(rebuild)
    merge = staticmethod(merge)
    watch = staticmethod(watch)
    get = staticmethod(access.get)
    set = staticmethod(access.set)
    apply_changes = staticmethod(apply_changes)
    from_diff = staticmethod(from_diff)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing entry paths."""
        return f"SyncTool({[e.dot_path for e in self._entries]})"

    def __len__(self) -> int:
        """Return the number of entries in the working set."""
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        """Iterate over copies of the working set entries in order."""
        return iter(self.get_flat())

    def __contains__(self, dot_path: str) -> bool:
        """Check if the working set has an entry at dot_path."""
        return any(e.dot_path == dot_path for e in self._entries)

    def __enter__(self) -> SyncTool:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop_watch()

    @property
    def include_containers(self) -> bool:
        """True if container nodes have their own entries."""
        return self._include_containers

    @property
    def watcher(self) -> LiveWatcher | None:
        """The active LiveWatcher, or None."""
        return self._watcher

    # ==================== Internals ====================

    def _flatten(self, value: Any) -> list[Entry]:
        return flatten(value, include_containers=self._include_containers)

    def _commit(self, entries: list[Entry]) -> None:
        """Install entries as the working set once they rebuild cleanly.

        In container mode the working set is re-flattened, so container
        entries match their leaves.

        Raises:
            InvalidArgumentError: If an entry does not fit the structure
                built by the entries before it. The working set is kept.
        """
        tree = rebuild_sparse(entries)
        self._entries = self._flatten(tree) if self._include_containers else entries

    def _live_snapshot(self) -> list[Entry]:
        return self._flatten(rebuild_sparse(self._entries))

    # ==================== Read Access ====================

    def get_original(self) -> Any:
        """Return a deep copy of the baseline."""
        return deepcopy(self._original)

    def get_flat(self) -> list[Entry]:
        """Return deep copies of the working set entries."""
        return [entry.copy() for entry in self._entries]

    def rebuild(self) -> dict:
        """Rebuild the nested structure from the working set.

        List slots left empty by removed entries are dropped.
        """
        return rebuild(self._entries)

    def to_tree(self, predicate: Callable[[Entry], bool] | None = None) -> dict:
        """Rebuild the structure from the entries accepted by predicate.

        Args:
            predicate: Called with each Entry. None accepts all.

        Example:
            >>> tool.to_tree(lambda e: e.kind == 'number')
        """
        if predicate is None:
            return self.rebuild()
        return rebuild(entry for entry in self._entries if predicate(entry))

    def find(self, options: FindOptions | Mapping | None = None, **kwargs: Any) -> FindResult:
        """Search the working set.

        Takes FindOptions, a dict of its fields, or its fields as keyword
        arguments. A mutate callback receives the working set entries
        themselves, so it can edit them in place.

        Example:
            >>> tool.find(target='name').results[0].value
            'John'
            >>> tool.find(target='nickname', fallbacks=['name'], find_all=True)
        """
        return find_entries(self._entries, options, **kwargs)

    # ==================== Working Set Edits ====================

    def sync_entries(self, entries: Iterable[Entry] = ()) -> None:
        """Replace the working set with the given entries.

        Raises:
            InvalidArgumentError: If an item is not an Entry, or the
                entries do not rebuild. The working set is kept.
        """
        entries = list(entries)
        for entry in entries:
            if not isinstance(entry, Entry):
                raise InvalidArgumentError(f"not an Entry: {entry!r}")
        self._commit(entries)
        logger.debug("Working set replaced: %d entries", len(entries))

    def update_entry(self, dot_path: str, value: Any) -> None:
        """Set the value at dot_path in the working set.

        An existing entry takes the new value and any entries beneath it
        are dropped; otherwise a new entry is appended, with digit
        segments of dot_path read as sequence indexes.

        Raises:
            InvalidArgumentError: If dot_path is empty, or does not fit the
                structure (e.g. a field name under a list). The working
                set is left unchanged.
        """
        path = decode_path(dot_path)
        entries = self._without_beneath(dot_path)
        for position, entry in enumerate(entries):
            if entry.dot_path == dot_path:
                entries[position] = Entry(
                    entry.path, value, dot_path=dot_path, parent_kinds=entry.parent_kinds,
                )
                break
        else:
            entries.append(Entry(path, value, dot_path=dot_path))
        self._commit(entries)

    def remove_entry(self, dot_path: str) -> None:
        """Remove the entry at dot_path and every entry beneath it.

        Raises:
            InvalidArgumentError: If dot_path is empty.
        """
        decode_path(dot_path)
        entries = [e for e in self._without_beneath(dot_path) if e.dot_path != dot_path]
        self._commit(entries)

    def _without_beneath(self, dot_path: str) -> list[Entry]:
        prefix = dot_path + '.'
        return [e for e in self._entries if not e.dot_path.startswith(prefix)]

    def merge_with(self, source: Mapping) -> None:
        """Deep-merge source into the current structure and re-flatten.

        Raises:
            InvalidArgumentError: If source is not a mapping.
        """
        merged = merge(rebuild_sparse(self._entries), deepcopy(source))
        self._entries = self._flatten(merged)
        logger.debug("Merged source into working set: %d entries", len(self._entries))

    # ==================== Change Tracking ====================

    def get_changes(
        self,
        options: DiffOptions | Mapping | None = None,
        **kwargs: Any,
    ) -> list[Change]:
        """Diff the current structure against the baseline.

        Args:
            options: DiffOptions, or a dict of its fields.
            **kwargs: Field overrides (deep_compare, strict_types).
        """
        return watch(
            self._flatten(self.get_original()),
            self._live_snapshot(),
            options,
            **kwargs,
        )

    def revert_changes(self, diff: Iterable[Change | Mapping[str, Any]] = ()) -> None:
        """Undo diff on the current structure and re-flatten.

        Raises:
            InvalidArgumentError: If a change has an unknown type or empty path.
        """
        reverted = apply_changes(rebuild_sparse(self._entries), invert_changes(diff))
        self._entries = self._flatten(reverted)
        logger.debug("Reverted changes: %d entries", len(self._entries))

    # ==================== Live Watch ====================

    def watch_live(
        self,
        callback: ChangesCallback,
        interval_ms: float = 500,
        options: DiffOptions | Mapping | None = None,
    ) -> LiveWatcher:
        """Start polling the structure for changes.

        Any previous watcher is stopped first.

        Args:
            callback: Called with the changes of each tick that found some.
            interval_ms: Milliseconds between ticks.
            options: DiffOptions, or a dict of its fields.

        Returns:
            The running LiveWatcher.

        Raises:
            InvalidArgumentError: If interval_ms is not positive.
        """
        self.stop_watch()
        watcher = LiveWatcher(self._live_snapshot, callback, interval_ms / 1000, options)
        self._watcher = watcher.start()
        return watcher

    def stop_watch(self) -> None:
        """Stop the active watcher, if any."""
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()
