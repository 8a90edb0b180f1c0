# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Polling change notifier.

A LiveWatcher keeps the last flattening it delivered and, on every tick,
re-flattens the watched structure through a snapshot callable. When the
diff is not empty it becomes the new retained snapshot and the callback
receives the changes, synchronously within the tick.

start() runs ticks on a daemon thread every `interval` seconds. stop()
is immediate: no tick starts after it returns, while a tick already in
progress completes. tick() can also be driven by hand.

Example:
    >>> data = {'count': 1}
    >>> watcher = LiveWatcher(lambda: flatten(data), print)
    >>> watcher.capture()
    >>> data['count'] = 2
    >>> changes = watcher.tick()  # prints the modified change
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable

from .diff import Change, DiffOptions, resolve_options, watch
from .entry import Entry
from .exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

SnapshotCallable = Callable[[], list[Entry]]
ChangesCallback = Callable[[list[Change]], Any]


class LiveWatcher:
    """Cooperative polling loop emitting diffs of a snapshot source.

    Attributes:
        interval: Seconds between ticks.
        options: DiffOptions used to compare snapshots.
        last_error: Last exception raised by the callback on the polling
            thread, or None.
    """

    def __init__(
        self,
        snapshot: SnapshotCallable,
        callback: ChangesCallback,
        interval: float = 0.5,
        options: DiffOptions | Mapping | None = None,
    ) -> None:
        """Initialize a LiveWatcher.

        Args:
            snapshot: Zero-argument callable returning the current entries.
            callback: Called with the list of changes of each non-empty tick.
            interval: Seconds between ticks, must be positive.
            options: DiffOptions, or a dict of its fields.

        Raises:
            InvalidArgumentError: If interval is not positive.
        """
        if not interval or interval <= 0:
            raise InvalidArgumentError(f"interval must be positive, not {interval!r}")
        self._snapshot = snapshot
        self._callback = callback
        self.interval = interval
        self.options = resolve_options(options)
        self.last_error: BaseException | None = None
        self._previous: list[Entry] | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def __repr__(self) -> str:
        state = 'active' if self.active else 'stopped'
        return f"LiveWatcher(interval={self.interval!r}, {state})"

    def __enter__(self) -> LiveWatcher:
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    @property
    def active(self) -> bool:
        """True while the polling thread runs and has not been stopped."""
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    @property
    def previous(self) -> list[Entry] | None:
        """The retained snapshot, or None before capture()."""
        return self._previous

    def capture(self) -> None:
        """Take the current flattening as the retained snapshot."""
        self._previous = self._snapshot()

    def tick(self) -> list[Change]:
        """Run one polling step.

        Returns:
            The changes since the retained snapshot. Empty when nothing
            changed, or when no snapshot had been captured yet (the
            current flattening is captured instead).
        """
        current = self._snapshot()
        if self._previous is None:
            self._previous = current
            return []

        changes = watch(self._previous, current, self.options)
        if changes:
            self._previous = current
            logger.debug("Watcher tick: %d change(s)", len(changes))
            self._callback(changes)
        return changes

    def start(self) -> LiveWatcher:
        """Capture the baseline and start polling on a daemon thread.

        Starting an active watcher does nothing.
        """
        if self.active:
            return self
        self.capture()
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name=f"treesync-watcher-{id(self):x}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Watcher started, interval=%ss", self.interval)
        return self

    def stop(self) -> None:
        """Stop polling.

        Waits for a tick in progress to complete, unless called from the
        callback itself.
        """
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join()
        logger.debug("Watcher stopped")

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception as exc:
                self.last_error = exc
                logger.exception("Watcher callback failed")
