# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for LiveWatcher and SyncTool live watching."""

import threading
import time

import pytest

from genro_treesync import (
    ChangeType,
    InvalidArgumentError,
    LiveWatcher,
    SyncTool,
    flatten,
)


class TestLiveWatcherTick:
    """Tests for manually driven ticks."""

    def test_tick_reports_changes_once(self):
        """Test a change is delivered once and becomes the new snapshot."""
        data = {'count': 1}
        received = []
        watcher = LiveWatcher(lambda: flatten(data), received.append)
        watcher.capture()
        assert watcher.tick() == []

        data['count'] = 2
        changes = watcher.tick()
        assert [(c.type, c.path, c.old_value, c.new_value) for c in changes] == [
            (ChangeType.MODIFIED, 'count', 1, 2),
        ]
        assert received == [changes]

        assert watcher.tick() == []
        assert len(received) == 1

    def test_first_tick_captures_baseline(self):
        """Test ticking before capture() only takes the snapshot."""
        received = []
        watcher = LiveWatcher(lambda: flatten({'a': 1}), received.append)
        assert watcher.previous is None
        assert watcher.tick() == []
        assert watcher.previous is not None
        assert received == []

    def test_options(self):
        """Test comparison options are used for each tick."""
        data = {'n': 1}
        loose = LiveWatcher(lambda: flatten(data), lambda changes: None)
        strict = LiveWatcher(lambda: flatten(data), lambda changes: None, options={'strict_types': True})
        loose.capture()
        strict.capture()
        data['n'] = '1'
        assert loose.tick() == []
        assert len(strict.tick()) == 1

    def test_non_positive_interval_raises(self):
        """Test interval must be positive."""
        with pytest.raises(InvalidArgumentError):
            LiveWatcher(lambda: [], lambda changes: None, interval=0)
        with pytest.raises(InvalidArgumentError):
            LiveWatcher(lambda: [], lambda changes: None, interval=-1)


class TestLiveWatcherThread:
    """Tests for the polling thread."""

    def test_context_manager(self):
        """Test the watcher runs inside the context only."""
        with LiveWatcher(lambda: [], lambda changes: None, interval=0.01) as watcher:
            assert watcher.active
        assert not watcher.active

    def test_watch_live_delivers_changes(self):
        """Test an edit is reported by the polling thread."""
        tool = SyncTool({'user': {'name': 'John'}})
        delivered = threading.Event()
        received = []

        def on_changes(changes):
            received.append(changes)
            delivered.set()

        tool.watch_live(on_changes, interval_ms=10)
        tool.update_entry('user.name', 'Jane')
        assert delivered.wait(2)
        tool.stop_watch()

        change = received[0][0]
        assert change.path == 'user.name'
        assert change.old_value == 'John'
        assert change.new_value == 'Jane'

    def test_stop_watch_stops_ticks(self):
        """Test no changes are delivered after stop_watch()."""
        tool = SyncTool({'a': 1})
        received = []
        watcher = tool.watch_live(received.append, interval_ms=10)
        tool.stop_watch()

        assert tool.watcher is None
        assert not watcher.active
        tool.update_entry('a', 2)
        time.sleep(0.05)
        assert received == []

    def test_watch_live_replaces_previous_watcher(self):
        """Test at most one watcher runs per SyncTool."""
        tool = SyncTool({'a': 1})
        first = tool.watch_live(lambda changes: None, interval_ms=10)
        second = tool.watch_live(lambda changes: None, interval_ms=10)
        try:
            assert not first.active
            assert second.active
            assert tool.watcher is second
        finally:
            tool.stop_watch()

    def test_callback_error_keeps_polling(self):
        """Test a failing callback is recorded and polling continues."""
        tool = SyncTool({'a': 1})
        first_call = threading.Event()
        second_call = threading.Event()
        calls = []

        def on_changes(changes):
            calls.append(changes)
            if len(calls) == 1:
                first_call.set()
                raise RuntimeError('boom')
            second_call.set()

        watcher = tool.watch_live(on_changes, interval_ms=10)
        try:
            tool.update_entry('a', 2)
            assert first_call.wait(2)
            tool.update_entry('a', 3)
            assert second_call.wait(2)
            assert isinstance(watcher.last_error, RuntimeError)
        finally:
            tool.stop_watch()

    def test_stop_from_callback(self):
        """Test the callback can stop its own watcher."""
        tool = SyncTool({'a': 1})
        stopped = threading.Event()

        def on_changes(changes):
            tool.stop_watch()
            stopped.set()

        watcher = tool.watch_live(on_changes, interval_ms=10)
        tool.update_entry('a', 2)
        assert stopped.wait(2)
        assert tool.watcher is None
        assert not watcher.active

    def test_invalid_interval_raises(self):
        """Test watch_live rejects non-positive intervals."""
        with pytest.raises(InvalidArgumentError):
            SyncTool({'a': 1}).watch_live(lambda changes: None, interval_ms=0)
