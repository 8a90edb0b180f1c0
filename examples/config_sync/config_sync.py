# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ConfigSync - Example of tracking edits to an application config.

A didactic example showing how to edit a nested config through SyncTool,
inspect the pending changes, undo them, and watch a config for edits
made elsewhere.
"""

from __future__ import annotations

import logging
import time

from genro_treesync import SyncTool

DEFAULTS = {
    'server': {'host': 'localhost', 'port': 8080},
    'features': ['auth', 'cache'],
    'debug': False,
}


def describe(changes):
    """Return one line per change."""
    lines = []
    for change in changes:
        if change.type.value == 'modified':
            lines.append(f"~ {change.path}: {change.old_value!r} -> {change.new_value!r}")
        elif change.type.value == 'added':
            lines.append(f"+ {change.path}: {change.new_value!r}")
        else:
            lines.append(f"- {change.path}: {change.old_value!r}")
    return lines


def edit_and_revert():
    """Edit a config, print the pending changes, then undo them."""
    tool = SyncTool(DEFAULTS)
    tool.update_entry('server.port', 9090)
    tool.update_entry('features.2', 'metrics')
    tool.remove_entry('debug')

    changes = tool.get_changes()
    print('\n'.join(describe(changes)))

    tool.revert_changes(changes)
    assert tool.rebuild() == DEFAULTS


def find_by_value():
    """Find every feature flag named 'cache' and rename it."""
    tool = SyncTool(DEFAULTS)
    result = tool.find(
        target='cache',
        match_keys=False,
        find_all=True,
        mutate=lambda entry: setattr(entry, 'value', 'redis-cache'),
    )
    print([hit.dot_path for hit in result.results])
    print(tool.rebuild()['features'])


def watch_edits():
    """Report edits made while a watcher is polling."""
    with SyncTool(DEFAULTS) as tool:
        tool.watch_live(lambda changes: print('\n'.join(describe(changes))), interval_ms=50)
        tool.update_entry('server.host', '0.0.0.0')
        time.sleep(0.2)


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    edit_and_revert()
    find_by_value()
    watch_edits()
