# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Sync package - Baseline plus flattened working set.

This package provides the SyncTool class, which tracks a nested
structure as an immutable baseline and an editable list of entries,
with change tracking, revert, search and live watching.

Example:
    >>> from genro_treesync import SyncTool
    >>> tool = SyncTool({'user': {'name': 'John'}})
    >>> tool.update_entry('user.name', 'Jane')
    >>> [c.path for c in tool.get_changes()]
    ['user.name']
"""

from .core import SyncTool

__all__ = ["SyncTool"]
