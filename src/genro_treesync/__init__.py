# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeSync - Flattening, diffing and live watching of nested data.

A lightweight, zero-dependency library that turns nested dicts, lists
and sets into path-addressed entries and back, with structural diffs,
deep merge, search and a polling change notifier.
"""

__version__ = "0.1.0"

from .access import get, get_in, set, set_in
from .diff import (
    Change,
    ChangeType,
    DiffOptions,
    apply_changes,
    diff,
    from_diff,
    invert_changes,
    watch,
)
from .entry import UNDEFINED, Entry, kind_of
from .exceptions import (
    InvalidArgumentError,
    InvalidPatternError,
    TreeSyncError,
)
from .flatten import flatten, iter_flatten, rebuild
from .live import LiveWatcher
from .merge import merge
from .path import decode_path, encode_path
from .search import FindOptions, FindResult, ReturnFormat, SearchHit, find_entries
from .sync import SyncTool

__all__ = [
    # Core classes
    "SyncTool",
    "Entry",
    "LiveWatcher",
    "UNDEFINED",
    "kind_of",
    # Flattening
    "flatten",
    "iter_flatten",
    "rebuild",
    "encode_path",
    "decode_path",
    # Access and merge
    "get_in",
    "set_in",
    "merge",
    # Diff
    "Change",
    "ChangeType",
    "DiffOptions",
    "watch",
    "diff",
    "apply_changes",
    "from_diff",
    "invert_changes",
    # Search
    "FindOptions",
    "FindResult",
    "ReturnFormat",
    "SearchHit",
    "find_entries",
    # Exceptions
    "TreeSyncError",
    "InvalidArgumentError",
    "InvalidPatternError",
]
