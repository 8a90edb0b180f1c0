# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeSync exceptions."""

from __future__ import annotations


class TreeSyncError(Exception):
    """Base exception for TreeSync errors."""

    pass


class InvalidArgumentError(TreeSyncError, ValueError):
    """Raised when an argument would corrupt state if accepted.

    Covers non-container roots, empty paths, unknown change types,
    unknown return formats and non-positive polling intervals.
    """

    pass


class InvalidPatternError(TreeSyncError, ValueError):
    """Raised when a search target is not a valid regular expression."""

    pass
