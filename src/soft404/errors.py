# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""soft404 exception hierarchy.

The detection engine itself never raises on page content.  These errors
cover the two places where something outside the page can be wrong: the
indicator tables (configuration time) and snapshot files fed to the CLI.
"""

from __future__ import annotations


class Soft404Error(Exception):
    """Base exception for all soft404 errors."""


class CatalogError(Soft404Error):
    """Indicator catalog table is malformed (bad weight, context, or duplicate row)."""


class SnapshotError(Soft404Error):
    """Page snapshot file could not be read or decoded."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.path = path
