"""Shared constants for page geometry and pagination diagnostics."""

from __future__ import annotations

import os

# A4 at 96 dpi. The PDF writer derives its page size from the same numbers.
A4_WIDTH_PX = 794
A4_HEIGHT_PX = 1123

# 20 mm on every side.
DEFAULT_PADDING_VERTICAL_PX = 76.0
DEFAULT_PADDING_HORIZONTAL_PX = 75.5

PX_TO_PT = 72 / 96

ORPHAN_THRESHOLD_PX = 30.0
SOFT_MAX_PAGES = 3

EPSILON = 1e-4
DEBUG_PAGINATION = os.getenv("DEBUG_PAGINATION", "0") not in {
    "",
    "0",
    "false",
    "False",
}
