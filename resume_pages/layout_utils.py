"""
Measurement helpers shared by the height resolver and the page renderer.
"""

from __future__ import annotations

from typing import Sequence

from reportlab.platypus import Flowable, KeepTogether

from .pdf.pdf_constants import PX_TO_PT

WRAP_HEIGHT_LIMIT = 10_000


def px_to_pt(value: float) -> float:
    """Convert CSS pixels (96 dpi) to PDF points (72 dpi).

    Example:
        >>> px_to_pt(96)
        72.0
    """

    return value * PX_TO_PT


def pt_to_px(value: float) -> float:
    """Convert PDF points (72 dpi) to CSS pixels (96 dpi).

    Example:
        >>> pt_to_px(72)
        96.0
    """

    return value / PX_TO_PT


def measure_height(flowable: Flowable, width: float) -> float:
    """Return the wrapped height (points) for a flowable at the given width."""

    if isinstance(flowable, KeepTogether):
        content = getattr(flowable, "_content", [])
        return sum(measure_height(child, width) for child in content)
    _, height = flowable.wrap(width, WRAP_HEIGHT_LIMIT)
    return height + flowable.getSpaceBefore() + flowable.getSpaceAfter()


def stack_height(flowables: Sequence[Flowable], width: float) -> float:
    """Return the total height of flowables stacked top to bottom, in points."""

    return sum(measure_height(flowable, width) for flowable in flowables)
