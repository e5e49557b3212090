"""Advisory checks over a computed page stack."""

from __future__ import annotations

from typing import List, Sequence

from .pdf_constants import EPSILON, ORPHAN_THRESHOLD_PX, SOFT_MAX_PAGES
from .pdf_settings import TemplateConfig
from .pdf_types import HeaderBlock, Page, PageSet, SectionTitleBlock, ValidationReport


def _px(value: float) -> str:
    """Format a pixel amount without trailing zeros.

    Example:
        >>> _px(229.0), _px(12.5)
        ('229', '12.5')
    """

    rounded = round(value, 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:g}"


def _page_errors(*, page: Page, number: int, is_last: bool) -> List[str]:
    """Return hard layout errors for one page.

    Args:
        page: Page to inspect.
        number: One-based page number.
        is_last: Whether this is the final page.
    Returns:
        Error messages.
    """

    errors: List[str] = []
    if page.overflow > 0:
        errors.append(f"Page {number}: content exceeds capacity by {_px(page.overflow)}px")
    if page.is_empty and not is_last:
        errors.append(f"Page {number}: blank page detected")
    return errors


def _page_warnings(*, page: Page, number: int, orphan_threshold: float) -> List[str]:
    """Return quality warnings for one page.

    Args:
        page: Page to inspect.
        number: One-based page number.
        orphan_threshold: Remaining space below which content may look orphaned.
    Returns:
        Warning messages.
    """

    warnings: List[str] = []
    if page.is_empty:
        return warnings
    if page.overflow == 0 and page.remaining + EPSILON < orphan_threshold:
        warnings.append(
            f"Page {number}: possible orphaned heading/content near page bottom"
        )
    last = page.blocks[-1]
    if isinstance(last, SectionTitleBlock):
        warnings.append(f"Page {number}: section title '{last.title}' has no content after it")
    if number == 1 and len(page.blocks) == 1 and isinstance(last, HeaderBlock):
        warnings.append("Page 1: only header present, add more content")
    return warnings


def validate(
    pages: PageSet | Sequence[Page], config: TemplateConfig | None = None
) -> ValidationReport:
    """Lint a computed layout. Never raises on layout problems.

    Args:
        pages: PageSet or pages in order.
        config: Template whose rules supply thresholds; defaults when None.
    Returns:
        ValidationReport; ``valid`` is False only when errors were found.
    """

    page_list = list(pages.pages if isinstance(pages, PageSet) else pages)
    orphan_threshold = config.rules.orphan_threshold_px if config else ORPHAN_THRESHOLD_PX
    soft_max = config.rules.soft_max_pages if config else SOFT_MAX_PAGES
    errors: List[str] = []
    warnings: List[str] = []
    for idx, page in enumerate(page_list):
        number = idx + 1
        errors.extend(_page_errors(page=page, number=number, is_last=idx == len(page_list) - 1))
        warnings.extend(
            _page_warnings(page=page, number=number, orphan_threshold=orphan_threshold)
        )
    if len(page_list) > soft_max:
        warnings.append(f"Document spans {len(page_list)} pages; consider condensing.")
    return ValidationReport(valid=not errors, errors=errors, warnings=warnings)
