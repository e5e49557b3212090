"""End-to-end pagination and PDF output for a résumé document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..models import ResumeDocument
from .pdf_blocks import decompose
from .pdf_measure import (
    MEASURED,
    HeightCache,
    HeightResolver,
    ResolvedHeights,
    measure_blocks,
    resolver_for,
)
from .pdf_pagination import assign_to_pages
from .pdf_settings import (
    TemplateConfig,
    TypographyContext,
    build_typography,
    get_template_config,
    validate_config,
)
from .pdf_story import render_pages, write_pdf
from .pdf_types import Block, PageSet, ValidationReport
from .pdf_validation import validate

__all__ = [
    "LayoutResult",
    "build_pdf",
    "paginate_document",
]

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "document"


@dataclass(slots=True)
class LayoutResult:
    """Everything one pagination pass produced.

    Args:
        blocks: Decomposed blocks in document order.
        heights: Resolved heights with the strategy that produced them.
        page_set: Assigned pages.
        report: Validator output for ``page_set``.
    """

    blocks: List[Block]
    heights: ResolvedHeights
    page_set: PageSet
    report: ValidationReport

    @property
    def page_count(self) -> int:
        return self.page_set.page_count


def _prepare_typography(
    *, config: TemplateConfig, typography: TypographyContext | None, strategy: str | HeightResolver
) -> TypographyContext | TemplateConfig:
    """Return the measuring context for ``strategy``.

    Args:
        config: Template configuration.
        typography: Optional prepared typography context.
        strategy: Height strategy name or resolver.
    Returns:
        A typography context for measured heights, else the template itself.
    """

    if typography is not None:
        if typography.config != config:
            raise ValueError("typography context was built for a different template")
        return typography
    if resolver_for(strategy).name == MEASURED:
        return build_typography(config)
    return config


def paginate_document(
    document: ResumeDocument,
    config: TemplateConfig,
    *,
    strategy: str | HeightResolver = MEASURED,
    typography: TypographyContext | None = None,
    cache: HeightCache | None = None,
) -> LayoutResult:
    """Decompose, measure, assign and validate ``document``.

    Args:
        document: Normalized résumé.
        config: Template configuration.
        strategy: ``measured`` (default), ``estimated`` or a resolver.
        typography: Optional prepared typography context.
        cache: Optional height cache shared across calls.
    Returns:
        LayoutResult for the document.
    Raises:
        ConfigurationError: The template is unusable.

    Example:
        >>> result = paginate_document(ResumeDocument.empty(), get_template_config("document"))
        >>> result.page_count
        1
    """

    validate_config(config)
    context = _prepare_typography(config=config, typography=typography, strategy=strategy)
    blocks = decompose(document, config)
    resolved = measure_blocks(blocks, strategy, context, cache=cache)
    pages = assign_to_pages(
        blocks,
        resolved.heights,
        config.capacity,
        entry_heights=resolved.entry_heights,
    )
    page_set = PageSet(pages=pages, capacity=config.capacity, provisional=resolved.provisional)
    report = validate(page_set, config)
    logger.info(
        "paginated %d blocks onto %d page(s) with %s heights",
        len(blocks),
        page_set.page_count,
        resolved.strategy,
    )
    for error in report.errors:
        logger.warning(error)
    return LayoutResult(blocks=blocks, heights=resolved, page_set=page_set, report=report)


def build_pdf(
    document: ResumeDocument,
    output_path: Path,
    *,
    config: TemplateConfig | None = None,
    typography: TypographyContext | None = None,
) -> LayoutResult:
    """Paginate ``document`` with measured heights and write the PDF.

    Args:
        document: Normalized résumé.
        output_path: Destination file.
        config: Template configuration; the default template when None.
        typography: Optional prepared typography context.
    Returns:
        LayoutResult of the pass that was written.

    Example:
        >>> build_pdf(ResumeDocument.empty(), Path("output/resume.pdf"))  # doctest: +SKIP
    """

    if config is None and typography is not None:
        config = typography.config
    resolved_config = config or get_template_config(DEFAULT_TEMPLATE_ID)
    context = typography or build_typography(resolved_config)
    result = paginate_document(document, resolved_config, typography=context)
    rendered = render_pages(result.page_set, context)
    write_pdf(rendered, output_path, title=document.header.name or None)
    logger.info("wrote %d page(s) to %s", len(rendered), output_path)
    return result
