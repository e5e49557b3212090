"""The single rendered page stack shared by preview and export."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import Flowable

from ..layout_utils import WRAP_HEIGHT_LIMIT, pt_to_px, px_to_pt, stack_height
from .pdf_constants import A4_HEIGHT_PX, A4_WIDTH_PX, EPSILON
from .pdf_settings import PagePadding, TypographyContext
from .pdf_text_flowables import block_flowables
from .pdf_types import Block, PageSet

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenderedPage:
    """One fixed-size page with the flowables that paint it.

    Args:
        number: One-based page number.
        blocks: Blocks on the page, in order.
        stacks: Flowables per block, built by ``block_flowables``.
        padding: Content box padding in px.
        width_px: Page width; always the A4 format constant.
        height_px: Page height; always the A4 format constant.
        content_height_px: Height the stacks occupy at content width.
    """

    number: int
    blocks: List[Block]
    stacks: List[List[Flowable]]
    padding: PagePadding
    width_px: float = A4_WIDTH_PX
    height_px: float = A4_HEIGHT_PX
    content_height_px: float = 0.0
    is_last: bool = False
    _content_width_pt: float = field(default=0.0, repr=False)

    @property
    def capacity_px(self) -> float:
        """Return the content box height in px."""
        return self.height_px - self.padding.top - self.padding.bottom

    @property
    def clipped(self) -> bool:
        """Return True when painted content runs past the content box."""
        return self.content_height_px > self.capacity_px + EPSILON

    def draw(self, canv: pdf_canvas.Canvas) -> None:
        """Paint the page top-down inside the content box.

        Content is never dropped; a clipped page draws past the bottom padding.

        Args:
            canv: ReportLab canvas positioned on a fresh page.
        """

        x = px_to_pt(self.padding.left)
        y = px_to_pt(self.height_px - self.padding.top)
        for stack in self.stacks:
            for flowable in stack:
                _, height = flowable.wrap(self._content_width_pt, WRAP_HEIGHT_LIMIT)
                y -= height
                flowable.drawOn(canv, x, y)


def render_pages(page_set: PageSet, typography: TypographyContext) -> List[RenderedPage]:
    """Build the rendered page stack for a computed PageSet.

    Args:
        page_set: Pages from the assignment pass.
        typography: Typography context the heights were measured with.
    Returns:
        RenderedPage objects in order; empty for an empty PageSet.
    """

    if page_set.provisional:
        logger.warning("rendering a provisional page set built from estimated heights")
    config = typography.config
    width_pt = typography.content_width_pt
    rendered: List[RenderedPage] = []
    for idx, page in enumerate(page_set.pages):
        stacks = [block_flowables(block, typography=typography) for block in page.blocks]
        content_height = sum(pt_to_px(stack_height(stack, width_pt)) for stack in stacks)
        rendered_page = RenderedPage(
            number=idx + 1,
            blocks=list(page.blocks),
            stacks=stacks,
            padding=config.page.padding,
            width_px=config.page.width,
            height_px=config.page.height,
            content_height_px=content_height,
            is_last=idx == len(page_set.pages) - 1,
            _content_width_pt=width_pt,
        )
        if rendered_page.clipped:
            logger.error(
                "page %d content is %.1fpx tall but the page holds %.1fpx",
                rendered_page.number,
                content_height,
                rendered_page.capacity_px,
            )
        rendered.append(rendered_page)
    return rendered


def write_pdf(
    pages: Sequence[RenderedPage], output_path: Path, *, title: str | None = None
) -> Path:
    """Write the rendered page stack to a PDF file.

    Args:
        pages: Rendered pages in order.
        output_path: Destination file.
        title: Optional document title metadata.
    Returns:
        The written path.
    Raises:
        ValueError: There are no pages to write.
    """

    if not pages:
        raise ValueError("no pages to write")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    first = pages[0]
    canv = pdf_canvas.Canvas(
        str(output_path),
        pagesize=(px_to_pt(first.width_px), px_to_pt(first.height_px)),
    )
    if title:
        canv.setTitle(title)
    for page in pages:
        page.draw(canv)
        canv.showPage()
    canv.save()
    return output_path
