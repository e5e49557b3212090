"""Flowables for every block type.

The same ``block_flowables`` output is measured by the height resolver and
drawn by the page renderer, so measured heights and painted pages agree.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from pyphen import Pyphen
from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.platypus import Flowable, Paragraph, Spacer

from ..layout_utils import WRAP_HEIGHT_LIMIT, px_to_pt
from ..models import EducationItem, ExperienceItem, ProjectItem
from ..text import hyphenator_for, paragraph_markup
from .pdf_blocks import section_title
from .pdf_settings import TypographyContext
from .pdf_types import (
    Block,
    EducationEntryBlock,
    ExperienceEntryBlock,
    HeaderBlock,
    ProjectEntryBlock,
    SectionTitleBlock,
    SkillsCategoryBlock,
    SummaryBlock,
)

RULE_GAP_PX = 3.0
RULE_THICKNESS_PX = 0.75
DATE_GAP_PX = 8.0
CONTACT_SEPARATOR = " · "
BULLET = "•"


def _wrap_height(*, child: Flowable, width: float) -> float:
    """Return the wrapped height of a flowable.

    Args:
        child: Flowable to measure.
        width: Available width.
    Returns:
        Measured height in points.
    """

    _, height = child.wrap(width, WRAP_HEIGHT_LIMIT)
    return height


class SectionTitleFlowable(Flowable):
    """Render a section title with a thin rule underneath."""

    def __init__(
        self,
        *,
        paragraph: Paragraph,
        line_gap: float,
        line_thickness: float,
        line_color: colors.Color,
    ) -> None:
        super().__init__()
        self.paragraph = paragraph
        self.line_gap = line_gap
        self.line_thickness = line_thickness
        self.line_color = line_color
        self.width = 0.0
        self.height = 0.0
        self._para_height = 0.0

    def wrap(self, aW: float, aH: float) -> tuple[float, float]:
        """Measure total height for the title text plus rule.

        Args:
            aW: Available width for wrapping.
            aH: Available height for wrapping.
        Returns:
            Tuple of (width, height).
        """

        _, self._para_height = self.paragraph.wrap(aW, aH)
        self.width = aW
        self.height = self._para_height + self.line_gap + self.line_thickness
        return self.width, self.height

    def draw(self) -> None:
        """Draw the title paragraph and the rule below it."""

        self.canv.saveState()
        self.paragraph.drawOn(self.canv, 0, self.line_gap + self.line_thickness)
        self.canv.setStrokeColor(self.line_color)
        self.canv.setLineWidth(self.line_thickness)
        y = self.line_thickness / 2
        self.canv.line(0, y, self.width, y)
        self.canv.restoreState()


class EntryHeaderFlowable(Flowable):
    """Left-aligned title with a right-aligned date on the same baseline."""

    def __init__(
        self,
        *,
        left: Paragraph,
        right_text: str,
        right_style: ParagraphStyle,
        gap: float,
    ) -> None:
        super().__init__()
        self.left = left
        self.right_text = right_text
        self.right = Paragraph(paragraph_markup(right_text), right_style) if right_text else None
        self.right_width = (
            stringWidth(right_text, right_style.fontName, right_style.fontSize) + gap
            if right_text
            else 0.0
        )
        self.width = 0.0
        self.height = 0.0
        self._left_height = 0.0
        self._right_height = 0.0

    def wrap(self, aW: float, aH: float) -> tuple[float, float]:
        """Measure the taller of the two columns.

        Args:
            aW: Available width for wrapping.
            aH: Available height for wrapping.
        Returns:
            Tuple of (width, height).
        """

        right_width = min(self.right_width, aW / 2)
        self.width = aW
        self._left_height = _wrap_height(child=self.left, width=aW - right_width)
        self._right_height = (
            _wrap_height(child=self.right, width=right_width) if self.right else 0.0
        )
        self.height = max(self._left_height, self._right_height)
        return self.width, self.height

    def draw(self) -> None:
        """Draw both columns top-aligned."""

        self.left.drawOn(self.canv, 0, self.height - self._left_height)
        if self.right is not None:
            right_width = min(self.right_width, self.width / 2)
            self.right.drawOn(
                self.canv, self.width - right_width, self.height - self._right_height
            )


class _FlowableBuilder:
    """Build flowables for blocks against one typography context."""

    def __init__(self, *, typography: TypographyContext, hyphenator: Pyphen | None) -> None:
        self.typography = typography
        self.styles: Dict[str, ParagraphStyle] = typography.styles
        self.config = typography.config
        self.hyphenator = hyphenator

    def paragraph(self, text: str, style_key: str, **kwargs) -> Paragraph:
        """Return a Paragraph for plain ``text`` with escaping and hyphenation."""
        return Paragraph(paragraph_markup(text, self.hyphenator), self.styles[style_key], **kwargs)

    def section_spacer(self) -> Spacer:
        """Return the gap that opens a section."""
        return Spacer(0, px_to_pt(self.config.page.margins.section))

    def entry_spacer(self) -> Spacer:
        """Return the gap that opens an entry."""
        return Spacer(0, px_to_pt(self.config.page.margins.entry))

    def title(self, text: str) -> SectionTitleFlowable:
        """Return a ruled section title."""
        return SectionTitleFlowable(
            paragraph=self.paragraph(text, "section_title"),
            line_gap=px_to_pt(RULE_GAP_PX),
            line_thickness=px_to_pt(RULE_THICKNESS_PX),
            line_color=colors.lightgrey,
        )

    def bullets(self, bullets: Sequence[str]) -> List[Flowable]:
        """Return one bulleted paragraph per non-empty bullet."""
        return [
            self.paragraph(text, "bullet", bulletText=BULLET) for text in bullets if text
        ]

    def header(self, block: HeaderBlock) -> List[Flowable]:
        header = block.header
        flowables: List[Flowable] = [self.paragraph(header.name or "Your Name", "name")]
        if header.title.strip():
            flowables.append(self.paragraph(header.title.strip(), "target_role"))
        contact = header.contact_parts()
        if contact:
            flowables.append(self.paragraph(CONTACT_SEPARATOR.join(contact), "contact"))
        flowables.append(self.section_spacer())
        return flowables

    def summary(self, block: SummaryBlock) -> List[Flowable]:
        heading = section_title(
            "Professional Summary", case=self.config.rules.section_title_case
        )
        return [
            self.section_spacer(),
            self.title(heading),
            self.paragraph(block.text, "summary"),
        ]

    def title_block(self, block: SectionTitleBlock) -> List[Flowable]:
        return [self.section_spacer(), self.title(block.title)]

    def skills(self, block: SkillsCategoryBlock) -> List[Flowable]:
        category = block.category
        label = paragraph_markup(category.category or "Skills")
        items = paragraph_markup(", ".join(category.visible_items()), self.hyphenator)
        return [Paragraph(f"<b>{label}:</b> {items}", self.styles["skills"])]

    def experience_item(self, item: ExperienceItem) -> List[Flowable]:
        left_text = " — ".join(part for part in (item.role, item.company) if part)
        flowables: List[Flowable] = [
            self.entry_spacer(),
            EntryHeaderFlowable(
                left=self.paragraph(left_text, "entry_role"),
                right_text=item.date_range(),
                right_style=self.styles["entry_date"],
                gap=px_to_pt(DATE_GAP_PX),
            ),
        ]
        if item.location:
            flowables.append(self.paragraph(item.location, "entry_meta"))
        flowables.extend(self.bullets(item.bullets))
        return flowables

    def experience(self, block: ExperienceEntryBlock) -> List[Flowable]:
        flowables: List[Flowable] = []
        for item in block.entries:
            flowables.extend(self.experience_item(item))
        return flowables

    def project(self, project: ProjectItem) -> List[Flowable]:
        flowables: List[Flowable] = [
            self.entry_spacer(),
            self.paragraph(project.title or "Project", "entry_role"),
        ]
        flowables.extend(self.bullets(project.bullets))
        tech = [item for item in project.tech if item]
        if tech:
            flowables.append(self.paragraph(", ".join(tech), "tech"))
        return flowables

    def education(self, education: EducationItem) -> List[Flowable]:
        return [
            self.entry_spacer(),
            EntryHeaderFlowable(
                left=self.paragraph(education.degree, "entry_role"),
                right_text=education.year,
                right_style=self.styles["entry_date"],
                gap=px_to_pt(DATE_GAP_PX),
            ),
            self.paragraph(education.institute, "entry_meta"),
        ]

    def build(self, block: Block) -> List[Flowable]:
        """Dispatch on block type."""

        if isinstance(block, HeaderBlock):
            return self.header(block)
        if isinstance(block, SummaryBlock):
            return self.summary(block)
        if isinstance(block, SectionTitleBlock):
            return self.title_block(block)
        if isinstance(block, SkillsCategoryBlock):
            return self.skills(block)
        if isinstance(block, ExperienceEntryBlock):
            return self.experience(block)
        if isinstance(block, ProjectEntryBlock):
            return self.project(block.project)
        if isinstance(block, EducationEntryBlock):
            return self.education(block.education)
        raise TypeError(f"unsupported block type {type(block).__name__}")


def block_flowables(
    block: Block, *, typography: TypographyContext, hyphenate: bool = True
) -> List[Flowable]:
    """Return the flowables that render ``block``.

    Args:
        block: Block to render.
        typography: Live typography context.
        hyphenate: Insert soft hyphens into long words.
    Returns:
        Fresh flowables (never shared between measuring and drawing passes).
    """

    builder = _FlowableBuilder(
        typography=typography, hyphenator=hyphenator_for() if hyphenate else None
    )
    return builder.build(block)


def entry_flowables(
    item: ExperienceItem, *, typography: TypographyContext, hyphenate: bool = True
) -> List[Flowable]:
    """Return the flowables for one role of an experience block."""

    builder = _FlowableBuilder(
        typography=typography, hyphenator=hyphenator_for() if hyphenate else None
    )
    return builder.experience_item(item)
