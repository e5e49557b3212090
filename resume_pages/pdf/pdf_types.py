"""Data structures for résumé layout planning and rendering."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, List, Sequence, Tuple, Union

from ..models import (
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeHeader,
    SkillCategory,
)
from .pdf_constants import EPSILON


@dataclass(frozen=True, slots=True)
class HeaderBlock:
    """Name, target role and contact line."""

    kind: ClassVar[str] = "header"
    header: ResumeHeader
    key: str = "header"


@dataclass(frozen=True, slots=True)
class SummaryBlock:
    """Professional summary paragraph with its own heading."""

    kind: ClassVar[str] = "summary"
    text: str
    key: str = "summary"


@dataclass(frozen=True, slots=True)
class SectionTitleBlock:
    """Heading that opens a non-empty section."""

    kind: ClassVar[str] = "section_title"
    title: str
    section: str
    key: str = ""


@dataclass(frozen=True, slots=True)
class SkillsCategoryBlock:
    """One 'Category: item, item' line group."""

    kind: ClassVar[str] = "skills_category"
    category: SkillCategory
    key: str = ""


@dataclass(frozen=True, slots=True)
class ExperienceEntryBlock:
    """One or more roles laid out as a unit.

    Blocks holding more than one role are split-eligible: the page assigner
    may cut them between roles. Parts of a split share ``key``; ``part`` and
    ``parts`` number them once the split is known.

    Args:
        entries: Roles in original order.
        key: Stable identity shared by all parts.
        part: Zero-based index of this part.
        parts: Number of parts the source block was cut into.
    """

    kind: ClassVar[str] = "experience_entry"
    entries: Tuple[ExperienceItem, ...]
    key: str = ""
    part: int = 0
    parts: int = 1

    @property
    def splittable(self) -> bool:
        """Return True when the block can be cut between roles."""
        return len(self.entries) > 1

    @property
    def continued(self) -> bool:
        """Return True for every part after the first."""
        return self.part > 0


@dataclass(frozen=True, slots=True)
class ProjectEntryBlock:
    """One project."""

    kind: ClassVar[str] = "project_entry"
    project: ProjectItem
    key: str = ""


@dataclass(frozen=True, slots=True)
class EducationEntryBlock:
    """One degree."""

    kind: ClassVar[str] = "education_entry"
    education: EducationItem
    key: str = ""


Block = Union[
    HeaderBlock,
    SummaryBlock,
    SectionTitleBlock,
    SkillsCategoryBlock,
    ExperienceEntryBlock,
    ProjectEntryBlock,
    EducationEntryBlock,
]


def is_splittable(block: Block) -> bool:
    """Return True when ``block`` may be cut between sub-entries."""

    return isinstance(block, ExperienceEntryBlock) and block.splittable


def merge_split_parts(blocks: Sequence[Block]) -> List[Block]:
    """Rejoin adjacent parts of split experience blocks.

    Args:
        blocks: Blocks in page order, possibly containing split parts.
    Returns:
        Blocks with each split source restored to a single block.
    """

    merged: List[Block] = []
    for block in blocks:
        previous = merged[-1] if merged else None
        if (
            isinstance(block, ExperienceEntryBlock)
            and block.continued
            and isinstance(previous, ExperienceEntryBlock)
            and previous.key == block.key
        ):
            merged[-1] = replace(
                previous, entries=previous.entries + block.entries, part=0, parts=1
            )
            continue
        if isinstance(block, ExperienceEntryBlock) and block.parts > 1:
            block = replace(block, part=0, parts=1)
        merged.append(block)
    return merged


@dataclass(slots=True)
class Page:
    """Blocks assigned to one page with their resolved heights.

    Args:
        blocks: Blocks in render order.
        heights: Resolved heights in px, parallel to ``blocks``.
        capacity: Content height budget the page was filled against.
    """

    blocks: List[Block] = field(default_factory=list)
    heights: List[float] = field(default_factory=list)
    capacity: float = 0.0

    @property
    def consumed(self) -> float:
        """Return the sum of block heights on the page."""
        return float(sum(self.heights))

    @property
    def remaining(self) -> float:
        """Return capacity left after the last block (negative on overflow)."""
        return self.capacity - self.consumed

    @property
    def overflow(self) -> float:
        """Return how far the content exceeds capacity, or 0."""
        excess = self.consumed - self.capacity
        return excess if excess > EPSILON else 0.0

    @property
    def is_empty(self) -> bool:
        """Return True when the page holds no blocks."""
        return not self.blocks

    def add(self, block: Block, height: float) -> None:
        """Append a block and its height."""
        self.blocks.append(block)
        self.heights.append(height)


@dataclass(slots=True)
class PageSet:
    """Ordered pages from one layout pass.

    Args:
        pages: Pages in order.
        capacity: Capacity shared by every page.
        provisional: True when built from estimated heights.
        version: Snapshot version the pages were computed from.
    """

    pages: List[Page]
    capacity: float
    provisional: bool = False
    version: int = 0

    @property
    def page_count(self) -> int:
        """Return the number of pages."""
        return len(self.pages)

    def blocks(self) -> List[Block]:
        """Return every block in page order."""
        return [block for page in self.pages for block in page.blocks]

    def __iter__(self):
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self.pages)


@dataclass(slots=True)
class ValidationReport:
    """Advisory layout diagnostics; never blocks rendering or export."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
