"""Block height resolution: measured layout passes and analytic estimates."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence, Tuple, Union

from reportlab.platypus import Flowable

from ..errors import MeasurementUnavailable
from ..layout_utils import pt_to_px, stack_height
from .pdf_settings import TemplateConfig, TypographyContext
from .pdf_text_flowables import block_flowables, entry_flowables
from .pdf_types import (
    Block,
    EducationEntryBlock,
    ExperienceEntryBlock,
    HeaderBlock,
    ProjectEntryBlock,
    SectionTitleBlock,
    SkillsCategoryBlock,
    SummaryBlock,
    is_splittable,
)

logger = logging.getLogger(__name__)

MEASURED = "measured"
ESTIMATED = "estimated"
HEADER_CONTACT_LINES = 3

MeasureTarget = Union[TypographyContext, TemplateConfig, None]


class LayoutContext:
    """Disposable off-page layout area sized to the page content width.

    Blocks are placed first and measured by a separate layout pass. Until
    ``run_layout`` completes, every extent reads as ``None`` ("not yet
    measured"), never as a zero height.
    """

    def __init__(self, *, typography: TypographyContext) -> None:
        self.typography = typography
        self.width = typography.content_width_pt
        self._stacks: List[List[Flowable]] = []
        self._entry_stacks: Dict[int, List[List[Flowable]]] = {}
        self._extents: List[float] | None = None
        self._entry_extents: Dict[int, List[float]] | None = None

    @property
    def laid_out(self) -> bool:
        """Return True once a layout pass has completed for the placed blocks."""
        return self._extents is not None

    @property
    def placed(self) -> int:
        """Return the number of placed blocks."""
        return len(self._stacks)

    def place(self, blocks: Sequence[Block]) -> None:
        """Render ``blocks`` into the context; extents become stale.

        Args:
            blocks: Blocks to place, in order.
        """

        self._stacks = [
            block_flowables(block, typography=self.typography) for block in blocks
        ]
        self._entry_stacks = {
            idx: [entry_flowables(item, typography=self.typography) for item in block.entries]
            for idx, block in enumerate(blocks)
            if is_splittable(block)
        }
        self._extents = None
        self._entry_extents = None

    def run_layout(self) -> None:
        """Run one full wrap pass over every placed block."""

        self._extents = [pt_to_px(stack_height(stack, self.width)) for stack in self._stacks]
        self._entry_extents = {
            idx: [pt_to_px(stack_height(stack, self.width)) for stack in stacks]
            for idx, stacks in self._entry_stacks.items()
        }

    def extent(self, index: int) -> float | None:
        """Return the measured height of a placed block in px, or None.

        Args:
            index: Position of the block in the last ``place`` call.
        Returns:
            Height in px, or None before the layout pass has run.
        """

        if self._extents is None:
            return None
        return self._extents[index]

    def extents(self) -> List[float] | None:
        """Return all measured heights, or None before the layout pass."""
        return None if self._extents is None else list(self._extents)

    def entry_extents(self) -> Dict[int, List[float]] | None:
        """Return per-entry heights of split-eligible blocks, or None."""
        if self._entry_extents is None:
            return None
        return {idx: list(values) for idx, values in self._entry_extents.items()}


class HeightResolver(Protocol):
    """Strategy that returns a block's vertical extent in px."""

    name: str

    def resolve_height(self, block: Block, context: MeasureTarget) -> float:
        """Return the height of ``block`` in px."""

    def resolve_entry_heights(self, block: ExperienceEntryBlock, context: MeasureTarget) -> List[float]:
        """Return the height of each role in a split-eligible block."""


def _require_typography(context: MeasureTarget) -> TypographyContext:
    """Return a live typography context or raise MeasurementUnavailable.

    Args:
        context: Context passed by the caller.
    Returns:
        The typography context.
    """

    if isinstance(context, TypographyContext):
        return context
    raise MeasurementUnavailable("no live typography context; measured heights unavailable")


def _config_from(context: MeasureTarget) -> TemplateConfig:
    """Return the template behind any accepted context type."""

    if isinstance(context, TypographyContext):
        return context.config
    if isinstance(context, TemplateConfig):
        return context
    return TemplateConfig()


class MeasuredHeightResolver:
    """Measure blocks with a real ReportLab wrap pass at content width."""

    name = MEASURED

    def resolve_height(self, block: Block, context: MeasureTarget) -> float:
        typography = _require_typography(context)
        layout = LayoutContext(typography=typography)
        layout.place([block])
        layout.run_layout()
        height = layout.extent(0)
        if height is None:
            raise MeasurementUnavailable("layout pass did not complete")
        return height

    def resolve_entry_heights(self, block: ExperienceEntryBlock, context: MeasureTarget) -> List[float]:
        typography = _require_typography(context)
        width = typography.content_width_pt
        return [
            pt_to_px(stack_height(entry_flowables(item, typography=typography), width))
            for item in block.entries
        ]


class EstimatedHeightResolver:
    """Analytic heights from template typography; no layout pass needed.

    Example:
        >>> resolver = EstimatedHeightResolver()
        >>> from resume_pages.pdf.pdf_types import SectionTitleBlock
        >>> round(resolver.resolve_height(SectionTitleBlock('SKILLS', 'skills'), None), 1)
        31.6
    """

    name = ESTIMATED

    def resolve_height(self, block: Block, context: MeasureTarget) -> float:
        config = _config_from(context)
        margins = config.page.margins
        sizes = config.typography.sizes
        lh = config.typography.line_heights
        rules = config.rules
        if isinstance(block, HeaderBlock):
            return (
                margins.section
                + sizes.name * lh.tight
                + sizes.caption * lh.normal * HEADER_CONTACT_LINES
            )
        if isinstance(block, SummaryBlock):
            lines = math.ceil(len(block.text) / rules.chars_per_line)
            return (
                margins.section
                + sizes.section_title * lh.tight
                + sizes.body * lh.relaxed * lines
            )
        if isinstance(block, SectionTitleBlock):
            return margins.section + sizes.section_title * lh.tight
        if isinstance(block, SkillsCategoryBlock):
            lines = math.ceil(len(block.category.visible_items()) / rules.items_per_line)
            return sizes.body * lh.normal * lines
        if isinstance(block, ExperienceEntryBlock):
            return sum(self.resolve_entry_heights(block, config))
        if isinstance(block, ProjectEntryBlock):
            project = block.project
            lines = len([b for b in project.bullets if b]) + (1 if any(project.tech) else 0)
            return margins.entry + sizes.job_title * lh.tight + sizes.body * lh.normal * lines
        if isinstance(block, EducationEntryBlock):
            return margins.entry + sizes.job_title * lh.tight + sizes.caption * lh.normal
        raise TypeError(f"unsupported block type {type(block).__name__}")

    def resolve_entry_heights(self, block: ExperienceEntryBlock, context: MeasureTarget) -> List[float]:
        config = _config_from(context)
        margins = config.page.margins
        sizes = config.typography.sizes
        lh = config.typography.line_heights
        limit = config.rules.max_bullets_per_role
        return [
            margins.entry
            + sizes.job_title * lh.tight
            + sizes.caption * lh.normal
            + sizes.body * lh.normal * min(len(item.bullets), limit)
            for item in block.entries
        ]


@dataclass(slots=True)
class ResolvedHeights:
    """Heights for one block sequence plus the strategy that produced them.

    Args:
        heights: Height per block in px.
        entry_heights: Per-role heights keyed by index of split-eligible blocks.
        strategy: ``measured`` or ``estimated``.
    """

    heights: List[float]
    entry_heights: Dict[int, List[float]] = field(default_factory=dict)
    strategy: str = MEASURED

    @property
    def provisional(self) -> bool:
        """Return True when heights are estimates that must not ship."""
        return self.strategy != MEASURED


@dataclass(slots=True)
class HeightCache:
    """Memoize resolved heights per block and typography fingerprint.

    A change to content, width or typography yields a new key, so stale
    entries are never read; ``clear`` drops everything after a font change.
    """

    _heights: Dict[tuple, Tuple[float, Tuple[float, ...] | None]] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0

    def get(self, key: tuple) -> Tuple[float, Tuple[float, ...] | None] | None:
        value = self._heights.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: tuple, height: float, entries: Sequence[float] | None) -> None:
        self._heights[key] = (height, tuple(entries) if entries is not None else None)

    def clear(self) -> None:
        """Forget every cached height."""
        self._heights.clear()

    def __len__(self) -> int:
        return len(self._heights)


def resolver_for(strategy: str | HeightResolver) -> HeightResolver:
    """Return the resolver for a strategy name or pass an instance through.

    Raises:
        ValueError: Unknown strategy name.
    """

    if not isinstance(strategy, str):
        return strategy
    if strategy == MEASURED:
        return MeasuredHeightResolver()
    if strategy == ESTIMATED:
        return EstimatedHeightResolver()
    raise ValueError(f"unknown height strategy {strategy!r}")


def _fingerprint(context: MeasureTarget) -> tuple:
    """Return a cache key component for a context."""

    if isinstance(context, TypographyContext):
        return context.fingerprint
    return (_config_from(context),)


def _measure_live(
    *, blocks: Sequence[Block], typography: TypographyContext, cache: HeightCache | None
) -> ResolvedHeights:
    """Measure uncached blocks in a single layout pass.

    Args:
        blocks: Blocks to measure.
        typography: Live typography context.
        cache: Optional height cache.
    Returns:
        Measured heights.
    """

    fingerprint = typography.fingerprint
    heights: List[float | None] = [None] * len(blocks)
    entry_heights: Dict[int, List[float]] = {}
    pending: List[int] = []
    for idx, block in enumerate(blocks):
        cached = cache.get((MEASURED, fingerprint, block)) if cache is not None else None
        if cached is None:
            pending.append(idx)
            continue
        heights[idx] = cached[0]
        if cached[1] is not None:
            entry_heights[idx] = list(cached[1])
    if pending:
        layout = LayoutContext(typography=typography)
        layout.place([blocks[idx] for idx in pending])
        layout.run_layout()
        extents = layout.extents()
        entries = layout.entry_extents()
        if extents is None or entries is None:
            raise MeasurementUnavailable("layout pass did not complete")
        for local, idx in enumerate(pending):
            heights[idx] = extents[local]
            if local in entries:
                entry_heights[idx] = entries[local]
            if cache is not None:
                cache.put((MEASURED, fingerprint, blocks[idx]), extents[local], entries.get(local))
    return ResolvedHeights(
        heights=[float(h) for h in heights if h is not None],
        entry_heights=entry_heights,
        strategy=MEASURED,
    )


def _measure_with(
    *,
    blocks: Sequence[Block],
    resolver: HeightResolver,
    context: MeasureTarget,
    cache: HeightCache | None,
) -> ResolvedHeights:
    """Resolve heights block by block with any resolver.

    Args:
        blocks: Blocks to resolve.
        resolver: Strategy to use.
        context: Context handed to the resolver.
        cache: Optional height cache.
    Returns:
        Heights tagged with the resolver's strategy name.
    """

    fingerprint = _fingerprint(context)
    heights: List[float] = []
    entry_heights: Dict[int, List[float]] = {}
    for idx, block in enumerate(blocks):
        key = (resolver.name, fingerprint, block)
        cached = cache.get(key) if cache is not None else None
        if cached is not None:
            height, entries = cached[0], (list(cached[1]) if cached[1] is not None else None)
        else:
            height = resolver.resolve_height(block, context)
            entries = (
                resolver.resolve_entry_heights(block, context) if is_splittable(block) else None
            )
            if cache is not None:
                cache.put(key, height, entries)
        if height < 0:
            raise ValueError(f"{resolver.name} resolver returned a negative height for {block.key}")
        heights.append(float(height))
        if entries is not None:
            entry_heights[idx] = entries
    return ResolvedHeights(heights=heights, entry_heights=entry_heights, strategy=resolver.name)


def measure_blocks(
    blocks: Sequence[Block],
    strategy: str | HeightResolver = MEASURED,
    context: MeasureTarget = None,
    *,
    cache: HeightCache | None = None,
) -> ResolvedHeights:
    """Resolve heights for ``blocks`` and report which strategy was used.

    A measured request without a live typography context falls back to
    estimates; the result is then marked provisional.

    Args:
        blocks: Blocks in order.
        strategy: ``measured``, ``estimated`` or a resolver instance.
        context: Typography context (measured) or template (estimated).
        cache: Optional height cache.
    Returns:
        ResolvedHeights parallel to ``blocks``.
    """

    resolver = resolver_for(strategy)
    if isinstance(resolver, MeasuredHeightResolver):
        try:
            typography = _require_typography(context)
        except MeasurementUnavailable as exc:
            logger.info("%s; falling back to estimated heights", exc)
            resolver = EstimatedHeightResolver()
        else:
            return _measure_live(blocks=blocks, typography=typography, cache=cache)
    return _measure_with(blocks=blocks, resolver=resolver, context=context, cache=cache)


def resolve_heights(
    blocks: Sequence[Block],
    strategy: str | HeightResolver = MEASURED,
    context: MeasureTarget = None,
) -> List[float]:
    """Return one height in px per block.

    Args:
        blocks: Blocks in order.
        strategy: ``measured``, ``estimated`` or a resolver instance.
        context: Typography context (measured) or template (estimated).
    Returns:
        Non-negative heights parallel to ``blocks``.
    """

    return measure_blocks(blocks, strategy, context).heights
