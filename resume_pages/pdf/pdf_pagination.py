"""Greedy, order-preserving assignment of blocks to fixed-capacity pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Sequence

from .pdf_constants import DEBUG_PAGINATION
from .pdf_types import Block, ExperienceEntryBlock, Page, SectionTitleBlock

logger = logging.getLogger(__name__)


def _debug(*, msg: str) -> None:
    """Log pagination trace output when enabled.

    Args:
        msg: Message to log.
    Returns:
        None.
    """

    if DEBUG_PAGINATION:
        logger.debug(msg)


@dataclass(slots=True)
class _Unit:
    """A block waiting for placement with its resolved heights."""

    block: Block
    height: float
    entry_heights: List[float] | None = None

    @property
    def splittable(self) -> bool:
        """Return True when the unit can be cut between entries."""
        return self.entry_heights is not None and len(self.entry_heights) > 1


@dataclass(slots=True)
class _AssignState:
    """Mutable state for one assignment pass."""

    capacity: float
    remaining: float
    current: Page
    pages: List[Page] = field(default_factory=list)

    def place(self, unit: _Unit) -> None:
        """Put ``unit`` on the current page and charge its height."""

        self.current.add(unit.block, unit.height)
        self.remaining -= unit.height
        _debug(
            msg=(
                f"page {len(self.pages) + 1}: placed {unit.block.key or unit.block.kind} "
                f"({unit.height:.1f}px), {self.remaining:.1f}px left"
            )
        )

    def flush(self) -> None:
        """Close the current page when it holds anything and start a fresh one."""

        if not self.current.is_empty:
            self.pages.append(self.current)
            self.current = Page(capacity=self.capacity)
        self.remaining = self.capacity


def _units(
    *,
    blocks: Sequence[Block],
    heights: Sequence[float],
    entry_heights: Mapping[int, Sequence[float]] | None,
) -> List[_Unit]:
    """Pair blocks with their heights and per-entry heights.

    Args:
        blocks: Blocks in order.
        heights: Height per block.
        entry_heights: Per-entry heights keyed by block index.
    Returns:
        Units ready for placement.
    """

    entry_heights = entry_heights or {}
    units: List[_Unit] = []
    for idx, (block, height) in enumerate(zip(blocks, heights)):
        if height < 0:
            raise ValueError(f"block {idx} has a negative height ({height})")
        entries = entry_heights.get(idx)
        if entries is not None and isinstance(block, ExperienceEntryBlock):
            if len(entries) != len(block.entries):
                raise ValueError(
                    f"block {idx} has {len(block.entries)} entries but "
                    f"{len(entries)} entry heights"
                )
            units.append(_Unit(block=block, height=float(height), entry_heights=list(entries)))
            continue
        units.append(_Unit(block=block, height=float(height)))
    return units


def _split_unit(
    *, unit: _Unit, budget: float, fresh_page: bool = False
) -> tuple[_Unit, _Unit] | None:
    """Cut a split-eligible unit so that its first part fits ``budget``.

    Entries are taken in order until the next one would not fit. Each part is
    charged the block's own overhead plus its entries. On a fresh page the
    first entry is always taken, so an entry taller than a page sits alone.

    Args:
        unit: Split-eligible unit.
        budget: Space available for the first part.
        fresh_page: True when nothing is on the page yet.
    Returns:
        (first, rest) units, or None when no entry fits or all do.
    Raises:
        TypeError: ``unit`` is not a split-eligible experience block.
    """

    block = unit.block
    if unit.entry_heights is None or not isinstance(block, ExperienceEntryBlock):
        raise TypeError(f"cannot split {block.kind} block {block.key!r}")
    overhead = max(0.0, unit.height - sum(unit.entry_heights))
    used = overhead
    count = 0
    for height in unit.entry_heights:
        if used + height > budget:
            break
        used += height
        count += 1
    if fresh_page:
        count = max(count, 1)
    if count == 0 or count == len(unit.entry_heights):
        return None
    first_heights = unit.entry_heights[:count]
    rest_heights = unit.entry_heights[count:]
    first = _Unit(
        block=replace(block, entries=block.entries[:count]),
        height=overhead + sum(first_heights),
        entry_heights=first_heights,
    )
    rest = _Unit(
        block=replace(block, entries=block.entries[count:], part=block.part + 1),
        height=overhead + sum(rest_heights),
        entry_heights=rest_heights,
    )
    return first, rest


def _place_split(
    *, state: _AssignState, units: List[_Unit], at: int, prefix: _Unit | None
) -> bool:
    """Fill the current page with the head of ``units[at]`` and queue the rest.

    Args:
        state: Assignment state.
        units: Work list; ``units[at]`` is replaced by the remainder.
        at: Index of the split-eligible unit.
        prefix: Unit glued in front of it (a section title), if any.
    Returns:
        True when a split was placed.
    """

    budget = state.remaining - (prefix.height if prefix is not None else 0.0)
    parts = _split_unit(unit=units[at], budget=budget, fresh_page=state.current.is_empty)
    if parts is None:
        return False
    first, rest = parts
    if prefix is not None:
        state.place(prefix)
    state.place(first)
    _debug(
        msg=(
            f"split {first.block.key}: {len(first.entry_heights or [])} entries kept, "
            f"{len(rest.entry_heights or [])} moved to the next page"
        )
    )
    state.flush()
    units[at] = rest
    return True


def _number_split_parts(pages: List[Page]) -> None:
    """Set ``parts`` on every piece of a split experience block."""

    totals: Dict[str, int] = {}
    for page in pages:
        for block in page.blocks:
            if isinstance(block, ExperienceEntryBlock) and block.part > 0:
                totals[block.key] = max(totals.get(block.key, 1), block.part + 1)
    if not totals:
        return
    for page in pages:
        page.blocks = [
            replace(block, parts=totals[block.key])
            if isinstance(block, ExperienceEntryBlock) and block.key in totals
            else block
            for block in page.blocks
        ]


def assign_to_pages(
    blocks: Sequence[Block],
    heights: Sequence[float],
    capacity: float,
    entry_heights: Mapping[int, Sequence[float]] | None = None,
) -> List[Page]:
    """Pack blocks into pages in a single forward pass.

    A section title and the block after it go onto the same page. A block
    that does not fit moves to a fresh page; a block taller than a whole page
    is placed alone. Split-eligible experience blocks are cut between roles
    instead of moving whole. Order is never changed.

    Args:
        blocks: Blocks in document order.
        heights: Resolved height per block in px.
        capacity: Content height of one page in px.
        entry_heights: Per-role heights for split-eligible blocks, keyed by
            block index. Blocks without an entry here are atomic.
    Returns:
        Pages in order; empty for an empty block list.
    Raises:
        ValueError: Heights do not line up with blocks, a height is negative,
            or capacity is not positive.
    """

    if len(blocks) != len(heights):
        raise ValueError(f"got {len(blocks)} blocks but {len(heights)} heights")
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")
    if not blocks:
        return []

    units = _units(blocks=blocks, heights=heights, entry_heights=entry_heights)
    state = _AssignState(capacity=capacity, remaining=capacity, current=Page(capacity=capacity))
    idx = 0
    while idx < len(units):
        unit = units[idx]
        following = units[idx + 1] if idx + 1 < len(units) else None
        if isinstance(unit.block, SectionTitleBlock) and following is not None:
            glued = unit.height + following.height
            if glued > state.remaining:
                if following.splittable and _place_split(
                    state=state, units=units, at=idx + 1, prefix=unit
                ):
                    idx += 1
                    continue
                state.flush()
                if glued > state.remaining and following.splittable and _place_split(
                    state=state, units=units, at=idx + 1, prefix=unit
                ):
                    idx += 1
                    continue
            state.place(unit)
            state.place(following)
            idx += 2
            continue
        if unit.height > state.remaining:
            if unit.splittable and _place_split(state=state, units=units, at=idx, prefix=None):
                continue
            state.flush()
            if unit.height > state.remaining:
                if unit.splittable and _place_split(state=state, units=units, at=idx, prefix=None):
                    continue
                _debug(msg=f"{unit.block.key or unit.block.kind} exceeds a full page; placing alone")
        state.place(unit)
        idx += 1
    state.flush()
    _number_split_parts(state.pages)
    return state.pages
