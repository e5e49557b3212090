"""
Coalesced, snapshot-ordered recomputation of a document's page stack.

The session is single-threaded and cooperative. Edits only mark work as
pending; the host drives progress by calling ``poll`` from its event loop.
A recomputation runs in two steps so that a fresh display can be shown
before measured heights exist:

1. When the debounce window has passed, the session snapshots the blocks,
   commits a provisional page stack built from estimated heights and places
   the blocks into a disposable layout context.
2. On the next ``poll`` the layout pass completes and the measured page
   stack replaces the provisional one, unless a newer edit arrived in
   between, in which case the pass is dropped.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from .errors import MeasurementUnavailable, StaleSnapshot
from .models import ResumeDocument
from .pdf.pdf_blocks import decompose
from .pdf.pdf_measure import ESTIMATED, MEASURED, HeightCache, LayoutContext, measure_blocks
from .pdf.pdf_pagination import assign_to_pages
from .pdf.pdf_settings import FontFamily, TemplateConfig, TypographyContext, build_typography
from .pdf.pdf_story import RenderedPage, render_pages
from .pdf.pdf_types import Block, PageSet, ValidationReport
from .pdf.pdf_validation import validate

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.15

PageCountListener = Callable[[int], None]


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable input of one layout pass."""

    version: int
    blocks: Tuple[Block, ...]
    config: TemplateConfig


@dataclass(slots=True)
class _LayoutPass:
    """A started pass waiting for its layout step.

    Args:
        snapshot: Input the pass was started from.
        typography: Typography the blocks were placed with.
        layout: Context holding the uncached blocks.
        pending: Indexes of ``snapshot.blocks`` placed into ``layout``.
        heights: Heights known so far, by block index.
        entry_heights: Per-role heights known so far, by block index.
    """

    snapshot: Snapshot
    typography: TypographyContext
    layout: LayoutContext
    pending: List[int]
    heights: Dict[int, float] = field(default_factory=dict)
    entry_heights: Dict[int, List[float]] = field(default_factory=dict)


class LayoutSession:
    """Keep a committed page stack in sync with an edited document.

    Args:
        config: Template configuration; validated immediately.
        document: Initial document; an empty one when None.
        debounce: Seconds of quiet required after the last edit.
        clock: Monotonic time source; injectable for tests.
        fonts: Optional pre-registered font family.
    Raises:
        ConfigurationError: The template is unusable.
    """

    def __init__(
        self,
        config: TemplateConfig,
        *,
        document: ResumeDocument | None = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        fonts: FontFamily | None = None,
    ) -> None:
        self._typography = build_typography(config, fonts=fonts)
        self._fonts = fonts
        self._document = document or ResumeDocument.empty()
        self._debounce = debounce
        self._clock = clock
        self._version = 0
        self._due: float | None = None
        self._inflight: _LayoutPass | None = None
        self._committed: PageSet | None = None
        self._exportable: PageSet | None = None
        self._report: ValidationReport | None = None
        self._listeners: List[PageCountListener] = []
        self._notified_count: int | None = None
        self.cache = HeightCache()
        self._trigger()

    @property
    def config(self) -> TemplateConfig:
        return self._typography.config

    @property
    def typography(self) -> TypographyContext:
        return self._typography

    @property
    def document(self) -> ResumeDocument:
        return self._document

    @property
    def version(self) -> int:
        """Return the current snapshot version."""
        return self._version

    @property
    def committed(self) -> PageSet | None:
        """Return the page stack on display (possibly provisional)."""
        return self._committed

    @property
    def exportable(self) -> PageSet | None:
        """Return the last page stack built from measured heights."""
        return self._exportable

    @property
    def report(self) -> ValidationReport | None:
        """Return validator output for the committed page stack."""
        return self._report

    @property
    def pending(self) -> bool:
        """Return True while a recomputation is scheduled or in flight."""
        return self._due is not None or self._inflight is not None

    def subscribe(self, callback: PageCountListener) -> Callable[[], None]:
        """Call ``callback(count)`` whenever the measured page count changes.

        Args:
            callback: Listener receiving the new page count.
        Returns:
            A function that removes the listener.
        """

        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # Triggers

    def set_document(self, document: ResumeDocument) -> None:
        """Replace the document and schedule a recomputation."""

        self._document = document
        self._trigger()

    def set_config(self, config: TemplateConfig) -> None:
        """Switch templates; an unusable template leaves the session untouched.

        Raises:
            ConfigurationError: The template is unusable.
        """

        self._typography = build_typography(
            config, fonts=self._fonts, font_epoch=self._typography.font_epoch
        )
        self._trigger()

    def fonts_changed(self, fonts: FontFamily | None = None) -> None:
        """Record that font metrics changed; every cached height is dropped.

        Args:
            fonts: Newly registered family, or None to keep the current one.
        """

        if fonts is not None:
            self._fonts = fonts
        self.cache.clear()
        self._typography = build_typography(
            self.config, fonts=self._fonts, font_epoch=self._typography.font_epoch + 1
        )
        self._trigger()

    def _trigger(self) -> None:
        self._version += 1
        self._due = self._clock() + self._debounce
        logger.debug("snapshot %d scheduled", self._version)

    # Host cycle

    def poll(self, now: float | None = None) -> PageSet | None:
        """Advance pending work by one step.

        Args:
            now: Current time; the session clock when None.
        Returns:
            The committed page stack after this step.
        """

        now = self._clock() if now is None else now
        if self._inflight is not None:
            self._finish_inflight()
            return self._committed
        if self._due is not None and now >= self._due:
            self._start_pass()
        return self._committed

    def flush(self) -> PageSet | None:
        """Complete all pending work now and return the committed stack."""

        if self._inflight is not None:
            self._finish_inflight()
        if self._due is not None:
            self._start_pass()
            if self._inflight is not None:
                self._finish_inflight()
        return self._committed

    def export_pages(self) -> List[RenderedPage]:
        """Return the rendered stack of the latest measured layout.

        Pending work is flushed first, so the result always reflects the
        current document and is never provisional.
        """

        self.flush()
        if self._exportable is None:
            return []
        return render_pages(self._exportable, self._typography)

    # Pass steps

    def _start_pass(self) -> None:
        """Snapshot, commit estimated pages and place blocks for layout."""

        self._due = None
        typography = self._typography
        snapshot = Snapshot(
            version=self._version,
            blocks=tuple(decompose(self._document, typography.config)),
            config=typography.config,
        )
        estimate = measure_blocks(snapshot.blocks, ESTIMATED, typography, cache=self.cache)
        self._commit(self._page_set(snapshot, estimate.heights, estimate.entry_heights, True))

        pending: List[int] = []
        known: Dict[int, float] = {}
        known_entries: Dict[int, List[float]] = {}
        for idx, block in enumerate(snapshot.blocks):
            cached = self.cache.get((MEASURED, typography.fingerprint, block))
            if cached is None:
                pending.append(idx)
                continue
            known[idx] = cached[0]
            if cached[1] is not None:
                known_entries[idx] = list(cached[1])
        layout = LayoutContext(typography=typography)
        layout.place([snapshot.blocks[idx] for idx in pending])
        self._inflight = _LayoutPass(
            snapshot=snapshot,
            typography=typography,
            layout=layout,
            pending=pending,
            heights=known,
            entry_heights=known_entries,
        )
        logger.debug(
            "snapshot %d placed: %d block(s) to measure, %d cached",
            snapshot.version,
            len(pending),
            len(known),
        )

    def _finish_inflight(self) -> None:
        """Complete the in-flight pass, dropping it when superseded."""

        layout_pass = self._inflight
        self._inflight = None
        if layout_pass is None:
            return
        try:
            self._complete(layout_pass)
        except StaleSnapshot as exc:
            logger.debug("discarding layout pass: %s", exc)
        except MeasurementUnavailable as exc:
            logger.info("%s; keeping provisional pages for snapshot %d", exc, layout_pass.snapshot.version)

    def _complete(self, layout_pass: _LayoutPass) -> None:
        """Run the layout step and commit measured pages.

        Raises:
            StaleSnapshot: A newer snapshot exists.
            MeasurementUnavailable: The layout step produced no extents.
        """

        snapshot = layout_pass.snapshot
        if snapshot.version != self._version:
            raise StaleSnapshot(snapshot.version, self._version)
        layout = layout_pass.layout
        layout.run_layout()
        extents = layout.extents()
        entry_extents = layout.entry_extents()
        if extents is None or entry_extents is None:
            raise MeasurementUnavailable("layout pass did not complete")
        fingerprint = layout_pass.typography.fingerprint
        heights = dict(layout_pass.heights)
        entry_heights = dict(layout_pass.entry_heights)
        for local, idx in enumerate(layout_pass.pending):
            heights[idx] = extents[local]
            entries = entry_extents.get(local)
            if entries is not None:
                entry_heights[idx] = entries
            self.cache.put((MEASURED, fingerprint, snapshot.blocks[idx]), extents[local], entries)
        ordered = [heights[idx] for idx in range(len(snapshot.blocks))]
        self._commit(self._page_set(snapshot, ordered, entry_heights, False))

    def _page_set(
        self,
        snapshot: Snapshot,
        heights: List[float],
        entry_heights: Dict[int, List[float]],
        provisional: bool,
    ) -> PageSet:
        capacity = snapshot.config.capacity
        pages = assign_to_pages(snapshot.blocks, heights, capacity, entry_heights=entry_heights)
        return PageSet(
            pages=pages, capacity=capacity, provisional=provisional, version=snapshot.version
        )

    def _commit(self, page_set: PageSet) -> None:
        """Swap in ``page_set`` as one step and notify on page-count change.

        Provisional commits never notify; listeners only see measured counts.
        """

        self._committed = page_set
        self._report = validate(page_set, self.config)
        if not page_set.provisional:
            self._exportable = page_set
        logger.debug(
            "committed snapshot %d: %d page(s)%s",
            page_set.version,
            page_set.page_count,
            " (provisional)" if page_set.provisional else "",
        )
        if not page_set.provisional and page_set.page_count != self._notified_count:
            self._notified_count = page_set.page_count
            for listener in list(self._listeners):
                listener(page_set.page_count)
