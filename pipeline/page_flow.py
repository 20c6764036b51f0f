"""PageFlowEngine — the pagination state machine.

Owns the PageCursor for the page being composed. Every page-break decision
is taken before a line is drawn, never after it has overflowed.

When story text runs past the bottom margin the engine starts a new page and
writes a continuation header, in a smaller font, before resuming the text:

    (Fortsättning för: Midsommar vid sjön)
"""
import logging
from typing import Iterable

from models.design import AlbumLayout
from models.document import LineBlock, PageCursor
from models.media import ResolvedMedia
from pipeline.placement import Placement
from pipeline.render_sink import DocumentSink

logger = logging.getLogger(__name__)

CONTINUATION_HEADER = "(Fortsättning för: {name})"


def needs_page_break(
    cursor_y: float,
    line_height: float,
    page_height: float,
    bottom_margin: float,
) -> bool:
    """True when a line starting at ``cursor_y`` would cross the bottom margin."""
    return cursor_y + line_height > page_height - bottom_margin


class PageFlowEngine:
    def __init__(self, sink: DocumentSink, layout: AlbumLayout):
        self._sink = sink
        self._layout = layout
        self._cursor: PageCursor | None = None
        self.pages_started = 0

    @property
    def line_height(self) -> float:
        typo = self._layout.typography
        return typo.line_height(typo.story_pt)

    def start_page(self) -> None:
        """Ask the sink for a new page and reset the cursor to the top margin."""
        self._sink.new_page()
        self._cursor = PageCursor(y_position=self._layout.page.margin_top_mm)
        self.pages_started += 1

    def advance(self, distance: float) -> None:
        self._cursor.y_position += distance

    def draw_image(self, media: ResolvedMedia, placement: Placement) -> None:
        """Draw the image at the cursor, then move below it by the post-image gap."""
        self._sink.draw_image(
            media.data,
            media.mime_type,
            placement.origin_x,
            self._cursor.y_position,
            placement.render_width,
            placement.render_height,
        )
        self._cursor.page_has_content = True
        self.advance(placement.render_height + self._layout.spacing.post_image_gap_mm)

    def flow(self, lines: Iterable[LineBlock], display_name: str) -> int:
        """Draw story lines, breaking pages as needed. Returns the number of breaks."""
        breaks = 0
        for block in lines:
            if self._no_room():
                self.start_page()
                breaks += 1
                header = LineBlock(
                    text=CONTINUATION_HEADER.format(name=display_name),
                    is_continuation_header=True,
                )
                self._draw(header)
                self.advance(self._layout.spacing.continuation_advance_mm)
            self._draw(block)
            self.advance(self.line_height)
        if breaks:
            logger.debug("Story for %s continued over %d extra page(s)", display_name, breaks)
        return breaks

    def write_note(self, text: str) -> None:
        """Write a single placeholder line at body size.

        On an empty page the note sits a fixed offset below the top margin.
        """
        if not self._cursor.page_has_content:
            self.advance(self._layout.spacing.placeholder_offset_mm)
        if self._no_room():
            self.start_page()
        self._draw(LineBlock(text=text))
        self.advance(self.line_height)

    def _no_room(self) -> bool:
        page = self._layout.page
        return needs_page_break(
            self._cursor.y_position,
            self.line_height,
            page.height_mm,
            page.margin_bottom_mm,
        )

    def _draw(self, block: LineBlock) -> None:
        typo = self._layout.typography
        size = typo.continuation_pt if block.is_continuation_header else typo.story_pt
        self._sink.draw_text(block.text, self._layout.page.margin_left_mm, self._cursor.y_position, size)
        self._cursor.page_has_content = True
