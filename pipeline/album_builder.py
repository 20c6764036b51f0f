"""AlbumDocumentBuilder — turn an AlbumProject into a paginated photo album.

Page sequence:
  - one cover page: project name centred, subtitle below it
  - per item, in input order: a fresh page with the image at the top and
    the story text flowed beneath it, continuing onto extra pages as needed

Items are resolved strictly one at a time so the page order always matches
the item order. A failing item is replaced by a visible placeholder line;
only a failure to save the finished document escapes the build.

Writes: <output_dir>/<name>_fotoalbum.pdf
"""
import asyncio
import logging
import re
from pathlib import Path

from models.album import AlbumItem, AlbumProject
from models.design import AlbumLayout
from models.media import MediaError
from pipeline.media_resolver import MediaResolver
from pipeline.page_flow import PageFlowEngine
from pipeline.placement import InvalidDimensionsError, place
from pipeline.render_sink import DocumentSink, PdfSink
from pipeline.text_flow import flow_text
from settings import Settings
from utils.fonts import FontMetrics, PillowFontMetrics

logger = logging.getLogger(__name__)

DEFAULT_SUBTITLE = "Ett fotoalbum genererat av REMI Story"
ITEM_FAILURE = "Kunde inte ladda text/bild för: {name}"


def run(
    settings: Settings,
    project: AlbumProject,
    sink: DocumentSink | None = None,
    metrics: FontMetrics | None = None,
    layout: AlbumLayout | None = None,
) -> Path:
    """Build the album synchronously and return the saved document path."""
    if layout is None:
        layout = AlbumLayout.load_or_default(settings.layout_yaml_path)
    if sink is None:
        sink = PdfSink(settings.output_dir, layout, settings.font_name)
    if metrics is None:
        metrics = PillowFontMetrics(settings.font_name)

    async def _build() -> Path:
        async with MediaResolver(timeout=settings.fetch_timeout_s) as resolver:
            return await build_album(project, sink, resolver, metrics, layout, settings.subtitle)

    return asyncio.run(_build())


async def build_album(
    project: AlbumProject,
    sink: DocumentSink,
    resolver: MediaResolver,
    metrics: FontMetrics,
    layout: AlbumLayout,
    subtitle: str = DEFAULT_SUBTITLE,
) -> Path:
    """Draw the cover and every item into ``sink``, then save it."""
    _draw_cover(sink, project.name, subtitle, metrics, layout)

    engine = PageFlowEngine(sink, layout)
    failed = 0
    for index, item in enumerate(project.items, start=1):
        engine.start_page()
        try:
            ok = await _render_item(item, engine, resolver, metrics, layout)
        except Exception as exc:
            logger.warning("  [%d] %s — FAILED: %s", index, item.label, exc)
            engine.write_note(ITEM_FAILURE.format(name=item.label))
            ok = False
        if not ok:
            failed += 1

    output_path = sink.save(album_filename_stem(project.name))

    logger.info("Album complete → %s", output_path)
    logger.info("  Items:        %d", len(project.items))
    logger.info("  Failed items: %d", failed)
    logger.info("  Pages:        %d", engine.pages_started + 1)
    return output_path


def album_filename_stem(name: str) -> str:
    """'Sommar 2024' → 'sommar_2024_fotoalbum'."""
    slug = re.sub(r"\s+", "_", name).lower()
    return f"{slug}_fotoalbum"


# ---------------------------------------------------------------------------
# Cover page
# ---------------------------------------------------------------------------

def _draw_cover(
    sink: DocumentSink,
    title: str,
    subtitle: str,
    metrics: FontMetrics,
    layout: AlbumLayout,
) -> None:
    page = layout.page
    typo = layout.typography
    title_y = page.height_mm / 2

    sink.new_page()
    title_width = metrics.text_width(title, typo.cover_title_pt, bold=True)
    sink.draw_text(title, (page.width_mm - title_width) / 2, title_y, typo.cover_title_pt, bold=True)
    subtitle_width = metrics.text_width(subtitle, typo.story_pt)
    sink.draw_text(
        subtitle,
        (page.width_mm - subtitle_width) / 2,
        title_y + layout.spacing.subtitle_offset_mm,
        typo.story_pt,
    )


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

async def _render_item(
    item: AlbumItem,
    engine: PageFlowEngine,
    resolver: MediaResolver,
    metrics: FontMetrics,
    layout: AlbumLayout,
) -> bool:
    """Draw one item on the page the engine has just started.

    Returns False when the image was replaced by a placeholder.
    """
    if item.media is None:
        result = MediaError(kind="media_unavailable")
    else:
        result = await resolver.resolve(item.media)

    if not isinstance(result, MediaError):
        try:
            placement = place(
                result.pixel_width,
                result.pixel_height,
                layout.image_max_width_mm,
                layout.image_max_height_mm,
                layout.page.width_mm,
            )
        except InvalidDimensionsError as exc:
            result = MediaError(kind="invalid_dimensions", detail=str(exc))

    if isinstance(result, MediaError):
        logger.warning("  %s — SKIPPED (%s): %s", item.label, result.kind, result.detail)
        engine.write_note(result.placeholder_text(item.label))
        return False

    engine.draw_image(result, placement)

    story = item.effective_story()
    if story:
        lines = flow_text(story, layout.page.content_width_mm, metrics, layout.typography.story_pt)
        engine.flow(lines, item.label)
    logger.debug("  %s — %dx%d %s", item.label, result.pixel_width, result.pixel_height, result.mime_type)
    return True
