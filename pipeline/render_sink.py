"""Document sinks: the targets of page, text and image draw calls.

RecordingSink keeps every draw operation per page; PdfSink additionally
renders those pages to HTML via Jinja2 and writes a PDF with WeasyPrint.

Coordinates are millimetres from the top-left corner of the page. Text ``y``
is the baseline, image ``y`` the top edge.
"""
import base64
import logging
from pathlib import Path
from typing import Protocol

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

try:
    import weasyprint as _weasyprint  # requires native GTK/Pango libs at runtime
except OSError:  # pragma: no cover
    _weasyprint = None  # type: ignore[assignment]

from models.design import AlbumLayout
from models.document import ImageOp, PageRecord, TextOp
from utils.fonts import find_font_files

logger = logging.getLogger(__name__)

# Shipped as package data next to this module
_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class DocumentFatalError(RuntimeError):
    """The finished document could not be written. Not recoverable."""


class DocumentSink(Protocol):
    def new_page(self) -> None: ...

    def draw_text(self, text: str, x: float, y: float, size_pt: float, bold: bool = False) -> None: ...

    def draw_image(self, data: bytes, mime_type: str, x: float, y: float, width: float, height: float) -> None: ...

    def save(self, filename_stem: str) -> Path: ...


class RecordingSink:
    """Sink that only records draw operations. ``save`` writes nothing."""

    extension = "pdf"

    def __init__(self, output_dir: Path = Path(".")):
        self.output_dir = output_dir
        self.pages: list[PageRecord] = []
        self.saved_path: Path | None = None

    def new_page(self) -> None:
        self.pages.append(PageRecord())

    def draw_text(self, text: str, x: float, y: float, size_pt: float, bold: bool = False) -> None:
        self._current().texts.append(TextOp(text=text, x=x, y=y, size_pt=size_pt, bold=bold))

    def draw_image(self, data: bytes, mime_type: str, x: float, y: float, width: float, height: float) -> None:
        self._current().images.append(
            ImageOp(data=data, mime_type=mime_type, x=x, y=y, width=width, height=height)
        )

    def save(self, filename_stem: str) -> Path:
        self.saved_path = self.output_dir / f"{filename_stem}.{self.extension}"
        return self.saved_path

    def _current(self) -> PageRecord:
        if not self.pages:
            self.new_page()
        return self.pages[-1]


class PdfSink(RecordingSink):
    """Collects pages, then renders them to a PDF on ``save``."""

    def __init__(self, output_dir: Path, layout: AlbumLayout, font_name: str = "DejaVu Sans"):
        super().__init__(output_dir)
        self.layout = layout
        self.font_name = font_name

    def save(self, filename_stem: str) -> Path:
        output_path = super().save(filename_stem)

        if _weasyprint is None:  # pragma: no cover
            raise DocumentFatalError(
                "WeasyPrint native libraries (GTK/Pango) are not available. "
                "Follow https://doc.courtbouillon.org/weasyprint/stable/first_steps.html"
            )
        try:
            html = render_html(self.pages, self.layout, self.font_name)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            font_config = _weasyprint.text.fonts.FontConfiguration()
            font_css = _weasyprint.CSS(
                string=build_font_face_css(self.font_name),
                font_config=font_config,
            )
            _weasyprint.HTML(string=html).write_pdf(
                str(output_path), stylesheets=[font_css], font_config=font_config
            )
        except (OSError, TemplateError) as exc:
            raise DocumentFatalError(f"Could not write {output_path}: {exc}") from exc
        except Exception as exc:
            # WeasyPrint reports CSS, image and layout failures with its own types
            raise DocumentFatalError(f"Could not render {output_path}: {exc}") from exc

        logger.info("PDF written → %s (%d pages)", output_path, len(self.pages))
        return output_path


# ---------------------------------------------------------------------------
# HTML rendering
# ---------------------------------------------------------------------------

def render_html(pages: list[PageRecord], layout: AlbumLayout, font_name: str) -> str:
    """Render recorded pages to an HTML string with absolutely positioned boxes."""
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
    )
    env.filters["data_uri"] = _data_uri
    template = env.get_template("album.html.j2")
    return template.render(pages=pages, page=layout.page, font_name=font_name)


def _data_uri(image: ImageOp) -> str:
    return f"data:{image.mime_type};base64,{base64.b64encode(image.data).decode('ascii')}"


# ---------------------------------------------------------------------------
# Font embedding
# ---------------------------------------------------------------------------

def build_font_face_css(font_name: str) -> str:
    """Return ``@font-face`` CSS for all variants of ``font_name`` found on disk.

    Uses explicit ``file://`` URIs so WeasyPrint embeds the font directly.
    Falls back to an empty string if no font files are found.
    """
    font_files = find_font_files(font_name)
    if not font_files:
        logger.warning("No font files found for '%s' — text may not embed correctly", font_name)
        return ""
    rules = []
    for path, weight, style in font_files:
        rules.append(
            f'@font-face {{\n'
            f'  font-family: "{font_name}";\n'
            f'  src: url({path.as_uri()});\n'
            f'  font-weight: {weight};\n'
            f'  font-style: {style};\n'
            f'}}'
        )
    logger.debug("Font-face rules for '%s': %d variants", font_name, len(rules))
    return "\n".join(rules)
