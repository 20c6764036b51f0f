"""Tests for RecordingSink and PdfSink (WeasyPrint mocked)."""
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from jinja2 import TemplateNotFound

from models.design import AlbumLayout
from pipeline import render_sink
from pipeline.render_sink import (
    DocumentFatalError,
    PdfSink,
    RecordingSink,
    build_font_face_css,
    render_html,
)


def _mock_weasyprint():
    """Patch the module-level _weasyprint with a fake that writes %PDF."""
    mock_wp = MagicMock()
    mock_html_instance = MagicMock()
    mock_wp.HTML.return_value = mock_html_instance
    mock_html_instance.write_pdf.side_effect = lambda path, **kw: Path(path).write_bytes(b"%PDF")
    return patch("pipeline.render_sink._weasyprint", mock_wp)


def _two_page_sink(sink: RecordingSink) -> RecordingSink:
    sink.new_page()
    sink.draw_text("Sommar 2024", 60.0, 148.5, 28.0, bold=True)
    sink.new_page()
    sink.draw_image(b"\x89PNG", "image/png", 15.0, 15.0, 180.0, 135.0)
    sink.draw_text("Vi & de <andra>", 15.0, 160.0, 10.0)
    return sink


# ---------------------------------------------------------------------------
# RecordingSink
# ---------------------------------------------------------------------------

class TestRecordingSink:
    def test_records_per_page(self):
        sink = _two_page_sink(RecordingSink())
        assert len(sink.pages) == 2
        assert sink.pages[0].lines == ["Sommar 2024"]
        assert sink.pages[1].images[0].width == 180.0

    def test_draw_before_new_page_opens_one(self):
        sink = RecordingSink()
        sink.draw_text("x", 0, 0, 10)
        assert len(sink.pages) == 1

    def test_save_returns_path_without_writing(self, tmp_path):
        sink = RecordingSink(tmp_path)
        path = sink.save("resa_fotoalbum")
        assert path == tmp_path / "resa_fotoalbum.pdf"
        assert not path.exists()


# ---------------------------------------------------------------------------
# render_html
# ---------------------------------------------------------------------------

class TestRenderHtml:
    def test_one_section_per_page(self):
        html = render_html(_two_page_sink(RecordingSink()).pages, AlbumLayout(), "DejaVu Sans")
        assert html.count('<section class="album-page">') == 2

    def test_page_size_in_css(self):
        html = render_html([], AlbumLayout(), "DejaVu Sans")
        assert "210.0mm 297.0mm" in html

    def test_text_escaped(self):
        html = render_html(_two_page_sink(RecordingSink()).pages, AlbumLayout(), "DejaVu Sans")
        assert "Vi &amp; de &lt;andra&gt;" in html

    def test_image_embedded_as_data_uri(self):
        html = render_html(_two_page_sink(RecordingSink()).pages, AlbumLayout(), "DejaVu Sans")
        assert "data:image/png;base64,iVBORw==" in html

    def test_text_positioned_by_baseline(self):
        html = render_html(_two_page_sink(RecordingSink()).pages, AlbumLayout(), "DejaVu Sans")
        assert "bottom: 137.0mm" in html
        assert "font-size: 10.0pt" in html

    def test_bold_text_class(self):
        html = render_html(_two_page_sink(RecordingSink()).pages, AlbumLayout(), "DejaVu Sans")
        assert "album-text--bold" in html


# ---------------------------------------------------------------------------
# PdfSink
# ---------------------------------------------------------------------------

class TestPdfSink:
    def test_pdf_written(self, tmp_path):
        sink = _two_page_sink(PdfSink(tmp_path / "out", AlbumLayout()))
        with _mock_weasyprint():
            path = sink.save("sommar_2024_fotoalbum")
        assert path == tmp_path / "out" / "sommar_2024_fotoalbum.pdf"
        assert path.read_bytes() == b"%PDF"

    def test_write_error_is_fatal(self, tmp_path):
        mock_wp = MagicMock()
        mock_wp.HTML.return_value.write_pdf.side_effect = PermissionError("read-only")
        sink = _two_page_sink(PdfSink(tmp_path, AlbumLayout()))
        with patch("pipeline.render_sink._weasyprint", mock_wp):
            with pytest.raises(DocumentFatalError):
                sink.save("resa_fotoalbum")

    def test_missing_weasyprint_is_fatal(self, tmp_path):
        sink = _two_page_sink(PdfSink(tmp_path, AlbumLayout()))
        with patch("pipeline.render_sink._weasyprint", None):
            with pytest.raises(DocumentFatalError):
                sink.save("resa_fotoalbum")

    def test_missing_template_is_fatal(self, tmp_path):
        sink = _two_page_sink(PdfSink(tmp_path / "out", AlbumLayout()))
        with _mock_weasyprint(), \
             patch("pipeline.render_sink._TEMPLATE_DIR", tmp_path / "no_templates"):
            with pytest.raises(DocumentFatalError) as excinfo:
                sink.save("resa_fotoalbum")
        assert isinstance(excinfo.value.__cause__, TemplateNotFound)
        assert not (tmp_path / "out" / "resa_fotoalbum.pdf").exists()

    def test_render_error_is_fatal(self, tmp_path):
        mock_wp = MagicMock()
        mock_wp.HTML.return_value.write_pdf.side_effect = ValueError("bad CSS value")
        sink = _two_page_sink(PdfSink(tmp_path, AlbumLayout()))
        with patch("pipeline.render_sink._weasyprint", mock_wp):
            with pytest.raises(DocumentFatalError, match="bad CSS value"):
                sink.save("resa_fotoalbum")

    def test_template_ships_inside_package(self):
        assert render_sink._TEMPLATE_DIR == Path(render_sink.__file__).resolve().parent / "templates"
        assert (render_sink._TEMPLATE_DIR / "album.html.j2").is_file()


# ---------------------------------------------------------------------------
# Font embedding
# ---------------------------------------------------------------------------

class TestFontFaceCss:
    def test_no_fonts_found_gives_empty_css(self, caplog):
        import logging
        with patch("pipeline.render_sink.find_font_files", return_value=[]):
            with caplog.at_level(logging.WARNING, logger="pipeline.render_sink"):
                assert build_font_face_css("Nonexistent Sans") == ""
        assert any("Nonexistent Sans" in r.getMessage() for r in caplog.records)

    def test_rule_per_variant(self):
        files = [
            (Path("/fonts/DejaVuSans.ttf"), "normal", "normal"),
            (Path("/fonts/DejaVuSans-Bold.ttf"), "bold", "normal"),
        ]
        with patch("pipeline.render_sink.find_font_files", return_value=files):
            css = build_font_face_css("DejaVu Sans")
        assert css.count("@font-face") == 2
        assert "font-weight: bold" in css
        assert "file:///fonts/DejaVuSans-Bold.ttf" in css
