"""Font discovery and text measurement.

The same TTF/OTF files are used to measure text while flowing it and to
embed it in the PDF, so line breaks match what ends up on paper.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Standard directories where TTF/OTF fonts live on Linux/macOS
_FONT_SEARCH_DIRS = [
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".local/share/fonts",
    Path.home() / ".fonts",
]

# Filename fragment → (CSS font-weight, CSS font-style)
_FONT_STYLE_MAP = {
    "bolditalic": ("bold", "italic"),
    "boldoblique": ("bold", "oblique"),
    "bold":       ("bold", "normal"),
    "italic":     ("normal", "italic"),
    "oblique":    ("normal", "oblique"),
    "regular":    ("normal", "normal"),
    "book":       ("normal", "normal"),
}

_PT_TO_MM = 25.4 / 72.0

# Measure at a large nominal size and scale down, for sub-point precision
_REFERENCE_SIZE = 100


def find_font_files(font_name: str, search_dirs: list[Path] | None = None) -> list[tuple[Path, str, str]]:
    """Scan font directories for TTF/OTF files matching ``font_name``.

    Returns a list of (path, css_weight, css_style) tuples. Accepts
    "DejaVuSans-Bold" and "DejaVu-Sans-Bold" but not "DejaVuSansMono".
    """
    slug_hyphenated = font_name.lower().replace(" ", "-")
    slug_nohyphen = font_name.lower().replace(" ", "")
    results: list[tuple[Path, str, str]] = []
    for base in search_dirs if search_dirs is not None else _FONT_SEARCH_DIRS:
        if not base.exists():
            continue
        for path in sorted(base.rglob("*")):
            if path.suffix.lower() not in (".ttf", ".otf"):
                continue
            stem = path.stem.lower()
            for slug in (slug_hyphenated, slug_nohyphen):
                if stem == slug or stem.startswith(slug + "-"):
                    suffix = stem[len(slug):].lstrip("-")
                    break
            else:
                continue
            weight, style = "normal", "normal"
            for fragment, (w, s) in _FONT_STYLE_MAP.items():
                if fragment in suffix:
                    weight, style = w, s
                    break
            results.append((path, weight, style))
    return results


class FontMetrics(Protocol):
    def text_width(self, text: str, size_pt: float, bold: bool = False) -> float:
        """Rendered width of ``text`` in millimetres."""
        ...


class PillowFontMetrics:
    """Measures text with Pillow's FreeType bindings.

    Falls back to Pillow's bundled default font when ``font_name`` is not
    installed; widths are then approximate.
    """

    def __init__(self, font_name: str = "DejaVu Sans", search_dirs: list[Path] | None = None):
        self.font_name = font_name
        files = find_font_files(font_name, search_dirs)
        self._regular = _pick_variant(files, "normal")
        self._bold = _pick_variant(files, "bold") or self._regular
        if self._regular is None:
            logger.warning("No font files found for '%s' — using Pillow default font for measuring", font_name)

    def text_width(self, text: str, size_pt: float, bold: bool = False) -> float:
        font = _load_font(self._bold if bold else self._regular)
        return font.getlength(text) * size_pt / _REFERENCE_SIZE * _PT_TO_MM


def _pick_variant(files: list[tuple[Path, str, str]], weight: str) -> Path | None:
    return next((p for p, w, s in files if w == weight and s == "normal"), None)


@lru_cache(maxsize=8)
def _load_font(path: Path | None):
    if path is None:
        return ImageFont.load_default(size=_REFERENCE_SIZE)
    return ImageFont.truetype(str(path), size=_REFERENCE_SIZE)
