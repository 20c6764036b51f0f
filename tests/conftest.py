from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from models.design import AlbumLayout
from settings import Settings


class FixedWidthMetrics:
    """Every character is ``char_mm`` wide at 10 pt, scaled linearly with size."""

    def __init__(self, char_mm: float = 2.0):
        self.char_mm = char_mm

    def text_width(self, text: str, size_pt: float, bold: bool = False) -> float:
        return len(text) * self.char_mm * size_pt / 10.0


def make_image_bytes(width: int, height: int, fmt: str = "PNG") -> bytes:
    """Encode a solid-colour image with Pillow."""
    buf = BytesIO()
    Image.new("RGB", (width, height), (200, 120, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def metrics() -> FixedWidthMetrics:
    return FixedWidthMetrics()


@pytest.fixture
def layout() -> AlbumLayout:
    return AlbumLayout()


@pytest.fixture
def png_800x600() -> bytes:
    return make_image_bytes(800, 600)


@pytest.fixture
def tmp_settings(tmp_path: Path) -> Settings:
    """Settings writing into a fresh temp directory, with no layout file present."""
    return Settings(
        output_dir=tmp_path / "output",
        layout_yaml_path=tmp_path / "album.yaml",
    )
