"""Album layout model — typed representation of album.yaml.

Lengths are in millimetres, font sizes in points. Every field has a default
matching the A4 portrait album, so the layout is usable without a YAML file.
"""
from pathlib import Path

from pydantic import BaseModel, Field


class PageDimensions(BaseModel):
    width_mm: float = 210.0
    height_mm: float = 297.0
    margin_top_mm: float = 15.0
    margin_bottom_mm: float = 15.0
    margin_left_mm: float = 15.0
    margin_right_mm: float = 15.0

    @property
    def content_width_mm(self) -> float:
        return self.width_mm - self.margin_left_mm - self.margin_right_mm

    @property
    def content_height_mm(self) -> float:
        return self.height_mm - self.margin_top_mm - self.margin_bottom_mm


class Typography(BaseModel):
    title_pt: float = 20.0
    cover_title_offset_pt: float = 8.0
    story_pt: float = 10.0
    continuation_offset_pt: float = 2.0
    line_height_factor: float = 1.0

    @property
    def cover_title_pt(self) -> float:
        return self.title_pt + self.cover_title_offset_pt

    @property
    def continuation_pt(self) -> float:
        return self.story_pt - self.continuation_offset_pt

    def line_height(self, size_pt: float) -> float:
        """Line advance in document units: font size times the line-height factor."""
        return size_pt * self.line_height_factor


class Spacing(BaseModel):
    image_max_height_ratio: float = Field(default=0.6, gt=0.0, le=1.0)
    post_image_gap_mm: float = 10.0
    continuation_advance_mm: float = 7.0
    subtitle_offset_mm: float = 10.0
    placeholder_offset_mm: float = 10.0


class AlbumLayout(BaseModel):
    """Complete album geometry loaded from album.yaml."""

    page: PageDimensions = Field(default_factory=PageDimensions)
    typography: Typography = Field(default_factory=Typography)
    spacing: Spacing = Field(default_factory=Spacing)

    @property
    def image_max_width_mm(self) -> float:
        return self.page.content_width_mm

    @property
    def image_max_height_mm(self) -> float:
        return self.page.height_mm * self.spacing.image_max_height_ratio

    @classmethod
    def load(cls, path: Path) -> "AlbumLayout":
        """Load from a YAML file. Missing fields use Pydantic defaults.

        Raises FileNotFoundError if path does not exist.
        """
        import yaml
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path) -> "AlbumLayout":
        """Load from path if it exists, otherwise return the default layout."""
        if path.exists():
            return cls.load(path)
        return cls()
