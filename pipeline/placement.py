"""Fit an image into the album's image block."""
from pydantic import BaseModel


class InvalidDimensionsError(ValueError):
    """Pixel dimensions that cannot produce an aspect ratio."""


class Placement(BaseModel):
    render_width: float
    render_height: float
    origin_x: float


def place(
    pixel_width: int,
    pixel_height: int,
    max_width: float,
    max_height: float,
    page_width: float,
) -> Placement:
    """Scale to ``max_width`` first, then shrink to ``max_height`` if still too tall.

    The image is centred horizontally on the page.
    """
    if pixel_height <= 0 or pixel_width <= 0:
        raise InvalidDimensionsError(f"invalid pixel dimensions {pixel_width}x{pixel_height}")

    aspect = pixel_width / pixel_height
    render_width = max_width
    render_height = render_width / aspect
    if render_height > max_height:
        render_height = max_height
        render_width = render_height * aspect

    return Placement(
        render_width=render_width,
        render_height=render_height,
        origin_x=(page_width - render_width) / 2,
    )
