"""Page-level records: the cursor used while flowing, and the draw operations a sink keeps."""
from pydantic import BaseModel, Field


class PageCursor(BaseModel):
    """Vertical write position on the page being composed.

    Created fresh for every page and owned by PageFlowEngine alone.
    """

    y_position: float
    page_has_content: bool = False


class LineBlock(BaseModel):
    text: str
    is_continuation_header: bool = False


class TextOp(BaseModel):
    text: str
    x: float
    y: float  # baseline, from the top edge of the page
    size_pt: float
    bold: bool = False


class ImageOp(BaseModel):
    data: bytes
    mime_type: str
    x: float
    y: float  # top edge
    width: float
    height: float


class PageRecord(BaseModel):
    texts: list[TextOp] = Field(default_factory=list)
    images: list[ImageOp] = Field(default_factory=list)

    @property
    def lines(self) -> list[str]:
        return [t.text for t in self.texts]
