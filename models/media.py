from typing import Literal

from pydantic import BaseModel

MediaErrorKind = Literal[
    "media_unavailable",
    "unsupported_format",
    "fetch_failed",
    "decode_failed",
    "invalid_dimensions",
]

# Swedish placeholder lines written into the album in place of the image
_PLACEHOLDERS: dict[str, str] = {
    "media_unavailable": "Bilddata saknas för: {name}",
    "invalid_dimensions": "Bilddata saknas för: {name}",
    "unsupported_format": "Bildformatet stöds inte ({detail}): {name}",
    "fetch_failed": "Kunde inte ladda bilddata (nätverksfel): {name}",
    "decode_failed": "Kunde inte tolka bilddata: {name}",
}


class ResolvedMedia(BaseModel):
    """Decoded image ready for placement."""

    data: bytes
    mime_type: str
    pixel_width: int
    pixel_height: int


class MediaError(BaseModel):
    """Why an item's image could not be resolved. Returned, never raised."""

    kind: MediaErrorKind
    detail: str = ""

    def placeholder_text(self, name: str) -> str:
        return _PLACEHOLDERS[self.kind].format(name=name, detail=self.detail or "okänt")


MediaResult = ResolvedMedia | MediaError
