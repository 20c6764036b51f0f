"""Album input model — the resolved snapshot handed to the document builder.

Collaborator code (project/image storage) builds these before a build starts.
Whether an image is inline or remote is decided here, once, via the ``kind``
tag; the builder never sniffs URL prefixes.
"""
import base64
from typing import Annotated, Literal
from urllib.parse import unquote_to_bytes

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

UNKNOWN_IMAGE_NAME = "Okänd bild"


def _split_data_url(value: str) -> tuple[str | None, bytes]:
    """Split a ``data:`` URL into (mime type, payload bytes).

    Plain strings without the ``data:`` prefix are treated as base64 text.
    """
    if not value.startswith("data:"):
        return None, base64.b64decode(value)
    header, _, body = value.partition(",")
    mime = header[len("data:"):].split(";")[0] or None
    if ";base64" in header:
        return mime, base64.b64decode(body)
    return mime, unquote_to_bytes(body)


class InlineMedia(BaseModel):
    """Image bytes carried directly in the album item."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    data: bytes
    declared_mime_type: str

    @model_validator(mode="before")
    @classmethod
    def unpack_data_url(cls, values):
        # JSON input carries the bytes as a data URL or base64 text
        if isinstance(values, dict) and isinstance(values.get("data"), str):
            values = dict(values)
            mime, payload = _split_data_url(values["data"])
            values["data"] = payload
            if mime and not values.get("declared_mime_type"):
                values["declared_mime_type"] = mime
        return values

    @field_serializer("data")
    def serialize_data(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")


class RemoteMedia(BaseModel):
    """Image reachable with a plain HTTP GET (already signed if needed)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    uri: str


MediaReference = Annotated[InlineMedia | RemoteMedia, Field(discriminator="kind")]


class UserDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    description: str


class AlbumItem(BaseModel):
    """One image-plus-text unit. Immutable snapshot used only for rendering."""

    model_config = ConfigDict(frozen=True)

    display_name: str = ""
    media: MediaReference | None = None
    story_text: str | None = None
    uploaded_by_user_id: str | None = None
    user_descriptions: tuple[UserDescription, ...] = ()

    @property
    def label(self) -> str:
        """Name shown in placeholders and continuation headers."""
        return self.display_name.strip() or UNKNOWN_IMAGE_NAME

    def effective_story(self) -> str | None:
        """Compiled story if present, else the uploader's own description.

        Descriptions by other contributors are never used as a fallback.
        """
        if self.story_text:
            return self.story_text
        if self.uploaded_by_user_id is None:
            return None
        own = next(
            (d for d in self.user_descriptions if d.user_id == self.uploaded_by_user_id),
            None,
        )
        if own and own.description:
            return own.description
        return None


class AlbumProject(BaseModel):
    name: str
    items: list[AlbumItem] = Field(default_factory=list)
