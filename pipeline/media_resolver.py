"""MediaResolver — turn an inline or remote image reference into decoded bytes.

Each call returns a ResolvedMedia or a MediaError; a single item's failure is
never raised. Remote references get exactly one GET, no retries.
"""
import logging
from io import BytesIO

import httpx
from PIL import Image

from models.album import InlineMedia, MediaReference, RemoteMedia
from models.media import MediaError, MediaResult, ResolvedMedia

logger = logging.getLogger(__name__)

ALLOWED_SUBTYPES = frozenset({"jpeg", "jpg", "png", "gif", "webp"})


class MediaResolver:
    """Resolve MediaReferences. Use as an async context manager.

    When no client is injected, one is created on entry and closed on exit.
    Remote references need that client: resolving one outside the
    ``async with`` block raises RuntimeError. Inline data needs no client.
    ``timeout=None`` disables httpx's default timeout entirely.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def __aenter__(self) -> "MediaResolver":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def resolve(self, ref: MediaReference) -> MediaResult:
        if isinstance(ref, InlineMedia):
            return _resolve_inline(ref)
        if isinstance(ref, RemoteMedia):
            return await self._resolve_remote(ref)
        return MediaError(kind="media_unavailable")

    async def _resolve_remote(self, ref: RemoteMedia) -> MediaResult:
        if self._client is None:
            raise RuntimeError(
                "MediaResolver has no HTTP client; use it as \"async with MediaResolver(...)\" "
                "or pass client="
            )
        try:
            response = await self._client.get(ref.uri, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.debug("Fetch failed for %s: %s", ref.uri, exc)
            return MediaError(kind="fetch_failed", detail=str(exc) or type(exc).__name__)
        if not response.is_success:
            return MediaError(
                kind="fetch_failed",
                detail=f"{response.status_code} {response.reason_phrase}".strip(),
            )
        if not response.content:
            return MediaError(kind="decode_failed", detail="empty response body")

        try:
            width, height, detected_mime = _probe(response.content)
        except Exception as exc:
            return MediaError(kind="decode_failed", detail=str(exc))

        # The server's content type wins over the sniffed one when it names an image
        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        mime = content_type if content_type.startswith("image/") else detected_mime
        if mime is None or _subtype(mime) not in ALLOWED_SUBTYPES:
            return MediaError(kind="unsupported_format", detail=mime or "okänd typ")

        return ResolvedMedia(
            data=response.content,
            mime_type=_normalise_mime(mime),
            pixel_width=width,
            pixel_height=height,
        )


def _resolve_inline(ref: InlineMedia) -> MediaResult:
    if not ref.data:
        return MediaError(kind="media_unavailable")
    mime = ref.declared_mime_type.strip().lower()
    if _subtype(mime) not in ALLOWED_SUBTYPES:
        return MediaError(kind="unsupported_format", detail=mime)
    try:
        width, height, _ = _probe(ref.data)
    except Exception as exc:
        return MediaError(kind="decode_failed", detail=str(exc))
    return ResolvedMedia(
        data=ref.data,
        mime_type=_normalise_mime(mime),
        pixel_width=width,
        pixel_height=height,
    )


def _probe(data: bytes) -> tuple[int, int, str | None]:
    """Decode ``data`` fully; return (width, height, detected MIME type)."""
    with Image.open(BytesIO(data)) as img:
        img.load()
        width, height = img.size
        return width, height, Image.MIME.get(img.format or "")


def _subtype(mime: str) -> str:
    return mime.partition("/")[2]


def _normalise_mime(mime: str) -> str:
    return "image/jpeg" if mime == "image/jpg" else mime
