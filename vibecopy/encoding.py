"""Conversion of picked images into inline data URLs.

The generation provider only accepts inline image payloads, so every image
goes through :class:`ImageEncoder` before it is submitted. Local files are
encoded as soon as they are picked; remote samples are fetched lazily the
first time a generation needs them.
"""

import asyncio
import base64
import binascii
import datetime
import io
import logging
import re
from pathlib import Path
from typing import Optional, Tuple, Union

import httpx
from PIL import Image, UnidentifiedImageError

from vibecopy.errors import ImageFetchError
from vibecopy.models import ImageReference

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE: str = "image/jpeg"
"""MIME type assumed for bare base64 payloads without a data URL prefix."""

FETCH_TIMEOUT_SECONDS: float = 15.0

FETCH_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) VibeCopy/0.1",
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}

SUPPORTED_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"})
"""Image types the generation provider accepts as inline data."""

# Multi-picture JPEGs from phone cameras are plain JPEG to every consumer.
FORMAT_ALIASES = {"MPO": "JPEG"}

_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


# =============================================================================
# PURE FUNCTIONS
# =============================================================================


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a ``data:<mime>;base64,...`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"


def split_data_url(data_url: str) -> Tuple[str, str]:
    """Split an inline payload into its MIME type and base64 body.

    Bare base64 strings are accepted and reported as :data:`DEFAULT_MIME_TYPE`.

    Args:
        data_url: A data URL or a bare base64 string.

    Returns:
        A ``(mime_type, base64_data)`` tuple.
    """
    match = _DATA_URL_PATTERN.match(data_url)
    if match is None:
        return DEFAULT_MIME_TYPE, data_url
    return match.group("mime"), match.group("data")


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Return ``(mime_type, raw_bytes)`` for an inline payload.

    Raises:
        ValueError: If the base64 body is malformed.
    """
    mime_type, payload = split_data_url(data_url)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Malformed base64 image payload: {e}") from e


def sniff_image_mime(data: bytes) -> Optional[str]:
    """Identify image bytes with Pillow.

    Returns:
        The MIME type Pillow reports for the image format, or None when the
        bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None
    if image_format is None:
        return None
    image_format = FORMAT_ALIASES.get(image_format, image_format)
    return Image.MIME.get(image_format, f"image/{image_format.lower()}")


def generate_filename(prefix: str = "vibecopy", extension: str = "png") -> str:
    """Create a timestamped filename for an exported result.

    Example:
        >>> generate_filename()
        'vibecopy_20250115_143022.png'
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def extension_for_mime(mime_type: str) -> str:
    """Map an image MIME type to a file extension."""
    subtype = mime_type.split("/", 1)[-1].lower()
    return {"jpeg": "jpg", "svg+xml": "svg"}.get(subtype, subtype)


# =============================================================================
# SIDE EFFECTS
# =============================================================================


def save_data_url(data_url: str, filename: Union[str, Path]) -> Path:
    """Write the image carried by ``data_url`` to ``filename``.

    Returns:
        The path that was written.

    Raises:
        ValueError: If the payload is not valid base64.
        OSError: If the file cannot be written.
    """
    _, data = decode_data_url(data_url)
    path = Path(filename)
    path.write_bytes(data)
    return path


class ImageEncoder:
    """Produce inline data URLs for :class:`ImageReference` objects.

    Attributes:
        transport: Optional httpx transport, used to fake the network in
            tests. None means the default network transport.
        timeout: Timeout in seconds for remote fetches.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self.transport = transport
        self.timeout = timeout

    async def encode(self, image: ImageReference) -> str:
        """Return the inline payload for ``image``, fetching it if needed.

        An image that already carries ``encoded_data`` is returned as is
        without touching the network.

        Raises:
            ImageFetchError: If the fetch fails or yields something that is
                not an image.
        """
        if image.encoded_data:
            logger.debug("Image %s already encoded", image.id)
            return image.encoded_data
        return await self.fetch_as_data_url(image.display_url)

    async def fetch_as_data_url(self, url: str) -> str:
        """Download ``url`` and encode the body as a data URL."""
        if url.startswith("data:"):
            # Already inline, only needs validating.
            try:
                _, data = decode_data_url(url)
            except ValueError as e:
                raise ImageFetchError(str(e)) from e
            return self._validated_data_url(data, url)

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout, headers=FETCH_HEADERS) as client:
            try:
                response = await client.get(url, follow_redirects=True)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ImageFetchError(f"Image server error {e.response.status_code} for {url}") from e
            except httpx.RequestError as e:
                raise ImageFetchError(f"Failed to fetch image {url}: {e}") from e

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            raise ImageFetchError(f"URL is not a direct image link: {url}")
        logger.info("Fetched %d bytes from %s", len(response.content), url)
        return self._validated_data_url(response.content, url)

    async def read_local_file(self, path: Union[str, Path], image_id: str = "source") -> ImageReference:
        """Read a picked file and wrap it as a local image reference.

        The file is read on a worker thread so the event loop stays free.

        Raises:
            ImageFetchError: If the file cannot be read or is not an image.
        """
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            raise ImageFetchError(f"Could not read {path}: {e}") from e
        data_url = self._validated_data_url(data, str(path))
        return ImageReference(id=image_id, display_url=data_url, encoded_data=data_url, is_local=True)

    @staticmethod
    def _validated_data_url(data: bytes, origin: str) -> str:
        mime_type = sniff_image_mime(data)
        if mime_type is None:
            raise ImageFetchError(f"Not a readable image: {origin}")
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise ImageFetchError(f"Unsupported image type {mime_type}: {origin}")
        return to_data_url(data, mime_type)
