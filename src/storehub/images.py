"""Image attachment pipeline.

Turns an operator-selected image file into a self-contained
``data:`` URL that can be stored inside an entity record. Base64
inflates the payload by roughly a third, so raw inputs over the limit
are rejected before any decoding happens.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from storehub.errors import ImageTooLargeError, ImageUnreadableError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 2 * 1024 * 1024

# Pillow format name -> MIME type for formats a browser can render inline.
ACCEPTED_FORMATS: dict[str, str] = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
}

DATA_URL_PREFIX = "data:"


def encode_image(data: bytes, *, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Validate raw image bytes and return them as a data URL.

    Raises:
        ImageTooLargeError: If ``data`` is larger than ``max_bytes``.
        ImageUnreadableError: If Pillow cannot identify the image or the
            format is not one of ``ACCEPTED_FORMATS``.
    """
    if len(data) > max_bytes:
        raise ImageTooLargeError(len(data), max_bytes)

    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ImageUnreadableError(f"Could not decode image: {exc}") from exc

    mime = ACCEPTED_FORMATS.get(fmt or "")
    if mime is None:
        raise ImageUnreadableError(f"Unsupported image format: {fmt}")

    encoded = base64.b64encode(data).decode("ascii")
    logger.debug("Encoded %s image (%d bytes)", fmt, len(data))
    return f"{DATA_URL_PREFIX}{mime};base64,{encoded}"


def decoded_size(data_url: str) -> int:
    """Approximate decoded size of a base64 data URL without decoding it."""
    encoded = data_url.split(",", 1)[-1]
    padding = 2 if encoded.endswith("==") else 1 if encoded.endswith("=") else 0
    return (len(encoded) * 3) // 4 - padding


async def attach_image(data: bytes, *, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Async wrapper around :func:`encode_image`; decoding runs off-loop."""
    if len(data) > max_bytes:
        raise ImageTooLargeError(len(data), max_bytes)
    return await asyncio.to_thread(encode_image, data, max_bytes=max_bytes)


async def attach_image_file(path: Path, *, max_bytes: int = MAX_IMAGE_BYTES) -> str:
    """Read an image file and attach it. The size check uses the file size."""
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise ImageUnreadableError(f"Cannot read {path}: {exc}") from exc
    if size > max_bytes:
        raise ImageTooLargeError(size, max_bytes)
    data = await asyncio.to_thread(path.read_bytes)
    return await attach_image(data, max_bytes=max_bytes)


class ImageDraft:
    """Pending image for a create/edit form.

    Holds the encoded image until the form is submitted or discarded.
    A failed selection leaves the previous value untouched.
    """

    def __init__(self, initial: str | None = None, *, max_bytes: int = MAX_IMAGE_BYTES) -> None:
        self.value = initial
        self.max_bytes = max_bytes

    async def select(self, data: bytes) -> str:
        encoded = await attach_image(data, max_bytes=self.max_bytes)
        self.value = encoded
        return encoded

    async def select_file(self, path: Path) -> str:
        encoded = await attach_image_file(path, max_bytes=self.max_bytes)
        self.value = encoded
        return encoded

    def discard(self) -> None:
        self.value = None

    @property
    def is_set(self) -> bool:
        return self.value is not None
