"""Helpers for embedding local images in multi-modal prompts."""

from __future__ import annotations

import base64
import logging
import mimetypes

from pathlib import Path

from promptcraft.exceptions import ImageLoadError

MAX_IMAGE_MB = 20
MAX_IMAGE_BYTES = MAX_IMAGE_MB * 1024 * 1024

_LOGGER = logging.getLogger(__name__)


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def encode_image_bytes(data: bytes, mime_type: str) -> str:
    """Return a base64 ``data:`` URL for raw image bytes."""

    if not mime_type.startswith("image/"):
        raise ImageLoadError(f"Not an image MIME type: {mime_type}")
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def image_to_data_url(path: str | Path) -> str:
    """Read a local image file and encode it as a ``data:`` URL."""

    image_path = Path(path).expanduser()
    if not image_path.is_file():
        raise ImageLoadError(f"Image file not found: {image_path}")
    size = image_path.stat().st_size
    if size > MAX_IMAGE_BYTES:
        raise ImageLoadError(
            f"Image {image_path} is {size} bytes; limit is {MAX_IMAGE_MB} MB"
        )
    mime_type, _ = mimetypes.guess_type(image_path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ImageLoadError(
            f"Cannot determine an image type for {image_path}"
        )
    _LOGGER.debug("Encoding %s (%d bytes) as %s", image_path, size, mime_type)
    return encode_image_bytes(image_path.read_bytes(), mime_type)
