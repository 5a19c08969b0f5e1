import base64
import binascii
import io
import re
from typing import Optional

from PIL import Image, UnidentifiedImageError

from app.core.config import settings

ALLOWED_FORMATS = {"JPEG", "PNG", "WEBP"}

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,", re.IGNORECASE)


class ImagePayloadError(ValueError):
    """A client-supplied image could not be turned into an uploadable file."""


def get_public_id_from_url(url: str) -> Optional[str]:
    """
    Extracts the public ID from a Cloudinary URL.
    Input:  https://.../upload/v1234/restaurant-reviews/abc123.jpg
    Output: restaurant-reviews/abc123
    """
    if not url:
        return None
    # Everything after '/upload/' (ignoring version v123) and before extension
    match = re.search(r'/upload/(?:v\d+/)?(.+)\.[^./]+$', url)
    return match.group(1) if match else None


def decode_image_payload(payload: str) -> bytes:
    """Decode a base64 (or data URI) image into normalized JPEG bytes.

    Raises ImagePayloadError when the payload is not valid base64, exceeds
    MAX_IMAGE_BYTES or MAX_IMAGE_PIXELS, or is not a JPEG, PNG or WebP image.
    """
    if not payload or not payload.strip():
        raise ImagePayloadError("Image payload is empty")

    encoded = _DATA_URI_RE.sub("", payload.strip(), count=1)
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ImagePayloadError("Image payload is not valid base64")

    if len(raw) > settings.MAX_IMAGE_BYTES:
        raise ImagePayloadError(
            f"Image exceeds the {settings.MAX_IMAGE_BYTES // (1024 * 1024)}MB limit"
        )

    try:
        image = Image.open(io.BytesIO(raw))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        raise ImagePayloadError("Payload is not a readable image")

    if image.format not in ALLOWED_FORMATS:
        raise ImagePayloadError("Only JPEG, PNG, or WebP images allowed")

    # Header dimensions only; pixel data is not decoded yet
    width, height = image.size
    if width * height > settings.MAX_IMAGE_PIXELS:
        raise ImagePayloadError(f"Image is {width}x{height}, above the {settings.MAX_IMAGE_PIXELS} pixel limit")

    try:
        image.load()
    except (Image.DecompressionBombError, OSError):
        raise ImagePayloadError("Payload is not a readable image")

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    image.thumbnail((settings.MAX_IMAGE_DIMENSION, settings.MAX_IMAGE_DIMENSION))

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=80, optimize=True)
    return buffer.getvalue()
