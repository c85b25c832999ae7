"""
Data URL and image payload helpers for facadegen.

Images travel through the client as data URLs (``data:image/png;base64,...``).
This module parses and builds them, checks for the PNG signature, verifies
that payloads decode as images, and turns image files into data URLs for the CLI.
"""

import base64
import binascii
import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from facadegen.logging_config import get_logger
from facadegen.utils.exceptions import ImageProcessingError, ValidationError

logger = get_logger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Formats the service accepts as inline image parts, keyed by Pillow format name
SERVICE_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}

# Images larger than this are downscaled before upload
DEFAULT_MAX_UPLOAD_PIXELS = 4_000_000

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


def is_png(data: bytes) -> bool:
    """Return True if data starts with the PNG file signature."""
    return data[: len(PNG_SIGNATURE)] == PNG_SIGNATURE


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Split a base64 data URL into its mime type and decoded payload.

    Args:
        data_url: String of the form ``data:<mime>;base64,<payload>``

    Returns:
        (mime_type, payload_bytes); mime_type is lower-cased and may be empty

    Raises:
        ValidationError: If the string is not a base64 data URL or the payload is invalid
    """
    if not isinstance(data_url, str):
        raise ValidationError("Image must be a data URL string", field="image")
    text = data_url.strip()
    if not text.startswith(_DATA_URL_PREFIX):
        raise ValidationError("Not a data URL", field="image")
    idx = text.find(_BASE64_MARKER)
    if idx == -1:
        raise ValidationError("Data URL missing ;base64, part", field="image")
    mime = text[len(_DATA_URL_PREFIX) : idx].strip().lower()
    try:
        payload = base64.b64decode(text[idx + len(_BASE64_MARKER) :], validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 in data URL: {e}", field="image") from e
    if not payload:
        raise ValidationError("Data URL payload is empty", field="image")
    return mime, payload


def build_data_url(data: bytes | str, mime_type: str) -> str:
    """
    Build a data URL from raw bytes or an already base64-encoded string.

    Args:
        data: Raw image bytes, or base64 text as returned by the service
        mime_type: Mime type to declare (e.g. image/jpeg)

    Returns:
        ``data:<mime_type>;base64,<payload>``
    """
    encoded = base64.b64encode(data).decode("ascii") if isinstance(data, bytes) else data
    return f"{_DATA_URL_PREFIX}{mime_type}{_BASE64_MARKER}{encoded}"


def decode_image(data: bytes) -> Image.Image:
    """
    Decode image bytes with Pillow.

    Raises:
        ImageProcessingError: If the bytes are not a readable image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageProcessingError(f"Failed to decode image: {e}") from e


def decoded_mime_type(data: bytes) -> str:
    """
    Decode data with Pillow and return the mime type of what was actually decoded.

    Raises:
        ImageProcessingError: If the bytes are not a readable image
    """
    image = decode_image(data)
    fmt = (image.format or "").upper()
    if not fmt:
        raise ImageProcessingError("Decoded image has no format")
    return Image.MIME.get(fmt, f"image/{fmt.lower()}")


def _fit_pixels(image: Image.Image, max_pixels: int) -> Image.Image:
    """Downscale image to at most max_pixels, preserving aspect ratio."""
    width, height = image.size
    if width * height <= max_pixels:
        return image
    scale = (max_pixels / (width * height)) ** 0.5
    size = (max(1, int(width * scale)), max(1, int(height * scale)))
    logger.debug("Downscaling image %dx%d -> %dx%d", width, height, *size)
    return image.resize(size, Image.Resampling.LANCZOS)


def image_bytes_to_data_url(
    data: bytes,
    max_pixels: int = DEFAULT_MAX_UPLOAD_PIXELS,
    source: str = "",
) -> str:
    """
    Convert raw image bytes into a data URL the service accepts.

    PNG, JPEG and WebP within max_pixels are passed through untouched. Anything
    else is re-encoded: PNG when the image has an alpha channel (logos), JPEG
    otherwise.

    Raises:
        ImageProcessingError: If the bytes are not a readable image
    """
    image = decode_image(data)
    mime = SERVICE_MIME_TYPES.get(image.format or "")
    width, height = image.size
    if mime and width * height <= max_pixels:
        return build_data_url(data, mime)

    image = _fit_pixels(image, max_pixels)
    buffer = io.BytesIO()
    if image.mode in ("RGBA", "LA", "P"):
        image.convert("RGBA").save(buffer, format="PNG")
        mime = "image/png"
    else:
        image.convert("RGB").save(buffer, format="JPEG", quality=95)
        mime = "image/jpeg"
    logger.debug("Re-encoded image %s as %s", source or "<bytes>", mime)
    return build_data_url(buffer.getvalue(), mime)


def image_file_to_data_url(
    path: str | Path,
    max_pixels: int = DEFAULT_MAX_UPLOAD_PIXELS,
) -> str:
    """
    Read an image file and return it as a data URL.

    Raises:
        FileNotFoundError: If the file does not exist
        ImageProcessingError: If the file is not a readable image
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image file not found: {file_path}")
    try:
        return image_bytes_to_data_url(file_path.read_bytes(), max_pixels, str(file_path))
    except ImageProcessingError as e:
        raise ImageProcessingError(str(e), image_path=str(file_path)) from e


def write_data_url(data_url: str, path: str | Path) -> Path:
    """Decode a data URL and write its payload to path. Returns the written path."""
    _mime, payload = parse_data_url(data_url)
    out = Path(path)
    out.write_bytes(payload)
    return out


def extension_for_mime(mime_type: str) -> str:
    """File extension for an image mime type (image/jpeg -> jpg)."""
    subtype = mime_type.split("/", 1)[-1].split(";")[0].strip().lower()
    return {"jpeg": "jpg", "": "png"}.get(subtype, subtype)
