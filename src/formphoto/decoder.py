"""Raster image decoding."""

from __future__ import annotations

import io
from functools import cache
from typing import Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from PIL import Image, ImageOps

from formphoto.dependencies import has_heif_support
from formphoto.exceptions import DecodeError, DegradedSupportError
from formphoto.logging import get_logger
from formphoto.typing.enums import InputCategory
from formphoto.typing.models import DecodedBitmap

logger = get_logger(__name__)

DECODABLE_CATEGORIES = frozenset(
    {
        InputCategory.RASTER_DIRECT,
        InputCategory.TIFF_PHOTO,
        InputCategory.HIGH_EFFICIENCY_PHOTO,
    },
)
_DEGRADED_CATEGORIES = frozenset({InputCategory.TIFF_PHOTO, InputCategory.HIGH_EFFICIENCY_PHOTO})
_SVG_SNIFF_BYTES = 1024
# Single-channel modes wider than 8 bits; Pillow clips them instead of rescaling on convert.
_HIGH_BIT_DEPTH_MODES = frozenset({"I", "I;16", "I;16B", "I;16L", "I;16N", "F"})


@cache
def register_optional_openers() -> bool:
    """Register the HEIC/HEIF opener with Pillow when pillow-heif is installed.

    Returns:
        bool: True when HEIC/HEIF decoding is available.
    """
    if not has_heif_support():
        logger.info("HEIC/HEIF decoder plugin not installed")
        return False

    import pillow_heif  # noqa: PLC0415

    pillow_heif.register_heif_opener()
    return True


def looks_like_svg(data: bytes) -> bool:
    """Return whether the byte stream starts like an SVG document."""
    head = data[:_SVG_SNIFF_BYTES].lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    return head.startswith((b"<svg", b"<?xml", b"<!doctype svg")) and b"<svg" in head


def _decode_svg(data: bytes) -> Image.Image:
    """Render an SVG document at its intrinsic size with PyMuPDF."""
    if fitz is None:
        raise ValueError("PyMuPDF is required to render SVG documents")
    with fitz.open(stream=data, filetype="svg") as doc:
        pix = doc.load_page(0).get_pixmap(alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def _decode_pillow(data: bytes) -> Image.Image:
    """Fully decode the first frame of a raster stream, honoring EXIF orientation."""
    with Image.open(io.BytesIO(data)) as opened:
        opened.seek(0)
        opened.load()
        return ImageOps.exif_transpose(opened)


def _to_eight_bit(image: Image.Image) -> Image.Image:
    """Rescale 16-bit, 32-bit integer or float grayscale to 8-bit `L`.

    Integer samples are treated as 16-bit. Float samples in `[0, 1]` are
    treated as normalized, wider float ranges as 16-bit.
    """
    if image.mode not in _HIGH_BIT_DEPTH_MODES:
        return image
    if image.mode == "F":
        _, highest = image.getextrema()
        scale = 255.0 if highest <= 1.0 else 1 / 256
        return image.point(lambda value: value * scale).convert("L")
    return image.convert("I").point(lambda value: value / 256).convert("L")


def decode(data: bytes, category: InputCategory) -> DecodedBitmap:
    """Decode a raster byte stream into a bitmap.

    Args:
        data: Raw upload bytes.
        category: Category the upload was classified as.

    Raises:
        DecodeError: If the category is not a raster category or the stream cannot be parsed.
        DegradedSupportError: If a TIFF or HEIC/HEIF stream cannot be decoded by this runtime.

    Returns:
        DecodedBitmap: Decoded bitmap.
    """
    if category not in DECODABLE_CATEGORIES:
        raise DecodeError(category=category, message=f"Category '{category}' cannot be decoded as a raster image")

    if category is InputCategory.HIGH_EFFICIENCY_PHOTO:
        register_optional_openers()

    is_svg = category is InputCategory.RASTER_DIRECT and looks_like_svg(data)
    try:
        image = _decode_svg(data) if is_svg else _to_eight_bit(_decode_pillow(data))
    except Exception as exc:
        logger.warning("Image decode failed", extra={"category": category.value, "error": str(exc)})
        if category in _DEGRADED_CATEGORIES:
            raise DegradedSupportError(category=category, message=str(exc) or type(exc).__name__) from exc
        raise DecodeError(category=category) from exc

    logger.info(
        "Image decoded",
        extra={"category": category.value, "width": image.width, "height": image.height, "mode": image.mode},
    )
    return DecodedBitmap.from_image(image, category=category)
