"""Crop and resample a bitmap to the exact target resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL import Image

from formphoto.logging import get_logger
from formphoto.typing.enums import SmoothingQuality
from formphoto.typing.models import CroppedBitmap, CropRectangle

if TYPE_CHECKING:
    from formphoto.typing.models import DecodedBitmap, TargetSpec

logger = get_logger(__name__)

# Relative aspect-ratio slack left for interactive cropping surfaces that snap to whole pixels.
ASPECT_TOLERANCE = 0.02
_EDGE_EPSILON = 1e-6

_RESAMPLING: dict[SmoothingQuality, Image.Resampling] = {
    SmoothingQuality.LOW: Image.Resampling.BILINEAR,
    SmoothingQuality.MEDIUM: Image.Resampling.BICUBIC,
    SmoothingQuality.HIGH: Image.Resampling.LANCZOS,
}
_WHITE = (255, 255, 255, 255)


def _flatten_to_rgb(image: Image.Image) -> Image.Image:
    """Return an RGB image, compositing any transparency over white."""
    if image.mode == "RGB":
        return image
    if image.mode in {"RGBA", "LA", "PA"} or "transparency" in image.info:
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, _WHITE)
        return Image.alpha_composite(background, rgba).convert("RGB")
    return image.convert("RGB")


def default_crop_rect(bitmap: DecodedBitmap, target: TargetSpec, *, coverage: float = 0.9) -> CropRectangle:
    """Return a centered crop rectangle locked to the target aspect ratio.

    The rectangle is the largest aspect-locked box fitting in the bitmap,
    shrunk by `coverage` on each side.

    Args:
        bitmap: Decoded bitmap.
        target: Target spec providing the aspect ratio.
        coverage: Linear share of the fitting box to keep, in `(0, 1]`.

    Raises:
        ValueError: If coverage is outside `(0, 1]`.

    Returns:
        CropRectangle: Centered rectangle.
    """
    if not 0 < coverage <= 1:
        raise ValueError(f"coverage must be in (0, 1], got {coverage}")

    bitmap_width = float(bitmap.pixel_width)
    bitmap_height = float(bitmap.pixel_height)
    ratio = target.aspect_ratio
    if bitmap_width / bitmap_height > ratio:
        height = bitmap_height
        width = height * ratio
    else:
        width = bitmap_width
        height = width / ratio

    width *= coverage
    height *= coverage
    return CropRectangle(
        x=(bitmap_width - width) / 2,
        y=(bitmap_height - height) / 2,
        width=width,
        height=height,
    )


def crop(
    bitmap: DecodedBitmap,
    rect: CropRectangle,
    target: TargetSpec,
    *,
    smoothing: SmoothingQuality = SmoothingQuality.HIGH,
) -> CroppedBitmap:
    """Resample a crop rectangle to exactly `target.width x target.height` pixels.

    Args:
        bitmap: Decoded bitmap.
        rect: Crop region, aspect-locked to the target by the cropping surface.
        target: Target spec.
        smoothing: Resampling quality.

    Returns:
        CroppedBitmap: RGB bitmap of the exact target size.
    """
    assert rect.right <= bitmap.pixel_width + _EDGE_EPSILON, "crop exceeds bitmap width"  # noqa: S101
    assert rect.bottom <= bitmap.pixel_height + _EDGE_EPSILON, "crop exceeds bitmap height"  # noqa: S101
    assert abs(rect.aspect_ratio / target.aspect_ratio - 1) <= ASPECT_TOLERANCE, "crop aspect mismatch"  # noqa: S101

    left, upper, right, lower = rect.box()
    box = (left, upper, min(right, float(bitmap.pixel_width)), min(lower, float(bitmap.pixel_height)))
    resized = _flatten_to_rgb(bitmap.image).resize(
        (target.width, target.height),
        resample=_RESAMPLING[smoothing],
        box=box,
    )
    logger.debug(
        "Bitmap cropped",
        extra={"box": box, "width": target.width, "height": target.height, "smoothing": smoothing.value},
    )
    return CroppedBitmap.from_image(resized)
