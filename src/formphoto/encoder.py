"""Size-constrained JPEG encoding.

The search walks the quality axis downwards in fixed steps and stops at the
first encode that fits the byte budget. It assumes encoded size does not grow
as quality drops, which holds for photographic content but is not guaranteed
for synthetic or near-incompressible images; the scan is kept linear and
bounded regardless.
"""

from __future__ import annotations

import asyncio
import io
from typing import TYPE_CHECKING

from formphoto.async_runner import run_async
from formphoto.logging import get_logger
from formphoto.typing.models import EncodedArtifact, EncoderOptions

if TYPE_CHECKING:
    from PIL import Image

    from formphoto.typing.models import CroppedBitmap, TargetSpec
    from formphoto.typing.protocol import Checkpoint, ImageEncoder

logger = get_logger(__name__)


def _pillow_quality(quality: float) -> int:
    """Map a `(0, 1]` quality onto Pillow's integer JPEG quality scale."""
    return min(max(round(quality * 100), 1), 100)


def encode_jpeg(image: Image.Image, quality: float, *, dpi: int) -> bytes:
    """Encode an RGB image as baseline JPEG.

    Args:
        image: Image to encode.
        quality: Lossy quality in `(0, 1]`.
        dpi: Resolution stored in the JFIF header.

    Returns:
        bytes: JPEG payload.
    """
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=_pillow_quality(quality), dpi=(dpi, dpi))
    return buffer.getvalue()


def next_quality(quality: float, options: EncoderOptions) -> float:
    """Return the next quality to try, never going below `options.min_quality`."""
    return max(round(quality - options.quality_step, 4), options.min_quality)


async def aencode_within_budget(
    bitmap: CroppedBitmap,
    target: TargetSpec,
    *,
    options: EncoderOptions | None = None,
    encode: ImageEncoder = encode_jpeg,
    checkpoint: Checkpoint | None = None,
) -> EncodedArtifact:
    """Re-encode at decreasing quality until the output fits the byte budget.

    Each encode runs in a worker thread and is awaited before the next quality
    is chosen. The search stops at the first encode within budget, once the
    minimum quality was tried, or after `options.max_iterations` encodes.

    Args:
        bitmap: Cropped bitmap to encode.
        target: Target spec with the byte budget and DPI.
        options: Search bounds. Defaults to `EncoderOptions()`.
        encode: Encoder called with `(image, quality, dpi=...)`.
        checkpoint: Called before every encode and before returning; raising aborts the search.

    Returns:
        EncodedArtifact: The first artifact within budget, else the last one with `over_budget=True`.
    """
    opts = options or EncoderOptions()
    quality = opts.initial_quality
    iterations = 0

    while True:
        if checkpoint is not None:
            checkpoint()
        data = await asyncio.to_thread(encode, bitmap.image, quality, dpi=target.dpi)
        iterations += 1
        logger.debug(
            "Encode step",
            extra={"iteration": iterations, "quality": quality, "size": len(data), "budget": target.max_size_bytes},
        )
        if len(data) <= target.max_size_bytes:
            break
        if quality <= opts.min_quality or iterations >= opts.max_iterations:
            break
        quality = next_quality(quality, opts)

    if checkpoint is not None:
        checkpoint()

    artifact = EncodedArtifact(
        data=data,
        byte_size=len(data),
        quality_used=quality,
        over_budget=len(data) > target.max_size_bytes,
        iterations=iterations,
        width=bitmap.pixel_width,
        height=bitmap.pixel_height,
    )
    logger.info(
        "Compression completed",
        extra={
            "final_size": artifact.byte_size,
            "final_quality": artifact.quality_used,
            "iterations": artifact.iterations,
            "within_limit": not artifact.over_budget,
        },
    )
    return artifact


def encode_within_budget(
    bitmap: CroppedBitmap,
    target: TargetSpec,
    *,
    options: EncoderOptions | None = None,
    encode: ImageEncoder = encode_jpeg,
) -> EncodedArtifact:
    """Run `aencode_within_budget` from synchronous code.

    Args:
        bitmap: Cropped bitmap to encode.
        target: Target spec with the byte budget and DPI.
        options: Search bounds. Defaults to `EncoderOptions()`.
        encode: Encoder called with `(image, quality, dpi=...)`.

    Returns:
        EncodedArtifact: Search result.
    """
    return run_async(aencode_within_budget(bitmap, target, options=options, encode=encode))
