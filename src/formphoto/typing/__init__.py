"""Typing-centric domain modules."""

from formphoto.typing.enums import EncodedFormat, InputCategory, SmoothingQuality, SupportLevel
from formphoto.typing.models import (
    CroppedBitmap,
    CropRectangle,
    DecodedBitmap,
    EncodedArtifact,
    EncoderOptions,
    LoadResult,
    TargetSpec,
    UploadedFile,
)
from formphoto.typing.protocol import BitmapHandler, Checkpoint, ImageEncoder

__all__ = [
    "BitmapHandler",
    "Checkpoint",
    "CropRectangle",
    "CroppedBitmap",
    "DecodedBitmap",
    "EncodedArtifact",
    "EncodedFormat",
    "EncoderOptions",
    "ImageEncoder",
    "InputCategory",
    "LoadResult",
    "SmoothingQuality",
    "SupportLevel",
    "TargetSpec",
    "UploadedFile",
]
