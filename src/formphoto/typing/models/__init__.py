"""Core domain model exports."""

from formphoto.typing.models.artifact import EncodedArtifact, EncoderOptions, LoadResult
from formphoto.typing.models.bitmap import CroppedBitmap, CropRectangle, DecodedBitmap
from formphoto.typing.models.target import TargetSpec
from formphoto.typing.models.upload import UploadedFile

__all__ = [
    "CropRectangle",
    "CroppedBitmap",
    "DecodedBitmap",
    "EncodedArtifact",
    "EncoderOptions",
    "LoadResult",
    "TargetSpec",
    "UploadedFile",
]
