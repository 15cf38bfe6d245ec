"""Pipeline collaborator interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from PIL import Image

    from formphoto.typing.models import DecodedBitmap


class ImageEncoder(Protocol):
    """Lossy encoder used by the size-constrained search."""

    def __call__(self, image: Image.Image, quality: float, *, dpi: int) -> bytes:
        """Encode an image.

        Args:
            image: RGB image to encode.
            quality: Lossy quality in `(0, 1]`.
            dpi: Resolution written into the file header.

        Returns:
            bytes: Encoded payload.
        """


class Checkpoint(Protocol):
    """Guard called at each resumption point; raises when the work must be discarded."""

    def __call__(self) -> None:
        """Raise if the owning session is no longer active."""


class BitmapHandler(Protocol):
    """Turns raw upload bytes into a decoded bitmap."""

    def __call__(self, data: bytes) -> DecodedBitmap:
        """Decode bytes.

        Args:
            data: Raw upload bytes.

        Returns:
            DecodedBitmap: Decoded bitmap.
        """
