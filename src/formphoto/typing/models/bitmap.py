"""Bitmap and crop geometry models."""

from __future__ import annotations

from typing import Self

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, model_validator

from formphoto.typing.enums import InputCategory


class _ImageHolder(BaseModel):
    """Shared validation for models wrapping a Pillow image."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    pixel_width: int = Field(gt=0)
    pixel_height: int = Field(gt=0)
    image: Image.Image

    @model_validator(mode="after")
    def _check_image_size(self) -> Self:
        if self.image.size != (self.pixel_width, self.pixel_height):
            message = (
                f"Image size {self.image.size} does not match declared "
                f"{self.pixel_width}x{self.pixel_height}"
            )
            raise ValueError(message)
        return self

    @classmethod
    def from_image(cls, image: Image.Image, **kwargs: object) -> Self:
        """Build the model from an image, reading dimensions from it."""
        width, height = image.size
        return cls(pixel_width=width, pixel_height=height, image=image, **kwargs)


class DecodedBitmap(_ImageHolder):
    """Decoded pixels of one upload."""

    category: InputCategory


class CroppedBitmap(_ImageHolder):
    """RGB bitmap resampled to exactly the target dimensions."""


class CropRectangle(BaseModel):
    """Bitmap-relative crop region."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x: float = Field(ge=0)
    y: float = Field(ge=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    @property
    def right(self) -> float:
        """Return the exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Return the exclusive bottom edge."""
        return self.y + self.height

    @property
    def aspect_ratio(self) -> float:
        """Return width / height."""
        return self.width / self.height

    def box(self) -> tuple[float, float, float, float]:
        """Return the rectangle as a Pillow `(left, upper, right, lower)` box."""
        return (self.x, self.y, self.right, self.bottom)
