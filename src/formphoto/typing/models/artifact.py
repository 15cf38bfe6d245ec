"""Pipeline stage result models."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from formphoto.typing.enums import InputCategory, SupportLevel
from formphoto.typing.models.bitmap import DecodedBitmap


class EncoderOptions(BaseModel):
    """Bounds of the quality search."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    initial_quality: float = Field(default=0.92, gt=0.0, le=1.0)
    quality_step: float = Field(default=0.07, gt=0.0, le=1.0)
    min_quality: float = Field(default=0.30, gt=0.0, le=1.0)
    max_iterations: int = Field(default=12, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.min_quality > self.initial_quality:
            raise ValueError("min_quality must not exceed initial_quality")
        return self


class EncodedArtifact(BaseModel):
    """Final encoded bytes of one pipeline run and how they were obtained."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: bytes
    byte_size: int = Field(ge=0)
    quality_used: float = Field(gt=0.0, le=1.0)
    over_budget: bool
    iterations: int = Field(ge=1)
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def size_kb(self) -> float:
        """Return the encoded size in kilobytes."""
        return self.byte_size / 1024


class LoadResult(BaseModel):
    """Outcome of classifying and decoding an upload."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bitmap: DecodedBitmap
    category: InputCategory
    support_level: SupportLevel
    notices: list[str] = Field(default_factory=list)
