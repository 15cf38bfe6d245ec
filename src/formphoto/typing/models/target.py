"""Target output specification model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from formphoto.typing.enums import EncodedFormat


class TargetSpec(BaseModel):
    """Pixel size, byte budget and encoding an application form requires."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    max_size_bytes: int = Field(gt=0)
    format: EncodedFormat = EncodedFormat.JPEG
    dpi: int = Field(default=110, gt=0)

    @property
    def aspect_ratio(self) -> float:
        """Return width / height."""
        return self.width / self.height

    @property
    def max_size_kb(self) -> float:
        """Return the byte budget in kilobytes (1 KB = 1024 bytes)."""
        return self.max_size_bytes / 1024
