"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class InputCategory(_EnumMixin):
    """Input encoding family an upload is dispatched on."""

    RASTER_DIRECT = "raster_direct"
    PAGE_DOCUMENT = "page_document"
    HIGH_EFFICIENCY_PHOTO = "high_efficiency_photo"
    TIFF_PHOTO = "tiff_photo"
    RAW_CAMERA_FILE = "raw_camera_file"
    UNSUPPORTED = "unsupported"


class SupportLevel(_EnumMixin):
    """How far an input category is supported."""

    FULL = "full"
    DEGRADED = "degraded"
    RASTERIZE_REQUIRED = "rasterize_required"
    REJECT = "reject"


class SmoothingQuality(_EnumMixin):
    """Resampling quality used when scaling the crop to the target size."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EncodedFormat(_EnumMixin):
    """Output encodings accepted by target specs."""

    JPEG = "jpeg"
