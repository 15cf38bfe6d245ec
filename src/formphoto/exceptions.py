"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field

from formphoto.typing.enums import InputCategory


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an async operation fails in compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class MissingTargetSpecError(PackageError):
    """Raised when no target spec is selected or the lookup has no entry."""

    profile: str | None = None
    document_kind: str | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if not self.profile or not self.document_kind:
            return "Select a target profile and document kind before uploading an image"
        return f"No target spec registered for profile '{self.profile}' and document kind '{self.document_kind}'"


@dataclass(frozen=True)
class UploadTooLargeError(PackageError):
    """Raised when an upload exceeds the configured byte limit."""

    byte_size: int
    limit: int

    def __str__(self) -> str:
        """Return error message payload."""
        limit_mb = self.limit / (1024 * 1024)
        return f"File is too large ({self.byte_size} bytes). Please select a file smaller than {limit_mb:g} MB"


@dataclass(frozen=True)
class UnsupportedFormatError(PackageError):
    """Raised when an upload is classified as raw camera data or an unknown format."""

    category: InputCategory
    accepted_formats: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        """Return error message payload."""
        if self.category is InputCategory.RAW_CAMERA_FILE:
            return (
                "RAW camera files cannot be converted here. "
                "Please export the photo as JPEG or PNG and upload it again"
            )
        return f"Unsupported file format. Please use: {', '.join(self.accepted_formats)}"


@dataclass(frozen=True)
class DecodeError(PackageError):
    """Raised when a raster byte stream cannot be parsed."""

    category: InputCategory
    message: str = "Error reading image file. The file might be corrupted"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class DegradedSupportError(DecodeError):
    """Raised when a format with degraded support could not be decoded by this runtime."""

    def __str__(self) -> str:
        """Return error message payload."""
        label = "HEIC/HEIF" if self.category is InputCategory.HIGH_EFFICIENCY_PHOTO else "TIFF"
        return f"{label} is not fully supported here ({self.message}). For best results, convert to JPEG/PNG"


@dataclass(frozen=True)
class DocumentRasterizationError(PackageError):
    """Base error for page-document rasterization failures."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class PasswordProtectedDocumentError(DocumentRasterizationError):
    """Raised when a PDF requires a password to open."""

    message: str = "The PDF is password protected. Remove the password or export the page as an image"


@dataclass(frozen=True)
class CorruptDocumentError(DocumentRasterizationError):
    """Raised when a PDF cannot be parsed or rendered."""

    message: str = "The PDF file appears to be corrupted. Please try with a JPG or PNG file instead"


@dataclass(frozen=True)
class StaleSessionError(PackageError):
    """Raised when a result belongs to a session that was replaced or reset."""

    token: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Session '{self.token}' is no longer active; result discarded"


@dataclass(frozen=True)
class PipelineStateError(PackageError):
    """Raised when a pipeline stage runs before its inputs exist."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
