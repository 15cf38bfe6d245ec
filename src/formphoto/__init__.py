"""formphoto package."""

from formphoto.async_runner import run_async
from formphoto.exceptions import (
    AsyncExecutionError,
    CorruptDocumentError,
    DecodeError,
    DegradedSupportError,
    DependencyError,
    DocumentRasterizationError,
    MissingTargetSpecError,
    PackageError,
    PasswordProtectedDocumentError,
    PipelineStateError,
    SettingsError,
    StaleSessionError,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from formphoto.logging import configure_logging, get_logger
from formphoto.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("formphoto")

__all__ = [
    "AsyncExecutionError",
    "CorruptDocumentError",
    "DecodeError",
    "DegradedSupportError",
    "DependencyError",
    "DocumentRasterizationError",
    "MissingTargetSpecError",
    "PackageError",
    "PasswordProtectedDocumentError",
    "PipelineStateError",
    "Settings",
    "SettingsError",
    "StaleSessionError",
    "UnsupportedFormatError",
    "UploadTooLargeError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
