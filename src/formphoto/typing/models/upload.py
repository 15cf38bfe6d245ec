"""Uploaded file model."""

from __future__ import annotations

import mimetypes
from pathlib import Path, PurePath

from pydantic import BaseModel, ConfigDict


class UploadedFile(BaseModel):
    """Raw upload as received from a file picker or drop target."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: bytes
    filename: str = ""
    declared_media_type: str = ""

    @property
    def extension(self) -> str:
        """Return the lower-cased filename extension without its dot."""
        return PurePath(self.filename).suffix.removeprefix(".").lower()

    @property
    def byte_size(self) -> int:
        """Return the payload size in bytes."""
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, *, media_type: str | None = None) -> UploadedFile:
        """Read an upload from disk.

        Args:
            path: File to read.
            media_type: Declared media type. Guessed from the filename when omitted.

        Returns:
            UploadedFile: Upload with the file bytes.
        """
        declared = media_type if media_type is not None else (mimetypes.guess_type(path.name)[0] or "")
        return cls(data=path.read_bytes(), filename=path.name, declared_media_type=declared)
