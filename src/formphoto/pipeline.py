"""Session-scoped upload → crop → encode pipeline.

A `PhotoPipeline` owns at most one active `Session`. Starting a session drops
the previous one: its bitmap and artifact are released and any stage still
running for it fails its token check with `StaleSessionError` instead of
committing a result.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, NoReturn
from uuid import uuid4

from formphoto import decoder, rasterizer
from formphoto.classifier import ACCEPTED_FORMATS_DISPLAY, classify, support_level
from formphoto.crop import crop, default_crop_rect
from formphoto.dependencies import ensure_pipeline_dependencies
from formphoto.encoder import aencode_within_budget, encode_jpeg
from formphoto.exceptions import (
    MissingTargetSpecError,
    PipelineStateError,
    StaleSessionError,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from formphoto.logging import SessionLogContext, get_logger
from formphoto.registry import get_target_spec
from formphoto.settings import Settings, get_settings
from formphoto.typing.enums import InputCategory
from formphoto.typing.models import LoadResult, UploadedFile

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from formphoto.typing.models import CropRectangle, DecodedBitmap, EncodedArtifact, TargetSpec
    from formphoto.typing.protocol import BitmapHandler, ImageEncoder

logger = get_logger(__name__)

HEIC_NOTICE = (
    "HEIC/HEIF detected: these high-efficiency formats mainly come from iPhones. "
    "For best results, consider converting to JPEG/PNG first."
)


def suggest_filename(profile: str, document_kind: str, now: datetime | None = None) -> str:
    """Return the download filename `{profile}_{document_kind}_{epoch_millis}.jpg`."""
    moment = now or datetime.now(UTC)
    return f"{profile}_{document_kind}_{int(moment.timestamp() * 1000)}.jpg"


def _reject(data: bytes, *, category: InputCategory) -> NoReturn:  # noqa: ARG001
    raise UnsupportedFormatError(category=category, accepted_formats=ACCEPTED_FORMATS_DISPLAY)


def build_handlers(
    *,
    decode: Callable[[bytes, InputCategory], DecodedBitmap],
    rasterize: Callable[[bytes], DecodedBitmap],
) -> dict[InputCategory, BitmapHandler]:
    """Return the bitmap handler for every input category.

    Args:
        decode: Raster decoder.
        rasterize: Page-document rasterizer.

    Returns:
        dict[InputCategory, BitmapHandler]: Handler per category.
    """
    return {
        InputCategory.RASTER_DIRECT: partial(decode, category=InputCategory.RASTER_DIRECT),
        InputCategory.PAGE_DOCUMENT: rasterize,
        InputCategory.HIGH_EFFICIENCY_PHOTO: partial(decode, category=InputCategory.HIGH_EFFICIENCY_PHOTO),
        InputCategory.TIFF_PHOTO: partial(decode, category=InputCategory.TIFF_PHOTO),
        InputCategory.RAW_CAMERA_FILE: partial(_reject, category=InputCategory.RAW_CAMERA_FILE),
        InputCategory.UNSUPPORTED: partial(_reject, category=InputCategory.UNSUPPORTED),
    }


class Session:
    """State of one upload flow, identified by a unique token."""

    def __init__(
        self,
        owner: PhotoPipeline,
        target: TargetSpec | None,
        *,
        profile: str | None = None,
        document_kind: str | None = None,
    ) -> None:
        self.token = uuid4().hex
        self.target = target
        self.profile = profile
        self.document_kind = document_kind
        self.bitmap: DecodedBitmap | None = None
        self.artifact: EncodedArtifact | None = None
        self._owner = owner

    @property
    def is_current(self) -> bool:
        """Return whether this session is still the pipeline's active one."""
        return self._owner.active_token == self.token

    def ensure_current(self) -> None:
        """Raise `StaleSessionError` if the session was replaced."""
        if not self.is_current:
            raise StaleSessionError(token=self.token)

    def release(self) -> None:
        """Drop the bitmap and artifact held by this session."""
        self.bitmap = None
        self.artifact = None

    def suggested_filename(self, now: datetime | None = None) -> str:
        """Return the download filename for this session's profile and document kind."""
        return suggest_filename(self.profile or "photo", self.document_kind or "image", now)


class PhotoPipeline:
    """Single-owner controller running upload, crop and encode for the active session."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        decode: Callable[[bytes, InputCategory], DecodedBitmap] = decoder.decode,
        rasterize: Callable[[bytes], DecodedBitmap] = rasterizer.rasterize,
        encode: ImageEncoder = encode_jpeg,
    ) -> None:
        ensure_pipeline_dependencies()
        self._settings = settings or get_settings()
        self._handlers = build_handlers(decode=decode, rasterize=rasterize)
        self._encode = encode
        self._active: Session | None = None

    @property
    def settings(self) -> Settings:
        """Return pipeline settings."""
        return self._settings

    @property
    def active_token(self) -> str | None:
        """Return the token of the active session, if any."""
        return self._active.token if self._active is not None else None

    def start_session(
        self,
        target: TargetSpec | None,
        *,
        profile: str | None = None,
        document_kind: str | None = None,
    ) -> Session:
        """Start a new session, invalidating the previous one.

        Args:
            target: Target spec, or None when nothing was selected yet.
            profile: Profile name used for logging and filenames.
            document_kind: Document kind used for logging and filenames.

        Returns:
            Session: The new active session.
        """
        if self._active is not None:
            self._active.release()
        session = Session(self, target, profile=profile, document_kind=document_kind)
        self._active = session
        logger.info(
            "Session started",
            extra={"session": session.token, "profile": profile, "document_kind": document_kind},
        )
        return session

    def start_registered_session(self, profile: str, document_kind: str) -> Session:
        """Start a session whose target comes from the profile registry.

        Raises:
            MissingTargetSpecError: If the profile/document kind is not registered.
        """
        target = get_target_spec(profile, document_kind)
        return self.start_session(target, profile=profile, document_kind=document_kind)

    def reset(self, session: Session) -> None:
        """Return a session to its pre-upload state."""
        session.release()
        logger.info("Session reset", extra={"session": session.token})

    async def load(self, session: Session, upload: UploadedFile) -> LoadResult:
        """Classify and decode an upload into the session's bitmap.

        Args:
            session: Active session.
            upload: Uploaded file.

        Raises:
            MissingTargetSpecError: If the session has no target spec.
            UploadTooLargeError: If the upload exceeds `Settings.max_upload_bytes`.
            UnsupportedFormatError: If the upload is raw camera data or an unknown format.
            DecodeError: If a raster stream cannot be decoded.
            DocumentRasterizationError: If a PDF is password protected or corrupt.
            StaleSessionError: If the session was replaced while decoding.

        Returns:
            LoadResult: Decoded bitmap with its category and any support notices.
        """
        with SessionLogContext(session.token):
            session.ensure_current()
            session.release()
            try:
                return await self._load(session, upload)
            except Exception:
                session.release()
                raise

    async def aload_path(self, session: Session, path: Path, *, media_type: str | None = None) -> LoadResult:
        """Read a file off the event loop and load it into the session."""
        upload = await asyncio.to_thread(UploadedFile.from_path, path, media_type=media_type)
        return await self.load(session, upload)

    async def _load(self, session: Session, upload: UploadedFile) -> LoadResult:
        if session.target is None:
            raise MissingTargetSpecError(profile=session.profile, document_kind=session.document_kind)
        if upload.byte_size > self._settings.max_upload_bytes:
            raise UploadTooLargeError(byte_size=upload.byte_size, limit=self._settings.max_upload_bytes)

        category = classify(upload.declared_media_type, upload.extension)
        level = support_level(category)
        logger.info(
            "Upload classified",
            extra={
                "media_type": upload.declared_media_type,
                "extension": upload.extension,
                "size": upload.byte_size,
                "category": category.value,
                "support_level": level.value,
            },
        )

        notices: list[str] = []
        if category is InputCategory.HIGH_EFFICIENCY_PHOTO:
            notices.append(HEIC_NOTICE)

        bitmap = await asyncio.to_thread(self._handlers[category], upload.data)
        session.ensure_current()
        session.bitmap = bitmap
        return LoadResult(bitmap=bitmap, category=category, support_level=level, notices=notices)

    async def process(self, session: Session, rect: CropRectangle | None = None) -> EncodedArtifact:
        """Crop the session bitmap and encode it within the target byte budget.

        Args:
            session: Active session holding a decoded bitmap.
            rect: Crop rectangle. Defaults to the centered aspect-locked rectangle.

        Raises:
            PipelineStateError: If no bitmap was loaded.
            StaleSessionError: If the session was replaced while processing.

        Returns:
            EncodedArtifact: Encoded output; `over_budget` flags an unattainable budget.
        """
        with SessionLogContext(session.token):
            session.ensure_current()
            bitmap, target = session.bitmap, session.target
            if bitmap is None or target is None:
                raise PipelineStateError(message="Upload an image before processing")

            try:
                region = rect or default_crop_rect(bitmap, target, coverage=self._settings.crop_coverage)
                cropped = await asyncio.to_thread(
                    crop,
                    bitmap,
                    region,
                    target,
                    smoothing=self._settings.smoothing_quality,
                )
                session.ensure_current()
                artifact = await aencode_within_budget(
                    cropped,
                    target,
                    options=self._settings.encoder_options(),
                    encode=self._encode,
                    checkpoint=session.ensure_current,
                )
            except Exception:
                session.release()
                raise

            session.artifact = artifact
            if artifact.over_budget:
                logger.warning(
                    "Size budget not met",
                    extra={"size_kb": artifact.size_kb, "budget_kb": target.max_size_kb},
                )
            return artifact
