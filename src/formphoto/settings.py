"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Self

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formphoto.exceptions import SettingsError
from formphoto.typing.enums import SmoothingQuality
from formphoto.typing.models import EncoderOptions

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "formphoto"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    max_upload_bytes: int = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        gt=0,
        validation_alias="MAX_UPLOAD_BYTES",
        description="Largest accepted upload, in bytes.",
    )
    initial_quality: float = Field(
        default=0.92,
        gt=0.0,
        le=1.0,
        validation_alias="INITIAL_QUALITY",
        description="First JPEG quality tried by the size search.",
    )
    quality_step: float = Field(
        default=0.07,
        gt=0.0,
        le=1.0,
        validation_alias="QUALITY_STEP",
        description="Quality decrement between search steps.",
    )
    min_quality: float = Field(
        default=0.30,
        gt=0.0,
        le=1.0,
        validation_alias="MIN_QUALITY",
        description="Lowest JPEG quality the size search may use.",
    )
    max_iterations: int = Field(
        default=12,
        ge=1,
        validation_alias="MAX_ITERATIONS",
        description="Maximum number of encodes per size search.",
    )
    smoothing_quality: SmoothingQuality = Field(
        default=SmoothingQuality.HIGH,
        validation_alias="SMOOTHING_QUALITY",
        description="Resampling quality used when scaling the crop.",
    )
    crop_coverage: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        validation_alias="CROP_COVERAGE",
        description="Share of the bitmap covered by the default crop rectangle.",
    )

    @model_validator(mode="after")
    def _check_quality_bounds(self) -> Self:
        if self.min_quality > self.initial_quality:
            msg = "MIN_QUALITY must not exceed INITIAL_QUALITY"
            raise ValueError(msg)
        return self

    def encoder_options(self) -> EncoderOptions:
        """Return quality search bounds built from settings.

        Returns:
            EncoderOptions: Search bounds.
        """
        return EncoderOptions(
            initial_quality=self.initial_quality,
            quality_step=self.quality_step,
            min_quality=self.min_quality,
            max_iterations=self.max_iterations,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
