from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from formphoto.exceptions import SettingsError
from formphoto.settings import Settings, ensure_env_file_exists, get_settings
from formphoto.typing.enums import SmoothingQuality

if TYPE_CHECKING:
    from pathlib import Path


def test_settings_load_from_env_file(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "APP_ENV=test\nLOG_LEVEL=DEBUG\nLOG_JSON=false\nMAX_UPLOAD_BYTES=1024\n"
        "MIN_QUALITY=0.4\nSMOOTHING_QUALITY=medium\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    settings = Settings()

    assert settings.app_env == "test"
    assert settings.log_level == "DEBUG"
    assert settings.log_json is False
    assert settings.max_upload_bytes == 1024
    assert settings.min_quality == 0.4
    assert settings.smoothing_quality == SmoothingQuality.MEDIUM


def test_settings_defaults_match_search_bounds(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    options = Settings().encoder_options()

    assert options.initial_quality == 0.92
    assert options.quality_step == 0.07
    assert options.min_quality == 0.30
    assert options.max_iterations == 12


def test_settings_accept_field_names() -> None:
    assert Settings(max_iterations=3).encoder_options().max_iterations == 3


def test_get_settings_wraps_validation_errors(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MAX_ITERATIONS", "zero")
    get_settings.cache_clear()

    with pytest.raises(SettingsError, match="Failed to load settings"):
        get_settings()

    get_settings.cache_clear()


def test_ensure_env_file_exists_copies_template(tmp_path: Path) -> None:
    template = tmp_path / ".env.template"
    template.write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    env_path = tmp_path / ".env"

    ensure_env_file_exists(env_path=env_path, template_path=template)

    assert env_path.read_text(encoding="utf-8") == "LOG_LEVEL=DEBUG\n"


def test_settings_reject_min_quality_above_initial_quality() -> None:
    with pytest.raises(ValueError, match="MIN_QUALITY must not exceed INITIAL_QUALITY"):
        Settings(initial_quality=0.5, min_quality=0.8)


def test_get_settings_wraps_inverted_quality_bounds(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INITIAL_QUALITY", "0.5")
    monkeypatch.setenv("MIN_QUALITY", "0.8")
    get_settings.cache_clear()

    with pytest.raises(SettingsError, match="MIN_QUALITY must not exceed INITIAL_QUALITY"):
        get_settings()

    get_settings.cache_clear()
