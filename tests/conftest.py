"""Pytest marker auto-assignment by folder and shared image fixtures."""

from __future__ import annotations

import io
import random
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from PIL import Image

from formphoto import logger

if TYPE_CHECKING:
    from collections.abc import Callable


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(item.path).resolve()
        except Exception:
            logger.warning(
                "Could not resolve test item path; skipping marker assignment",
                extra={"item": item.name, "marker": marker},
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def _gradient_image(width: int, height: int) -> Image.Image:
    """Return a smooth RGB gradient, cheap to compress."""
    gradient = Image.linear_gradient("L").resize((width, height))
    return Image.merge("RGB", (gradient, gradient.transpose(Image.Transpose.FLIP_LEFT_RIGHT), gradient))


def _noise_image(width: int, height: int, seed: int = 7) -> Image.Image:
    """Return deterministic RGB noise, close to incompressible."""
    rng = random.Random(seed)  # noqa: S311
    return Image.frombytes("RGB", (width, height), rng.randbytes(width * height * 3))


def _image_bytes(image: Image.Image, image_format: str) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def gradient_image() -> Callable[[int, int], Image.Image]:
    return _gradient_image


@pytest.fixture
def noise_image() -> Callable[..., Image.Image]:
    return _noise_image


@pytest.fixture
def image_bytes() -> Callable[[Image.Image, str], bytes]:
    return _image_bytes


@pytest.fixture
def png_bytes() -> bytes:
    return _image_bytes(_gradient_image(64, 48), "PNG")
