from __future__ import annotations

import asyncio
import io

import pytest
from PIL import Image

from formphoto.encoder import aencode_within_budget, encode_jpeg, encode_within_budget, next_quality
from formphoto.exceptions import StaleSessionError
from formphoto.typing.models import CroppedBitmap, EncoderOptions, TargetSpec


class _SizeByQuality:
    """Fake encoder whose output size is a function of quality."""

    def __init__(self, size_for) -> None:
        self._size_for = size_for
        self.qualities: list[float] = []

    def __call__(self, image: Image.Image, quality: float, *, dpi: int) -> bytes:
        assert dpi == 110
        self.qualities.append(quality)
        return b"x" * self._size_for(quality)


def _bitmap() -> CroppedBitmap:
    return CroppedBitmap.from_image(Image.new("RGB", (20, 23), (120, 80, 40)))


def _target(max_size_bytes: int) -> TargetSpec:
    return TargetSpec(width=20, height=23, max_size_bytes=max_size_bytes, dpi=110)


def test_returns_first_encode_when_within_budget() -> None:
    encoder = _SizeByQuality(lambda quality: 100)

    artifact = encode_within_budget(_bitmap(), _target(1000), encode=encoder)

    assert encoder.qualities == [0.92]
    assert artifact.over_budget is False
    assert artifact.quality_used == 0.92
    assert artifact.iterations == 1
    assert artifact.byte_size == 100


def test_stops_at_first_quality_meeting_budget_on_monotonic_curve() -> None:
    encoder = _SizeByQuality(lambda quality: int(quality * 1000))

    artifact = encode_within_budget(_bitmap(), _target(600), encode=encoder)

    assert encoder.qualities == [0.92, 0.85, 0.78, 0.71, 0.64, 0.57]
    assert artifact.over_budget is False
    assert artifact.quality_used == pytest.approx(0.57)
    assert artifact.byte_size <= 600


def test_unattainable_budget_exhausts_to_min_quality() -> None:
    encoder = _SizeByQuality(lambda quality: 5000)

    artifact = encode_within_budget(_bitmap(), _target(1024), encode=encoder)

    assert artifact.over_budget is True
    assert artifact.quality_used == pytest.approx(0.30)
    assert encoder.qualities[-1] == pytest.approx(0.30)
    assert len(encoder.qualities) == artifact.iterations == 10
    assert all(0 < quality <= 0.92 for quality in encoder.qualities)


def test_max_iterations_bounds_number_of_encodes() -> None:
    encoder = _SizeByQuality(lambda quality: 5000)
    options = EncoderOptions(max_iterations=3)

    artifact = encode_within_budget(_bitmap(), _target(1024), options=options, encode=encoder)

    assert encoder.qualities == [0.92, 0.85, 0.78]
    assert artifact.iterations == 3
    assert artifact.over_budget is True


def test_next_quality_is_clamped_to_min_quality() -> None:
    options = EncoderOptions()

    assert next_quality(0.36, options) == 0.30
    assert next_quality(0.92, options) == 0.85


def test_encoder_options_reject_inverted_bounds() -> None:
    with pytest.raises(ValueError, match="min_quality"):
        EncoderOptions(initial_quality=0.4, min_quality=0.5)


def test_checkpoint_failure_aborts_search() -> None:
    encoder = _SizeByQuality(lambda quality: 5000)
    calls: list[int] = []

    def _checkpoint() -> None:
        calls.append(1)
        if len(calls) > 2:
            raise StaleSessionError(token="old")

    with pytest.raises(StaleSessionError):
        asyncio.run(aencode_within_budget(_bitmap(), _target(1024), encode=encoder, checkpoint=_checkpoint))

    assert len(encoder.qualities) == 2


def test_encode_jpeg_writes_jpeg_with_dpi() -> None:
    payload = encode_jpeg(Image.new("RGB", (40, 46), (10, 200, 30)), 0.85, dpi=110)

    with Image.open(io.BytesIO(payload)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (40, 46)
        assert tuple(round(value) for value in decoded.info["dpi"]) == (110, 110)


def test_encode_jpeg_size_drops_with_quality(noise_image) -> None:
    image = noise_image(64, 64)

    assert len(encode_jpeg(image, 0.3, dpi=72)) < len(encode_jpeg(image, 0.92, dpi=72))
