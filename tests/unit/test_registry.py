from __future__ import annotations

import pytest

from formphoto.exceptions import MissingTargetSpecError
from formphoto.registry import get_target_spec, list_profiles
from formphoto.typing.enums import EncodedFormat


def test_get_target_spec_returns_photo_requirements() -> None:
    spec = get_target_spec("UPSC", "photo")

    assert (spec.width, spec.height) == (200, 230)
    assert spec.max_size_bytes == 50 * 1024
    assert spec.format == EncodedFormat.JPEG
    assert spec.dpi == 110


def test_get_target_spec_signature_budget_differs_by_profile() -> None:
    assert get_target_spec("SSC_CGL", "signature").max_size_bytes == 10 * 1024
    assert get_target_spec("IBPS_PO", "signature").max_size_bytes == 20 * 1024


def test_list_profiles() -> None:
    assert list_profiles() == ["UPSC", "SSC_CGL", "IBPS_PO"]


@pytest.mark.parametrize(("profile", "kind"), [("", "photo"), ("UPSC", None), ("GATE", "photo"), ("UPSC", "thumb")])
def test_get_target_spec_raises_for_missing_selection(profile: str, kind: str | None) -> None:
    with pytest.raises(MissingTargetSpecError):
        get_target_spec(profile, kind)


def test_missing_target_spec_message_mentions_selection() -> None:
    assert "Select a target profile" in str(MissingTargetSpecError())
    assert "GATE" in str(MissingTargetSpecError(profile="GATE", document_kind="photo"))
