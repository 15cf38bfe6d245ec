from __future__ import annotations

import pytest

from formphoto.dependencies import ensure_pipeline_dependencies, has_heif_support
from formphoto.exceptions import DependencyError


def test_ensure_pipeline_dependencies_succeeds(monkeypatch) -> None:
    monkeypatch.setattr("formphoto.dependencies._is_module_available", lambda module_name: True)
    ensure_pipeline_dependencies()


def test_ensure_pipeline_dependencies_raises(monkeypatch) -> None:
    monkeypatch.setattr("formphoto.dependencies._is_module_available", lambda module_name: False)
    with pytest.raises(DependencyError, match="photo pipeline"):
        ensure_pipeline_dependencies()


def test_has_heif_support_checks_plugin(monkeypatch) -> None:
    seen: list[str] = []

    def _available(module_name: str) -> bool:
        seen.append(module_name)
        return False

    monkeypatch.setattr("formphoto.dependencies._is_module_available", _available)

    assert has_heif_support() is False
    assert seen == ["pillow_heif"]
