from __future__ import annotations

import pytest

from formphoto.exceptions import CorruptDocumentError, DependencyError, PasswordProtectedDocumentError
from formphoto.rasterizer import PDF_RENDER_SCALE, rasterize
from formphoto.typing.enums import InputCategory


class _FakeMatrix:
    def __init__(self, sx: float, sy: float) -> None:
        self.sx = sx
        self.sy = sy


class _FakePixmap:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.samples = bytes([200]) * (width * height * 3)


class _FakePage:
    def __init__(self, width: float, height: float) -> None:
        self._width = width
        self._height = height

    def get_pixmap(self, matrix: _FakeMatrix, alpha: bool) -> _FakePixmap:
        assert alpha is False
        return _FakePixmap(int(self._width * matrix.sx), int(self._height * matrix.sy))


class _FakeDoc:
    def __init__(self, pages: int = 1, *, needs_pass: bool = False) -> None:
        self._pages = pages
        self.needs_pass = needs_pass
        self.loaded: list[int] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def __len__(self) -> int:
        return self._pages

    def load_page(self, idx: int) -> _FakePage:
        assert 0 <= idx < self._pages
        self.loaded.append(idx)
        return _FakePage(width=40 + idx, height=50 + idx)


class _FakeFitz:
    Matrix = _FakeMatrix

    def __init__(self, doc: _FakeDoc | None = None, error: Exception | None = None) -> None:
        self._doc = doc
        self._error = error

    def open(self, stream: bytes, filetype: str) -> _FakeDoc:
        assert filetype == "pdf"
        if self._error is not None:
            raise self._error
        return self._doc


def test_rasterize_renders_only_the_first_page(monkeypatch) -> None:
    doc = _FakeDoc(pages=4)
    monkeypatch.setattr("formphoto.rasterizer.fitz", _FakeFitz(doc))

    bitmap = rasterize(b"%PDF")

    assert doc.loaded == [0]
    assert (bitmap.pixel_width, bitmap.pixel_height) == (int(40 * PDF_RENDER_SCALE), int(50 * PDF_RENDER_SCALE))
    assert bitmap.category == InputCategory.PAGE_DOCUMENT
    assert bitmap.image.mode == "RGB"


def test_rasterize_password_protected(monkeypatch) -> None:
    monkeypatch.setattr("formphoto.rasterizer.fitz", _FakeFitz(_FakeDoc(needs_pass=True)))

    with pytest.raises(PasswordProtectedDocumentError, match="password"):
        rasterize(b"%PDF")


def test_rasterize_corrupt_document(monkeypatch) -> None:
    monkeypatch.setattr("formphoto.rasterizer.fitz", _FakeFitz(error=RuntimeError("cannot open")))

    with pytest.raises(CorruptDocumentError, match="corrupted"):
        rasterize(b"garbage")


def test_rasterize_document_without_pages(monkeypatch) -> None:
    monkeypatch.setattr("formphoto.rasterizer.fitz", _FakeFitz(_FakeDoc(pages=0)))

    with pytest.raises(CorruptDocumentError, match="no pages"):
        rasterize(b"%PDF")


def test_rasterize_without_pymupdf(monkeypatch) -> None:
    monkeypatch.setattr("formphoto.rasterizer.fitz", None)

    with pytest.raises(DependencyError, match="pymupdf"):
        rasterize(b"%PDF")


def test_password_and_corrupt_errors_have_distinct_remediation() -> None:
    assert str(PasswordProtectedDocumentError()) != str(CorruptDocumentError())
