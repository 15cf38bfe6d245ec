"""PDF first-page rasterization."""

from __future__ import annotations

from typing import Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from PIL import Image

from formphoto.exceptions import CorruptDocumentError, DependencyError, PasswordProtectedDocumentError
from formphoto.logging import get_logger
from formphoto.typing.enums import InputCategory
from formphoto.typing.models import DecodedBitmap

logger = get_logger(__name__)

# Scale applied to the PDF page box (72 dpi), i.e. rendering at 216 dpi.
PDF_RENDER_SCALE = 3.0


def _open_document(data: bytes) -> Any:
    """Open PDF bytes with PyMuPDF.

    Raises:
        CorruptDocumentError: If the bytes are not a readable PDF.
    """
    try:
        return fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise CorruptDocumentError() from exc


def rasterize(data: bytes) -> DecodedBitmap:
    """Render the first page of a PDF into a bitmap.

    Only page 1 is rendered; later pages are never loaded.

    Args:
        data: PDF bytes.

    Raises:
        DependencyError: If PyMuPDF is unavailable.
        PasswordProtectedDocumentError: If the document needs a password.
        CorruptDocumentError: If the document cannot be parsed, is empty or fails to render.

    Returns:
        DecodedBitmap: RGB bitmap sized to the page viewport at `PDF_RENDER_SCALE`.
    """
    if fitz is None:
        raise DependencyError(missing_package=["pymupdf"], message="PDF rasterization")

    with _open_document(data) as doc:
        if doc.needs_pass:
            raise PasswordProtectedDocumentError()
        if len(doc) < 1:
            raise CorruptDocumentError(message="The PDF file has no pages")

        try:
            page = doc.load_page(0)
            pix = page.get_pixmap(matrix=fitz.Matrix(PDF_RENDER_SCALE, PDF_RENDER_SCALE), alpha=False)
            image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except Exception as exc:  # pragma: no cover - depends on file and fitz internals
            raise CorruptDocumentError() from exc

        logger.info(
            "PDF rasterized",
            extra={"pages": len(doc), "rendered_page": 1, "width": pix.width, "height": pix.height},
        )

    return DecodedBitmap.from_image(image, category=InputCategory.PAGE_DOCUMENT)
