"""Input format classification.

Uploads are routed on their declared media type first and on the filename
extension when the media type is empty or unknown. Classification is a pure
function of those two strings; it never looks at the bytes.
"""

from __future__ import annotations

from typing import assert_never

from formphoto.typing.enums import InputCategory, SupportLevel

_MEDIA_TYPES: dict[str, InputCategory] = {
    "image/jpeg": InputCategory.RASTER_DIRECT,
    "image/jpg": InputCategory.RASTER_DIRECT,
    "image/png": InputCategory.RASTER_DIRECT,
    "image/webp": InputCategory.RASTER_DIRECT,
    "image/bmp": InputCategory.RASTER_DIRECT,
    "image/gif": InputCategory.RASTER_DIRECT,
    "image/svg+xml": InputCategory.RASTER_DIRECT,
    "image/ico": InputCategory.RASTER_DIRECT,
    "image/x-icon": InputCategory.RASTER_DIRECT,
    "image/vnd.microsoft.icon": InputCategory.RASTER_DIRECT,
    "application/pdf": InputCategory.PAGE_DOCUMENT,
    "image/heic": InputCategory.HIGH_EFFICIENCY_PHOTO,
    "image/heif": InputCategory.HIGH_EFFICIENCY_PHOTO,
    "image/heic-sequence": InputCategory.HIGH_EFFICIENCY_PHOTO,
    "image/heif-sequence": InputCategory.HIGH_EFFICIENCY_PHOTO,
    "image/tiff": InputCategory.TIFF_PHOTO,
    "image/tif": InputCategory.TIFF_PHOTO,
    "image/x-canon-cr2": InputCategory.RAW_CAMERA_FILE,
    "image/x-nikon-nef": InputCategory.RAW_CAMERA_FILE,
    "image/x-sony-arw": InputCategory.RAW_CAMERA_FILE,
    "image/x-adobe-dng": InputCategory.RAW_CAMERA_FILE,
    "image/x-fuji-raf": InputCategory.RAW_CAMERA_FILE,
    "image/x-olympus-orf": InputCategory.RAW_CAMERA_FILE,
    "image/x-panasonic-rw2": InputCategory.RAW_CAMERA_FILE,
    "image/x-samsung-srw": InputCategory.RAW_CAMERA_FILE,
}

_EXTENSIONS: dict[str, InputCategory] = {
    **dict.fromkeys(("jpg", "jpeg", "png", "webp", "bmp", "gif", "svg", "ico"), InputCategory.RASTER_DIRECT),
    "pdf": InputCategory.PAGE_DOCUMENT,
    **dict.fromkeys(("heic", "heif"), InputCategory.HIGH_EFFICIENCY_PHOTO),
    **dict.fromkeys(("tiff", "tif"), InputCategory.TIFF_PHOTO),
    **dict.fromkeys(("cr2", "nef", "arw", "dng", "raf", "orf", "rw2", "srw"), InputCategory.RAW_CAMERA_FILE),
}

ACCEPTED_FORMATS_DISPLAY: tuple[str, ...] = (
    "JPG",
    "JPEG",
    "PNG",
    "WEBP",
    "BMP",
    "GIF",
    "SVG",
    "PDF",
    "HEIC",
    "HEIF",
    "TIFF",
    "TIF",
    "CR2",
    "NEF",
    "ARW",
    "DNG",
    "RAF",
    "ORF",
    "RW2",
    "SRW",
    "ICO",
)


def _normalize_media_type(media_type: str | None) -> str:
    """Lower-case a media type and drop parameters such as `; charset=...`."""
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()


def _normalize_extension(extension: str | None) -> str:
    """Lower-case an extension and strip its leading dot."""
    if not extension:
        return ""
    return extension.strip().lower().removeprefix(".")


def classify(declared_media_type: str | None, extension: str | None) -> InputCategory:
    """Resolve the input category of an upload.

    Args:
        declared_media_type: Media type reported by the file source. May be empty.
        extension: Filename extension, with or without its leading dot.

    Returns:
        InputCategory: Matched category, `UNSUPPORTED` when neither input is recognized.
    """
    category = _MEDIA_TYPES.get(_normalize_media_type(declared_media_type))
    if category is not None:
        return category
    return _EXTENSIONS.get(_normalize_extension(extension), InputCategory.UNSUPPORTED)


def support_level(category: InputCategory) -> SupportLevel:
    """Return how well a category is supported.

    Args:
        category: Input category.

    Returns:
        SupportLevel: Declared support level.
    """
    match category:
        case InputCategory.RASTER_DIRECT:
            return SupportLevel.FULL
        case InputCategory.PAGE_DOCUMENT:
            return SupportLevel.RASTERIZE_REQUIRED
        case InputCategory.HIGH_EFFICIENCY_PHOTO | InputCategory.TIFF_PHOTO:
            return SupportLevel.DEGRADED
        case InputCategory.RAW_CAMERA_FILE | InputCategory.UNSUPPORTED:
            return SupportLevel.REJECT
        case _:
            assert_never(category)
