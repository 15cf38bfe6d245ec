"""Static lookup of application-form photo requirements."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from formphoto.exceptions import MissingTargetSpecError
from formphoto.typing.enums import EncodedFormat
from formphoto.typing.models import TargetSpec

if TYPE_CHECKING:
    from collections.abc import Mapping

_KB = 1024


def _spec(width: int, height: int, max_kb: int, dpi: int = 110) -> TargetSpec:
    return TargetSpec(
        width=width,
        height=height,
        max_size_bytes=max_kb * _KB,
        format=EncodedFormat.JPEG,
        dpi=dpi,
    )


TARGET_SPECS: Mapping[str, Mapping[str, TargetSpec]] = MappingProxyType(
    {
        "UPSC": MappingProxyType(
            {
                "photo": _spec(200, 230, 50),
                "signature": _spec(140, 60, 20),
            },
        ),
        "SSC_CGL": MappingProxyType(
            {
                "photo": _spec(200, 230, 20),
                "signature": _spec(140, 60, 10),
            },
        ),
        "IBPS_PO": MappingProxyType(
            {
                "photo": _spec(200, 230, 50),
                "signature": _spec(140, 60, 20),
            },
        ),
    },
)


def list_profiles() -> list[str]:
    """Return the registered profile names."""
    return list(TARGET_SPECS)


def get_target_spec(profile: str | None, document_kind: str | None) -> TargetSpec:
    """Resolve the target spec for a profile and document kind.

    Args:
        profile: Profile name, e.g. `UPSC`.
        document_kind: Document kind, e.g. `photo` or `signature`.

    Raises:
        MissingTargetSpecError: If either key is empty or unregistered.

    Returns:
        TargetSpec: Registered spec.
    """
    if not profile or not document_kind:
        raise MissingTargetSpecError(profile=profile, document_kind=document_kind)
    try:
        return TARGET_SPECS[profile][document_kind]
    except KeyError as exc:
        raise MissingTargetSpecError(profile=profile, document_kind=document_kind) from exc
