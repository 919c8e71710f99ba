"""Domain layer: entities and value objects. No dependencies on outer layers."""

from kontak.domain.entities import (
    EWALLET_LABELS,
    EWALLET_PROVIDERS,
    Contact,
    ContactDraft,
    initials,
    normalize_ewallet,
)
from kontak.domain.phone import MIN_LOOKUP_LENGTH, format_phone_display, normalize_phone

__all__ = [
    "EWALLET_LABELS",
    "EWALLET_PROVIDERS",
    "MIN_LOOKUP_LENGTH",
    "Contact",
    "ContactDraft",
    "format_phone_display",
    "initials",
    "normalize_ewallet",
    "normalize_phone",
]
