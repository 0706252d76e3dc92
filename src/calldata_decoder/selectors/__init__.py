"""Verified selector catalog package."""

from .catalog import (
    KNOWN_ADDRESSES,
    MULTISEND_SELECTOR,
    VERIFIED_SELECTORS,
    Category,
    SelectorEntry,
    lookup_address,
    lookup_selector,
)

__all__ = [
    "Category",
    "KNOWN_ADDRESSES",
    "MULTISEND_SELECTOR",
    "SelectorEntry",
    "VERIFIED_SELECTORS",
    "lookup_address",
    "lookup_selector",
]
