"""Decoder flow package."""

from .engine import CalldataDecoder, decode

__all__ = [
    "CalldataDecoder",
    "decode",
]
