"""Safe MultiSend batch parsing."""

from .parser import (
    MULTISEND_ADDRESSES,
    MULTISEND_CALL_ONLY_ADDRESSES,
    OPERATION_LABELS,
    ByteCursor,
    batch_type_for,
    is_multisend,
    parse_multisend,
    summarize,
)

__all__ = [
    "ByteCursor",
    "MULTISEND_ADDRESSES",
    "MULTISEND_CALL_ONLY_ADDRESSES",
    "OPERATION_LABELS",
    "batch_type_for",
    "is_multisend",
    "parse_multisend",
    "summarize",
]
