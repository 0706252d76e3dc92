"""
Safe MultiSend payload parsing.

multiSend(bytes transactions) wraps a packed sequence of records:

    operation (1 byte) | to (20 bytes) | value (32 bytes) | dataLength (32 bytes) | data

Records are packed with no padding between them. Parsing is all-or-nothing:
any malformed record rejects the whole payload.
"""

import logging
from typing import Iterable, List, Optional

from eth_utils import to_checksum_address

from ..errors import InvalidCalldataError
from ..models import BatchSummary, BatchType, Operation, Severity, SubCallRecord
from ..effects.severity import bucket_counts, max_severity
from ..selectors import MULTISEND_SELECTOR

logger = logging.getLogger(__name__)

MULTISEND_ADDRESSES = frozenset({
    "0x40a2accbd92bca938b02010e17a5b8929b49130d",  # v1.1.1
    "0xa238cbeb142c10ef7ad8442c6d1f9e89e07e7761",  # v1.3.0
    "0x998739bfdaadde7c933b942a68053933098f9eda",  # v1.4.1
})

MULTISEND_CALL_ONLY_ADDRESSES = frozenset({
    "0x9641d764fc13c8b624c04430c7356c1c7c8102e2",  # v1.3.0 / v1.4.1
})

# operation + to + value + dataLength
RECORD_HEADER_SIZE = 1 + 20 + 32 + 32

OPERATION_LABELS = {
    Operation.CALL: "CALL",
    Operation.DELEGATECALL: "DELEGATECALL",
}


class ByteCursor:
    """Forward-only reader that refuses to read past the end of its buffer."""

    def __init__(self, data: bytes):
        self.data = data
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def read(self, size: int) -> bytes:
        if size < 0 or size > self.remaining:
            raise InvalidCalldataError(
                f"Batch data truncated at offset {self.position}: "
                f"expected {size} bytes, {self.remaining} available"
            )
        chunk = self.data[self.position:self.position + size]
        self.position += size
        return chunk

    def read_uint(self, size: int) -> int:
        return int.from_bytes(self.read(size), "big")


def is_multisend(calldata: bytes) -> bool:
    return calldata[:4].hex() == MULTISEND_SELECTOR[2:]


def batch_type_for(target_address: Optional[str]) -> BatchType:
    """Batch variant from the known Safe deployment addresses."""
    if target_address:
        normalized = target_address.lower()
        if normalized in MULTISEND_CALL_ONLY_ADDRESSES:
            return BatchType.MULTISEND_CALL_ONLY
        if normalized in MULTISEND_ADDRESSES:
            return BatchType.MULTISEND
    return BatchType.UNRECOGNIZED_TARGET


def _read_transactions_bytes(calldata: bytes) -> bytes:
    cursor = ByteCursor(calldata[4:])
    offset = cursor.read_uint(32)
    if offset != 32:
        raise InvalidCalldataError(f"Unexpected multiSend offset {offset}, expected 32")
    length = cursor.read_uint(32)
    return cursor.read(length)


def parse_multisend(calldata: bytes, batch_type: BatchType = BatchType.UNRECOGNIZED_TARGET) -> List[SubCallRecord]:
    """
    Split a multiSend call into its sub-call records.

    Args:
        calldata: Full calldata including the 4-byte selector
        batch_type: Variant of the target contract

    Returns:
        Records in payload order, indexed from 0

    Raises:
        InvalidCalldataError: truncated buffer, bad offset, bad operation byte,
            or a DELEGATECALL record sent to MultiSendCallOnly
    """
    if not is_multisend(calldata):
        raise InvalidCalldataError("Calldata is not a multiSend(bytes) call")

    cursor = ByteCursor(_read_transactions_bytes(calldata))
    records = []
    while cursor.remaining > 0:
        if cursor.remaining < RECORD_HEADER_SIZE:
            raise InvalidCalldataError(f"Incomplete transaction at offset {cursor.position}")

        start = cursor.position
        operation = cursor.read_uint(1)
        if operation not in (Operation.CALL, Operation.DELEGATECALL):
            raise InvalidCalldataError(f"Invalid operation type {operation} at offset {start}")

        to = to_checksum_address(cursor.read(20))
        value = cursor.read_uint(32)
        data_length = cursor.read_uint(32)
        data = cursor.read(data_length)

        records.append(SubCallRecord(
            index=len(records),
            operation=operation,
            to=to,
            value=value,
            data=data,
        ))

    if batch_type == BatchType.MULTISEND_CALL_ONLY:
        if any(r.operation == Operation.DELEGATECALL for r in records):
            raise InvalidCalldataError("MultiSendCallOnly calldata contains DELEGATECALL operations")

    logger.debug(f"Parsed {len(records)} multiSend record(s) ({batch_type.value})")
    return records


def summarize(severities: Iterable[Severity]) -> BatchSummary:
    """Bucket counts plus the overall severity of a batch."""
    severities = list(severities)
    return BatchSummary(counts=bucket_counts(severities), overall_severity=max_severity(severities))
