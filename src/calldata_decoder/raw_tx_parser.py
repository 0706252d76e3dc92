"""
Raw transaction parser.

Extracts the fields the decoder needs from a signed, RLP-encoded
transaction:
- Contract address (to)
- Input data (calldata)
- Transaction value (msg.value)
- Chain ID
"""

import logging
from dataclasses import dataclass
from typing import Optional

import rlp
from rlp.exceptions import DecodingError
from eth_utils import to_checksum_address, to_hex

from .errors import InvalidCalldataError

logger = logging.getLogger(__name__)

# Field positions per envelope: (chain_id, to, value, data)
EIP1559_FIELDS = (0, 5, 6, 7)
EIP2930_FIELDS = (0, 4, 5, 6)
LEGACY_FIELDS = (None, 3, 4, 5)
LEGACY_V_INDEX = 6


@dataclass(frozen=True)
class RawTransaction:
    to: Optional[str]
    value: int
    input: str
    chain_id: Optional[int]
    type: str

    @property
    def selector(self) -> Optional[str]:
        return self.input[:10] if len(self.input) >= 10 else None


def _to_int(raw: bytes) -> int:
    return int.from_bytes(raw, byteorder='big') if raw else 0


def _build(decoded, fields, tx_type: str, chain_id: Optional[int] = None) -> RawTransaction:
    chain_idx, to_idx, value_idx, data_idx = fields
    if chain_idx is not None:
        chain_id = _to_int(decoded[chain_idx]) or None
    to_raw = decoded[to_idx]
    if to_raw and len(to_raw) != 20:
        raise InvalidCalldataError(f"Invalid 'to' field length {len(to_raw)} in {tx_type} transaction")

    tx = RawTransaction(
        to=to_checksum_address(to_raw) if to_raw else None,
        value=_to_int(decoded[value_idx]),
        input=to_hex(decoded[data_idx]) if decoded[data_idx] else '0x',
        chain_id=chain_id,
        type=tx_type,
    )
    logger.debug(f"Parsed {tx_type} TX: to={tx.to}, selector={tx.selector}, value={tx.value}")
    return tx


def _legacy_chain_id(decoded) -> Optional[int]:
    # EIP-155: v = chain_id * 2 + 35/36
    v = _to_int(decoded[LEGACY_V_INDEX]) if len(decoded) > LEGACY_V_INDEX else 0
    if v >= 37:
        return (v - 35) // 2
    return None


def parse_raw_transaction(raw_tx_hex: str) -> RawTransaction:
    """
    Parse a raw RLP-encoded transaction.

    Supports legacy, EIP-2930 (type 1) and EIP-1559 (type 2) envelopes.

    Args:
        raw_tx_hex: Raw transaction as hex string (with or without 0x prefix)

    Returns:
        RawTransaction

    Raises:
        InvalidCalldataError: the input is not a supported, well-formed transaction
    """
    text = raw_tx_hex.strip()
    if text[:2].lower() == '0x':
        text = text[2:]
    try:
        tx_bytes = bytes.fromhex(text)
    except ValueError as e:
        raise InvalidCalldataError("Raw transaction must be a hex string") from e
    if not tx_bytes:
        raise InvalidCalldataError("Raw transaction is empty")

    # EIP-2718: a first byte <= 0x7f marks a typed envelope
    if tx_bytes[0] <= 0x7f:
        tx_type, payload = tx_bytes[0], tx_bytes[1:]
        if tx_type == 0x02:
            layout, name, min_fields = EIP1559_FIELDS, 'eip1559', 8
        elif tx_type == 0x01:
            layout, name, min_fields = EIP2930_FIELDS, 'eip2930', 7
        else:
            raise InvalidCalldataError(f"Unsupported transaction type: {tx_type}")
    else:
        payload, layout, name, min_fields = tx_bytes, LEGACY_FIELDS, 'legacy', 6

    try:
        decoded = rlp.decode(payload)
    except DecodingError as e:
        raise InvalidCalldataError(f"Invalid RLP in {name} transaction: {e}") from e

    if not isinstance(decoded, list) or len(decoded) < min_fields:
        raise InvalidCalldataError(f"Malformed {name} transaction: expected at least {min_fields} fields")
    if any(not isinstance(decoded[i], bytes) for i in layout if i is not None):
        raise InvalidCalldataError(f"Malformed {name} transaction: unexpected nested field")

    chain_id = _legacy_chain_id(decoded) if name == 'legacy' else None
    return _build(decoded, layout, name, chain_id)
