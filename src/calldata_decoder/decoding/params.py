"""Calldata parameter decoding."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from web3 import Web3

from ..errors import ParamDecodingError

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1

_w3 = Web3()


@dataclass(frozen=True)
class DecodedParams:
    """Decoded parameters in declaration order plus the names holding the max-uint256 sentinel."""
    values: Dict[str, Any] = field(hash=False)
    unlimited: Tuple[str, ...] = ()


def inputs_from_signature(types: Sequence[str], names: Sequence[str]) -> List[Dict]:
    """
    Build ABI input definitions from a text signature's types.

    Missing names fall back to param_<i>.
    """
    inputs = []
    for idx, type_str in enumerate(types):
        name = names[idx] if idx < len(names) and names[idx] else f"param_{idx}"
        inputs.append({"name": name, "type": type_str})
    return inputs


def convert_decoded_value(value, type_info: Dict):
    """
    Recursively convert decoded ABI values to plain Python types.

    Handles:
    - bytes → hex strings
    - tuples (structs) → dicts with component names
    - tuple[] (array of structs) → list of dicts
    - Nested structs and arrays

    Args:
        value: Raw decoded value from the codec
        type_info: ABI type information dict with 'type' and optional 'components'

    Returns:
        Properly formatted value
    """
    type_str = type_info.get('type', '')

    # Array of structs (tuple[], tuple[3], tuple[][], ...)
    if type_str.startswith('tuple[') and type_info.get('components'):
        inner_type = dict(type_info, type=type_str[:type_str.rindex('[')])
        return [convert_decoded_value(item, inner_type) for item in value]

    # Single struct
    elif type_str == 'tuple' and type_info.get('components'):
        struct_dict = {}
        for idx, component in enumerate(type_info['components']):
            comp_name = component.get('name') or f'field_{idx}'
            comp_value = value[idx] if idx < len(value) else None
            struct_dict[comp_name] = convert_decoded_value(comp_value, component)
        return struct_dict

    elif isinstance(value, bytes):
        return '0x' + value.hex()

    # Arrays and anonymous tuples
    elif isinstance(value, (list, tuple)):
        return [convert_decoded_value(item, {'type': 'unknown'}) for item in value]

    # Primitives (int, str, bool, None, address)
    else:
        return value


def _abi_type(input_def: Dict) -> str:
    """Codec type string for an input, expanding tuple components."""
    type_str = input_def['type']
    if type_str.startswith('tuple'):
        inner = ",".join(_abi_type(c) for c in input_def.get('components', []))
        return f"({inner})" + type_str[5:]
    return type_str


def decode_params(inputs: List[Dict], data: bytes) -> DecodedParams:
    """
    Decode the calldata tail (after the selector) against ABI inputs.

    Args:
        inputs: ABI input definitions ({'name', 'type', optional 'components'})
        data: Calldata bytes following the 4-byte selector

    Returns:
        DecodedParams with an ordered name → value mapping

    Raises:
        ParamDecodingError: the data does not match the declared types
    """
    types = [_abi_type(inp) for inp in inputs]
    try:
        decoded_values = _w3.codec.decode(types, data)
    except Exception as e:
        raise ParamDecodingError(f"Could not decode ({','.join(types)}): {e}") from e

    values = {}
    unlimited = []
    for idx, (input_def, value) in enumerate(zip(inputs, decoded_values)):
        name = input_def.get('name') or f'param_{idx}'
        if name in values:
            name = f'{name}_{idx}'
        values[name] = convert_decoded_value(value, input_def)
        if input_def['type'] == 'uint256' and value == MAX_UINT256:
            unlimited.append(name)

    logger.debug(f"Decoded {len(values)} parameter(s) for ({','.join(types)})")
    return DecodedParams(values=values, unlimited=tuple(unlimited))
