"""Selector identification and parameter decoding."""

from .params import MAX_UINT256, DecodedParams, decode_params, inputs_from_signature
from .resolver import SOURCE_CHAIN, ResolveRequest, resolve

__all__ = [
    "DecodedParams",
    "MAX_UINT256",
    "ResolveRequest",
    "SOURCE_CHAIN",
    "decode_params",
    "inputs_from_signature",
    "resolve",
]
