"""External lookup clients: local ABI registry and untrusted name service."""

from .abi_registry import AbiRegistry
from .fourbyte import FourByteClient, FourByteMatch

__all__ = ["AbiRegistry", "FourByteClient", "FourByteMatch"]
