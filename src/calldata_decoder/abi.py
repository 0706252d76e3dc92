"""
ABI handling for the calldata decoder.

This module provides ABI parsing and function selector utilities.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from eth_utils import keccak

SIGNATURE_PATTERN = re.compile(r"^(\w+)\((.*)\)$")


def parse_signature(signature: str) -> Optional[Tuple[str, List[str]]]:
    """
    Split a text signature into its name and top-level parameter types.

    Tuple types keep their parentheses, e.g.
    "aggregate((address,bytes)[])" -> ("aggregate", ["(address,bytes)[]"]).

    Returns:
        (name, types) or None when the signature is malformed
    """
    match = SIGNATURE_PATTERN.match(signature.strip())
    if not match:
        return None

    name, type_string = match.group(1), match.group(2)
    types = []
    current = ""
    depth = 0
    for char in type_string:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return None
        if char == "," and depth == 0:
            types.append(current.strip())
            current = ""
        else:
            current += char
    if depth != 0:
        return None
    if current.strip():
        types.append(current.strip())
    if any(not t for t in types):
        return None
    return name, types


@dataclass(frozen=True)
class AbiEntry:
    """ABI fragments for one contract, keyed by (chain_id, lower-cased address)."""
    chain_id: int
    contract_address: str
    abi_fragments: List[Dict] = field(default_factory=list, hash=False)

    @property
    def function_count(self) -> int:
        return sum(1 for item in self.abi_fragments if item.get("type") == "function")


class ABI:
    """
    Class to interact with contract ABI.
    Handles function selector calculation and ABI lookups.
    """

    def __init__(self, abi: list):
        """
        Initialize with an ABI.

        Args:
            abi: Contract ABI as a list of dictionaries
        """
        self.abi = abi

    @staticmethod
    def function_signature_to_selector(signature: str) -> str:
        """
        Convert a function signature to a function selector.

        Args:
            signature: Function signature (e.g., "transfer(address,uint256)")

        Returns:
            Function selector as hex string (e.g., "0xa9059cbb")
        """
        return "0x" + keccak(text=signature).hex()[:8]

    def param_abi_type_to_str(self, param) -> str:
        """
        Recursively convert ABI input types into signature strings.

        Args:
            param: Parameter definition from ABI

        Returns:
            Type string for signature (e.g., "address", "(uint256,address)")
        """
        type_str = param["type"]
        if type_str.startswith("tuple"):
            inner = ",".join(
                self.param_abi_type_to_str(p) for p in param.get("components", [])
            )
            # Keep any array suffix ("tuple[]", "tuple[2][]")
            return f"({inner})" + type_str[5:]
        return type_str

    def find_function_by_selector(self, selector: str) -> Optional[Dict]:
        """
        Find function by selector in ABI.

        Args:
            selector: Function selector as hex string

        Returns:
            Dictionary with function metadata, or None when no fragment matches:
            - name: Function name
            - param_names: List of parameter names
            - inputs: Raw ABI input definitions (for decoding)
            - signature: Full function signature
            - selector: Function selector
        """
        for item in self.abi:
            if item.get("type") != "function" or "name" not in item:
                continue

            name = item["name"]
            inputs = item.get("inputs", [])
            native_types = ",".join(self.param_abi_type_to_str(p) for p in inputs)
            signature = f"{name}({native_types})"

            computed_selector = self.function_signature_to_selector(signature)
            if computed_selector == selector.lower():
                return {
                    "name": name,
                    "param_names": [
                        inp.get("name") or f"param_{idx}" for idx, inp in enumerate(inputs)
                    ],
                    "inputs": inputs,
                    "signature": signature,
                    "selector": computed_selector,
                }
        return None
