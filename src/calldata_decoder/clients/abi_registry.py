"""Read-only local ABI registry backed by JSON files on disk."""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..abi import AbiEntry
from ..errors import LookupUnavailableError

logger = logging.getLogger(__name__)


class AbiRegistry:
    """
    Local ABI store.

    Layout:
        <base_dir>/<chain_id>/<lower-cased address>.json

    Each file holds either a bare ABI list or an object with an "abi" key.
    Profile-referenced ABIs are resolved relative to base_dir and must stay inside it.
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)
        self._cache: Dict[Tuple[int, str], Optional[AbiEntry]] = {}
        self._lock = threading.Lock()

    def lookup(self, chain_id: int, address: str) -> Optional[AbiEntry]:
        """
        Look up the ABI registered for a contract.

        Args:
            chain_id: Chain ID
            address: Contract address (any case)

        Returns:
            AbiEntry or None if nothing is registered

        Raises:
            LookupUnavailableError: the store exists but could not be read
        """
        key = (chain_id, address.lower())
        with self._lock:
            if key in self._cache:
                return self._cache[key]

        path = self.base_dir / str(chain_id) / f"{key[1]}.json"
        entry = None
        if path.is_file():
            fragments = self._read_abi_file(path)
            entry = AbiEntry(chain_id=chain_id, contract_address=key[1], abi_fragments=fragments)
            logger.debug(f"Loaded local ABI for {key[1]} on chain {chain_id} ({entry.function_count} functions)")

        with self._lock:
            self._cache[key] = entry
        return entry

    def load_profile_abi(self, abi_path: str, chain_id: int, address: str) -> Optional[AbiEntry]:
        """
        Load an ABI referenced by a trust profile entry.

        Args:
            abi_path: Path relative to the registry directory
            chain_id: Chain ID the entry is attributed to
            address: Contract address the profile entry belongs to

        Returns:
            AbiEntry or None if the file does not exist
        """
        base = self.base_dir.resolve()
        path = (base / abi_path).resolve()
        if base != path and base not in path.parents:
            raise LookupUnavailableError(f"abiPath escapes the ABI registry directory: {abi_path}")
        if not path.is_file():
            logger.warning(f"Trust profile ABI not found: {path}")
            return None
        return AbiEntry(
            chain_id=chain_id,
            contract_address=address.lower(),
            abi_fragments=self._read_abi_file(path),
        )

    @staticmethod
    def _read_abi_file(path: Path) -> List[Dict]:
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LookupUnavailableError(f"Could not read ABI file {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("abi", [])
        if not isinstance(data, list):
            raise LookupUnavailableError(f"ABI file {path} does not contain an ABI list")
        return data
