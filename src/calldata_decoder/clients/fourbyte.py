"""
4byte.directory client for unverified signature lookup.

Results from this source are never verified and never influence severity.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from ..abi import parse_signature
from ..config import DEFAULT_FOURBYTE_URL
from ..errors import LookupUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FourByteMatch:
    name: str
    signature: str
    args: List[str] = field(default_factory=list, hash=False)
    all_matches: List[str] = field(default_factory=list, hash=False)


class FourByteClient:
    """Time-bounded selector name lookup against 4byte.directory."""

    def __init__(self, api_url: str = DEFAULT_FOURBYTE_URL, timeout: float = 5.0):
        self.api_url = api_url
        self.timeout = timeout

    def lookup(self, selector: str) -> Optional[FourByteMatch]:
        """
        Look up a selector.

        Args:
            selector: 4-byte selector as hex string (with or without 0x)

        Returns:
            Best (first) match or None when the service has no result

        Raises:
            LookupUnavailableError: network error, timeout, or bad response
        """
        hex_signature = "0x" + selector.lower().replace("0x", "")
        try:
            response = requests.get(
                self.api_url,
                params={"hex_signature": hex_signature},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise LookupUnavailableError(f"4byte.directory lookup timed out for {hex_signature}") from e
        except (requests.RequestException, ValueError) as e:
            raise LookupUnavailableError(f"4byte.directory lookup failed for {hex_signature}: {e}") from e

        if not isinstance(data, dict):
            raise LookupUnavailableError(f"4byte.directory returned an unexpected body for {hex_signature}")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise LookupUnavailableError(f"4byte.directory returned malformed results for {hex_signature}")
        signatures = [
            r["text_signature"]
            for r in results
            if isinstance(r, dict) and isinstance(r.get("text_signature"), str) and r["text_signature"]
        ]
        if not signatures:
            logger.debug(f"No 4byte matches for {hex_signature}")
            return None

        best = signatures[0]
        parsed = parse_signature(best)
        name, args = parsed if parsed else (best.split("(", 1)[0], [])
        logger.info(f"4byte hint for {hex_signature}: {best} ({len(signatures)} candidate(s), unverified)")
        return FourByteMatch(name=name, signature=best, args=args, all_matches=signatures)
