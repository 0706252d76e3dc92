"""Runtime settings for the decoder, read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_FOURBYTE_URL = "https://www.4byte.directory/api/v1/signatures/"


@dataclass(frozen=True)
class DecoderSettings:
    abi_registry_dir: Path = Path("abis")
    fourbyte_url: str = DEFAULT_FOURBYTE_URL
    fourbyte_timeout: float = 5.0
    batch_max_workers: int = 8
    chain_id: int = 1
    explainer_model: str = "gpt-4o-mini"

    @classmethod
    def from_env(cls) -> "DecoderSettings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            abi_registry_dir=Path(os.getenv("ABI_REGISTRY_DIR") or "abis"),
            fourbyte_url=os.getenv("FOURBYTE_API_URL") or DEFAULT_FOURBYTE_URL,
            fourbyte_timeout=float(os.getenv("FOURBYTE_TIMEOUT") or "5"),
            batch_max_workers=int(os.getenv("BATCH_MAX_WORKERS") or "8"),
            chain_id=int(os.getenv("CHAIN_ID") or "1"),
            explainer_model=os.getenv("EXPLAINER_MODEL") or "gpt-4o-mini",
        )
