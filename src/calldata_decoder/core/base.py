"""Base decoder state and shared configuration."""

from typing import Optional

from ..clients import AbiRegistry, FourByteClient
from ..config import DecoderSettings


class DecoderBase:
    """Base class for decoder runtime state."""

    def __init__(
        self,
        settings: Optional[DecoderSettings] = None,
        registry: Optional[AbiRegistry] = None,
        fourbyte: Optional[FourByteClient] = None,
    ):
        self.settings = settings or DecoderSettings()
        self.max_workers = max(1, self.settings.batch_max_workers)

        self.registry = registry or AbiRegistry(self.settings.abi_registry_dir)
        self.fourbyte = fourbyte or FourByteClient(
            api_url=self.settings.fourbyte_url,
            timeout=self.settings.fourbyte_timeout,
        )
