"""Public decoder engine composed from focused mixins."""

import logging
from typing import Optional, Union

from ..batch import is_multisend
from ..config import DecoderSettings
from ..models import DecodeOptions, DecodeResult
from .analysis import DecoderAnalysisMixin
from .base import DecoderBase
from .batch import DecoderBatchMixin
from .validation import DecoderValidationMixin

logger = logging.getLogger(__name__)


class CalldataDecoder(
    DecoderBase,
    DecoderValidationMixin,
    DecoderAnalysisMixin,
    DecoderBatchMixin,
):
    """Decoder engine with modular stage-oriented implementation."""

    def decode(self, calldata: Union[str, bytes], options: Optional[DecodeOptions] = None) -> DecodeResult:
        """
        Decode calldata and describe what signing it changes.

        The same calldata, options and local state always produce the same
        result. Unidentifiable functions are a valid UNKNOWN result, not an
        error.

        Args:
            calldata: Hex calldata (0x prefix optional) or raw bytes
            options: Target, operation, trust profile and lookup behavior

        Returns:
            DecodeResult

        Raises:
            InvalidCalldataError: malformed calldata or batch payload
            ProfileValidationError: bad options or trust profile
            LookupUnavailableError: a required lookup store is unreachable
        """
        options = options or DecodeOptions()
        data = self._normalize_calldata(calldata)
        target, operation, profile = self._normalize_options(options)

        batch_info = None
        if is_multisend(data):
            batch_info = self._analyze_batch(data, target, profile, options)

        return self._analyze_call(data, target, operation, profile, options, batch_info=batch_info)


def decode(calldata: Union[str, bytes], options: Optional[DecodeOptions] = None) -> DecodeResult:
    """Decode with a decoder built from environment settings."""
    return CalldataDecoder(DecoderSettings.from_env()).decode(calldata, options)
