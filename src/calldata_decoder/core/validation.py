"""Input validation: calldata shape and decode options."""

import logging
import re
from typing import Optional, Tuple, Union

from ..errors import InvalidCalldataError, ProfileValidationError
from ..models import DecodeOptions, Operation
from ..trust import TrustProfile, parse_profile

logger = logging.getLogger(__name__)

HEX_PATTERN = re.compile(r"^[0-9a-fA-F]*$")
ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


class DecoderValidationMixin:
    def _normalize_calldata(self, calldata: Union[str, bytes]) -> bytes:
        """
        Parse calldata into bytes.

        Accepts hex text with or without the 0x prefix, or raw bytes.

        Raises:
            InvalidCalldataError: not hex, odd length, or shorter than a selector
        """
        if isinstance(calldata, (bytes, bytearray)):
            data = bytes(calldata)
        elif isinstance(calldata, str):
            text = calldata.strip()
            if text[:2].lower() == "0x":
                text = text[2:]
            if not HEX_PATTERN.match(text):
                raise InvalidCalldataError("Calldata must be a hex string")
            if len(text) % 2:
                raise InvalidCalldataError("Calldata hex has an odd number of digits")
            data = bytes.fromhex(text)
        else:
            raise InvalidCalldataError(f"Unsupported calldata type: {type(calldata).__name__}")

        if len(data) < 4:
            raise InvalidCalldataError(f"Calldata too short: {len(data)} bytes, a selector needs 4")
        return data

    def _normalize_options(self, options: Optional[DecodeOptions]) -> Tuple[Optional[str], int, Optional[TrustProfile]]:
        """
        Validate caller options before any analysis.

        Returns:
            (target_address, operation, profile)

        Raises:
            ProfileValidationError: bad target address, operation, or profile document
        """
        options = options or DecodeOptions()

        target = options.target_address
        if target is not None and not ADDRESS_PATTERN.match(target):
            raise ProfileValidationError(f"Invalid target address: {target!r}")

        try:
            operation = Operation(options.operation)
        except ValueError as e:
            raise ProfileValidationError(f"Invalid operation {options.operation!r}, expected 0 or 1") from e

        profile = options.profile
        if isinstance(profile, dict):
            profile = parse_profile(profile)
        elif profile is not None and not isinstance(profile, TrustProfile):
            raise ProfileValidationError(f"Unsupported profile type: {type(profile).__name__}")

        return target, operation, profile
