"""
Deterministic Ethereum calldata decoder.

Identifies the function a calldata payload invokes, decodes its parameters,
classifies the target against a Safe trust profile and describes what
signing changes, with a severity grade.
"""

from .config import DecoderSettings
from .core import CalldataDecoder, decode
from .errors import (
    DecoderError,
    ErrorCode,
    InvalidCalldataError,
    LookupUnavailableError,
    ParamDecodingError,
    ProfileValidationError,
)
from .explainer import build_prompt, validate_prompt_safety
from .models import (
    BatchInfo,
    DecodeOptions,
    DecodeResult,
    EffectModel,
    Severity,
    Source,
    TrustContext,
)
from .trust import TrustProfile, create_empty_profile, load_profile, parse_profile

__all__ = [
    "BatchInfo",
    "CalldataDecoder",
    "DecodeOptions",
    "DecodeResult",
    "DecoderError",
    "DecoderSettings",
    "EffectModel",
    "ErrorCode",
    "InvalidCalldataError",
    "LookupUnavailableError",
    "ParamDecodingError",
    "ProfileValidationError",
    "Severity",
    "Source",
    "TrustContext",
    "TrustProfile",
    "build_prompt",
    "create_empty_profile",
    "decode",
    "load_profile",
    "parse_profile",
    "validate_prompt_safety",
]
