"""Error taxonomy for calldata decoding."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes surfaced by the decoder."""

    # Fatal to a single decode, reported to the caller
    INVALID_CALLDATA = "INVALID_CALLDATA"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Recovered inside the resolver chain
    DECODE_FALLBACK = "DECODE_FALLBACK"
    LOOKUP_UNAVAILABLE = "LOOKUP_UNAVAILABLE"


class DecoderError(Exception):
    """Base error carrying a machine-readable code."""

    code = ErrorCode.INVALID_CALLDATA

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class InvalidCalldataError(DecoderError):
    """Calldata is malformed, too short, or a batch buffer is truncated."""

    code = ErrorCode.INVALID_CALLDATA


class ProfileValidationError(DecoderError):
    """A trust profile or caller-supplied option failed validation."""

    code = ErrorCode.VALIDATION_ERROR


class ParamDecodingError(DecoderError):
    """Parameters could not be decoded with the selected ABI fragment."""

    code = ErrorCode.DECODE_FALLBACK


class LookupUnavailableError(DecoderError):
    """An ABI store, profile store, or name service could not be reached."""

    code = ErrorCode.LOOKUP_UNAVAILABLE
