"""Trust profile loading and classification."""

from .classifier import classify, is_delegatecall_allowed
from .profile import (
    TrustedContractConfig,
    TrustProfile,
    create_empty_profile,
    load_profile,
    parse_profile,
)

__all__ = [
    "TrustProfile",
    "TrustedContractConfig",
    "classify",
    "create_empty_profile",
    "is_delegatecall_allowed",
    "load_profile",
    "parse_profile",
]
