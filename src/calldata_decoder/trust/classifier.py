"""Classify a (contract, selector) pair against a trust profile."""

import logging
from typing import List, Optional

from ..models import (
    ContractClassification,
    SelectorClassification,
    TrustContext,
    TrustLevel,
)
from .profile import TrustedContractConfig, TrustProfile

logger = logging.getLogger(__name__)

# Usage counts at or below this are UNUSUAL
UNUSUAL_USAGE_THRESHOLD = 2

UNKNOWN_CONTRACT_WARNINGS = [
    "Target contract is NOT in your Safe's trust profile",
    "Do NOT trust the function name - selectors can be misleading for unknown contracts",
    "This could be a phishing attempt using familiar-looking function names",
]

WATCHED_CONTRACT_WARNINGS = [
    "Target contract is WATCHED but not fully trusted",
    "Exercise caution - this contract has not been approved for transactions",
]


def _classify_selector(
    contract: TrustedContractConfig,
    target_address: str,
    selector: str,
    profile: TrustProfile,
):
    """Return (classification, usage_count, last_used, warnings) for a trusted contract."""
    if contract.allowed_selectors == "*":
        return SelectorClassification.EXPECTED, None, None, []

    if not contract.allows(selector):
        return SelectorClassification.NOT_ALLOWED, None, None, [
            "This function is NOT in the allowed list for this contract",
            "The contract is trusted, but this specific function has not been approved",
        ]

    usage = profile.get_usage(target_address, selector)
    count = usage.count if usage else 0
    last_used = usage.last_used if usage else None

    if count == 0:
        return SelectorClassification.NEVER_USED, 0, None, [
            "FIRST TIME using this function with this contract",
            "Verify this is intentional before signing",
        ]
    if count <= UNUSUAL_USAGE_THRESHOLD:
        warnings = [f"This function is rarely used (only {count} previous times)"]
        if last_used:
            warnings.append(f"Last used: {last_used}")
        return SelectorClassification.UNUSUAL, count, last_used, warnings
    return SelectorClassification.EXPECTED, count, last_used, []


def classify(
    target_address: Optional[str],
    selector: Optional[str],
    profile: Optional[TrustProfile],
) -> TrustContext:
    """
    Build the trust context for a call.

    Without a profile the context is neutral and never affects severity.
    With a profile, a target outside trustedContracts (or no target at all)
    is UNKNOWN and blocked; a WATCHED target is informational only and also
    blocked from interpretation.

    Args:
        target_address: Contract the call is sent to
        selector: 4-byte selector as hex string (None for plain value transfers)
        profile: Loaded trust profile or None

    Returns:
        TrustContext
    """
    if profile is None:
        return TrustContext(profile_loaded=False)

    contract = profile.get_contract(target_address)
    if contract is None:
        logger.info(f"Target {target_address} is not in the trust profile - blocking interpretation")
        return TrustContext(
            profile_loaded=True,
            contract_classification=ContractClassification.UNKNOWN,
            warnings=list(UNKNOWN_CONTRACT_WARNINGS),
            trust_blocked=True,
        )

    if contract.trust_level == TrustLevel.WATCHED:
        return TrustContext(
            profile_loaded=True,
            contract_classification=ContractClassification.WATCHED,
            trust_level=contract.trust_level,
            label=contract.label,
            warnings=list(WATCHED_CONTRACT_WARNINGS),
            notes=contract.notes,
            trust_blocked=True,
        )

    selector_label = None
    classification = None
    usage_count = None
    last_used = None
    warnings: List[str] = []
    if selector:
        classification, usage_count, last_used, warnings = _classify_selector(
            contract, target_address, selector, profile
        )
        if classification != SelectorClassification.NOT_ALLOWED:
            selector_label = contract.allowed_selectors_labels.get(selector.lower())

    logger.debug(f"Trust classification for {target_address}/{selector}: TRUSTED/{classification}")
    return TrustContext(
        profile_loaded=True,
        contract_classification=ContractClassification.TRUSTED,
        selector_classification=classification,
        trust_level=contract.trust_level,
        label=contract.label,
        selector_label=selector_label,
        usage_count=usage_count,
        last_used=last_used,
        warnings=warnings,
        notes=contract.notes,
        trust_blocked=False,
    )


def is_delegatecall_allowed(
    target_address: Optional[str],
    selector: Optional[str],
    profile: Optional[TrustProfile],
) -> bool:
    """True only when the profile's trustedDelegateCalls lists this contract and selector."""
    if profile is None or not target_address:
        return False
    entry = profile.trusted_delegate_calls.get(target_address.lower())
    if entry is None:
        return False
    # Empty calldata under DELEGATECALL is never allow-listed
    return bool(selector) and selector.lower() in entry.allowed_selectors
