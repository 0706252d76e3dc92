"""
Effect analysis: base template plus trust and DELEGATECALL adjustments.

Adjustments are applied in a fixed order so the result is reproducible:

1. Unidentified (or only 4byte-named) functions short-circuit to UNKNOWN.
2. Unlimited approvals escalate inside the approval template.
3. A selector that is NEVER_USED or UNUSUAL escalates one step.
4. A selector that is NOT_ALLOWED on a trusted contract becomes CRITICAL.
5. A trust-blocked target becomes UNKNOWN and loses its interpretation.
6. A DELEGATECALL not allow-listed in the profile becomes CRITICAL.
"""

import logging
from typing import Optional

from ..models import (
    ContractClassification,
    EffectModel,
    Identification,
    Operation,
    SelectorClassification,
    Severity,
    Source,
    TrustContext,
)
from .severity import escalate
from .templates import EFFECT_HANDLERS, EffectContext, native_transfer_effect, unresolved_effect

logger = logging.getLogger(__name__)

UNVERIFIED_TARGET_WARNING = (
    "UNVERIFIED TARGET: this contract is not trusted by your Safe's trust profile, "
    "so the decoded function name and parameters cannot be relied on"
)
WATCHED_TARGET_WARNING = (
    "WATCHED TARGET: this contract is in your trust profile for monitoring only "
    "and is not approved for transactions"
)

DELEGATECALL_WARNINGS = [
    "DELEGATECALL executes external code with YOUR wallet's FULL PERMISSIONS",
    "This contract+selector is NOT in your trustedDelegateCalls whitelist",
    "The target code can modify ANY state: owners, balances, approvals",
    "The displayed function name may not reflect what the code actually does",
]
DELEGATECALL_MITIGATIONS = [
    "STOP - Do not sign unless you have verified the target contract",
    "Add this contract to trustedDelegateCalls ONLY if you trust it completely",
]


def _is_unresolved(identification: Optional[Identification]) -> bool:
    return identification is None or identification.source == Source.FOURBYTE


def _set_severity(effect: EffectModel, severity: Severity) -> None:
    if effect.original_severity is None and effect.severity != severity:
        effect.original_severity = effect.severity
    effect.severity = severity


def _apply_selector_classification(effect: EffectModel, trust_context: TrustContext) -> None:
    classification = trust_context.selector_classification
    if classification in (SelectorClassification.NEVER_USED, SelectorClassification.UNUSUAL):
        _set_severity(effect, escalate(effect.severity))
        effect.warnings.extend(trust_context.warnings)
    elif classification == SelectorClassification.NOT_ALLOWED:
        _set_severity(effect, Severity.CRITICAL)
        effect.warnings.extend(trust_context.warnings)


def _apply_trust_block(effect: EffectModel, trust_context: TrustContext) -> None:
    if effect.original_severity is None:
        effect.original_severity = effect.severity
    effect.severity = Severity.UNKNOWN
    effect.trust_override = True
    effect.consequences = []
    if trust_context.contract_classification == ContractClassification.WATCHED:
        notice = WATCHED_TARGET_WARNING
    else:
        notice = UNVERIFIED_TARGET_WARNING
    effect.warnings = [notice] + list(trust_context.warnings)
    effect.mitigations = [
        "Verify the target contract on a block explorer before signing",
        "Add the contract to your trust profile only if you have verified it",
    ]


def _apply_delegatecall(effect: EffectModel) -> None:
    _set_severity(effect, Severity.CRITICAL)
    effect.delegatecall_override = True
    effect.warnings = DELEGATECALL_WARNINGS + [w for w in effect.warnings if w not in DELEGATECALL_WARNINGS]
    effect.mitigations = DELEGATECALL_MITIGATIONS + effect.mitigations


def analyze(
    identification: Optional[Identification],
    trust_context: TrustContext,
    operation: int = Operation.CALL,
    delegatecall_allowed: bool = False,
    profile=None,
    target_address: Optional[str] = None,
    call_count: Optional[int] = None,
) -> EffectModel:
    """
    Derive the effect of one call.

    Args:
        identification: Resolver outcome (None when no source knows the selector)
        trust_context: Output of the trust classifier for the same call
        operation: 0 for CALL, 1 for DELEGATECALL
        delegatecall_allowed: Contract and selector are in trustedDelegateCalls
        profile: Trust profile used for address labels
        target_address: Contract receiving the call
        call_count: Number of sub-calls when the call is a parsed batch

    Returns:
        EffectModel with its final severity
    """
    ctx = EffectContext(
        params=identification.params if identification else None,
        unlimited=identification.unlimited_params if identification else (),
        profile=profile,
        target_address=target_address,
        call_count=call_count,
    )

    if _is_unresolved(identification):
        effect = unresolved_effect(identification, ctx)
    else:
        handler = EFFECT_HANDLERS.get(identification.category, unresolved_effect)
        effect = handler(identification, ctx)
        _apply_selector_classification(effect, trust_context)

    if trust_context.trust_blocked:
        _apply_trust_block(effect, trust_context)

    if operation == Operation.DELEGATECALL and not delegatecall_allowed:
        _apply_delegatecall(effect)

    logger.debug(
        f"Effect for {identification.function_name if identification else 'unresolved call'}: "
        f"{effect.effect_type} / {effect.severity.value}"
    )
    return effect


def analyze_native_transfer(
    value: int,
    to: Optional[str],
    trust_context: TrustContext,
    operation: int = Operation.CALL,
    profile=None,
) -> EffectModel:
    """Effect of a call with no calldata (plain value transfer)."""
    effect = native_transfer_effect(value, to, EffectContext(profile=profile, target_address=to))
    if trust_context.trust_blocked:
        _apply_trust_block(effect, trust_context)
    # Empty calldata can never be allow-listed for DELEGATECALL
    if operation == Operation.DELEGATECALL:
        _apply_delegatecall(effect)
    return effect
