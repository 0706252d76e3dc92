"""
Gate between the deterministic result and the narrator model.

The model never sees raw calldata and never decides severity. It only
restates consequences that were already derived. Results with nothing
verified (trust-blocked, untrusted name only, or unresolved) get a fixed
response and no prompt at all.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..decoding import MAX_UINT256
from ..models import DecodeResult, Source
from .prompts import (
    ABI_VERIFIED_SYSTEM_PROMPT,
    ACTION_DESCRIPTIONS,
    DELEGATECALL_SYSTEM_PROMPT,
    PERMANENCE_DESCRIPTIONS,
    PROMPT_FOOTER,
    TRUST_PROFILE_SYSTEM_PROMPT,
    UNVERIFIED_RESPONSE,
    VERIFIED_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

DEFAULT_PERMANENCE = "Permanence depends on the specific function behavior."
HEX_RUN_PATTERN = re.compile(r"0x[a-fA-F0-9]{20,}")
ADDRESS_HEX_LENGTH = 42


@dataclass
class ExplainerPrompt:
    skip_ai: bool
    flow: str
    system: Optional[str] = None
    user: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    fixed_response: Optional[Dict[str, str]] = None


@dataclass
class PromptSafety:
    safe: bool
    issues: List[str] = field(default_factory=list)


def describe_parameter(name: str, value) -> Optional[str]:
    """One KEY DETAILS line for a decoded parameter, without raw data."""
    if isinstance(value, bool):
        return f"- {name}: {'enabled/approved' if value else 'disabled/revoked'}"
    if isinstance(value, int):
        if value == MAX_UINT256:
            return f"- {name}: unlimited amount (maximum possible value)"
        if value == 0:
            return f"- {name}: zero (often used to revoke permissions)"
        return f"- {name}: a specific amount ({value})"
    if isinstance(value, str) and value.startswith("0x"):
        if len(value) == ADDRESS_HEX_LENGTH:
            return f"- {name}: an Ethereum address ({value})"
        return f"- {name}: additional data (not shown)"
    if isinstance(value, list):
        return f"- {name}: a list of {len(value)} items"
    if isinstance(value, dict):
        return f"- {name}: a structure with {len(value)} fields"
    return f"- {name}: {value}"


def _effect_lines(result: DecodeResult, warnings_heading: str) -> List[str]:
    effect = result.effect
    permanence = effect.permanence.value if effect.permanence else None
    lines = [
        f"ACTION TYPE: {ACTION_DESCRIPTIONS.get(effect.effect_type, 'performing an action')}",
        f"PERMANENCE: {PERMANENCE_DESCRIPTIONS.get(permanence, DEFAULT_PERMANENCE)}",
    ]
    if effect.amount_label:
        lines.append(f"AMOUNT: {effect.amount_label}")
    if effect.beneficiary:
        lines.append(f"BENEFICIARY: {effect.beneficiary}")

    if effect.consequences:
        lines.append("\nPRE-ANALYZED CONSEQUENCES:")
        lines += [f"{i}. {c}" for i, c in enumerate(effect.consequences, 1)]
    if effect.warnings:
        lines.append(f"\n{warnings_heading}:")
        lines += [f"- {w}" for w in effect.warnings]

    if result.params:
        details = [describe_parameter(name, value) for name, value in result.params.items()]
        lines.append("\nKEY DETAILS:")
        lines += [d for d in details if d]
    return lines


def _batch_lines(result: DecodeResult) -> List[str]:
    if not result.batch_info:
        return []
    lines = ["", f"BATCH SUB-CALLS ({result.batch_info.call_count}, executed in this order):"]
    for call in result.batch_info.calls:
        analysis = call.analysis
        if analysis.source in (None, Source.FOURBYTE) or analysis.trust_context.trust_blocked:
            name = "unverified function"
        else:
            name = analysis.function_name or "unverified function"
        target = analysis.target_name or call.to
        lines.append(
            f"{call.index + 1}. {call.operation_label} {name} on {target} "
            f"(value {call.value} wei, severity {analysis.header_severity.value})"
        )
    return lines


def _metadata(result: DecodeResult, trust_profile_verified: bool) -> Dict[str, Any]:
    metadata = {
        "source": result.source.value if result.source else None,
        "severity": result.header_severity.value,
        "verified": result.verified,
        "trustProfileVerified": trust_profile_verified,
    }
    if result.trust_context.label:
        metadata["contractLabel"] = result.trust_context.label
    if result.trust_context.selector_label:
        metadata["functionLabel"] = result.trust_context.selector_label
    return metadata


def _unverified_prompt(result: DecodeResult) -> ExplainerPrompt:
    return ExplainerPrompt(
        skip_ai=True,
        flow="UNVERIFIED",
        metadata=_metadata(result, False),
        fixed_response=dict(UNVERIFIED_RESPONSE),
    )


def _delegatecall_prompt(result: DecodeResult) -> ExplainerPrompt:
    lines = [
        "Explain this DELEGATECALL transaction:\n",
        "OPERATION TYPE: DELEGATECALL (code executes with wallet's full permissions)",
        "SEVERITY: CRITICAL (non-negotiable)",
        f"TARGET ADDRESS: {result.target_address or 'Unknown'}",
        f"DISPLAYED FUNCTION: {result.function_name or 'Unknown'} (MAY BE MISLEADING)",
        "WHITELIST STATUS: NOT in trustedDelegateCalls",
        "",
        "SECURITY WARNINGS:",
    ]
    lines += [f"- {w}" for w in result.effect.warnings]
    lines += [
        "",
        "MANDATORY POINTS TO COVER:",
        "1. This executes external code with the wallet's FULL permissions",
        "2. The displayed function name/params may be misleading",
        "3. The target contract is NOT whitelisted for DELEGATECALL",
        "4. Signing could result in total loss of all assets",
        "5. User should STOP and verify before signing",
    ]
    lines += PROMPT_FOOTER
    return ExplainerPrompt(
        skip_ai=False,
        flow="DELEGATECALL",
        system=DELEGATECALL_SYSTEM_PROMPT,
        user="\n".join(lines),
        metadata=_metadata(result, False),
    )


def _trust_profile_prompt(result: DecodeResult) -> ExplainerPrompt:
    trust = result.trust_context
    lines = [
        "Explain this TRUST PROFILE VERIFIED transaction to a non-technical user:\n",
        "VERIFICATION SOURCE: Trust Profile (NOT ABI-verified)",
        f"TRUSTED CONTRACT: {trust.label or 'trusted contract'}",
        f"TRUST LEVEL: {trust.trust_level.value if trust.trust_level else 'TRUSTED'}",
        f"FUNCTION: {result.function_name or trust.selector_label or 'trusted function'}",
    ]
    if trust.usage_count:
        lines += ["", "USAGE HISTORY:", f"- Used {trust.usage_count} times previously"]
        if trust.last_used:
            lines.append(f"- Last used: {trust.last_used}")
    lines.append("")
    lines += _effect_lines(result, "TRUST PROFILE NOTES")
    lines += _batch_lines(result)
    lines += PROMPT_FOOTER
    return ExplainerPrompt(
        skip_ai=False,
        flow="TRUST_PROFILE",
        system=TRUST_PROFILE_SYSTEM_PROMPT,
        user="\n".join(lines),
        metadata=_metadata(result, True),
    )


def _abi_verified_prompt(result: DecodeResult) -> ExplainerPrompt:
    trust = result.trust_context
    lines = [
        "Explain this ABI-VERIFIED transaction to a non-technical user:\n",
        f"VERIFICATION SOURCE: LOCAL_ABI ({result.source.value})",
    ]
    if trust.label:
        lines.append(f"CONTRACT: {trust.label}")
    if trust.trust_level:
        lines.append(f"TRUST LEVEL: {trust.trust_level.value}")
    lines.append(f"FUNCTION: {result.function_name}")
    if result.signature:
        lines.append(f"SIGNATURE: {result.signature}")
    lines.append("")
    lines += _effect_lines(result, "IMPORTANT NOTES")
    lines += _batch_lines(result)
    lines += PROMPT_FOOTER
    return ExplainerPrompt(
        skip_ai=False,
        flow="LOCAL_ABI",
        system=ABI_VERIFIED_SYSTEM_PROMPT,
        user="\n".join(lines),
        metadata=_metadata(result, False),
    )


def _verified_prompt(result: DecodeResult) -> ExplainerPrompt:
    lines = [
        "Explain this transaction to a non-technical user:\n",
        "VERIFICATION SOURCE: VERIFIED_DATABASE",
        f"FUNCTION: {result.function_name}",
    ]
    if result.target_name:
        lines.append(f"CONTRACT: {result.target_name}")
    lines.append("")
    lines += _effect_lines(result, "FACTS TO INCORPORATE")
    lines += _batch_lines(result)
    lines += PROMPT_FOOTER
    return ExplainerPrompt(
        skip_ai=False,
        flow="VERIFIED_DATABASE",
        system=VERIFIED_SYSTEM_PROMPT,
        user="\n".join(lines),
        metadata=_metadata(result, False),
    )


def build_prompt(result: DecodeResult) -> ExplainerPrompt:
    """
    Decide whether the narrator may run and build its prompt.

    Args:
        result: Completed DecodeResult

    Returns:
        ExplainerPrompt; skip_ai results carry a fixed_response instead of a prompt
    """
    if result.trust_context.trust_blocked or result.source in (None, Source.FOURBYTE):
        logger.info("Explainer skipped: nothing verified to explain")
        return _unverified_prompt(result)

    if result.is_delegatecall and result.effect.delegatecall_override:
        return _delegatecall_prompt(result)
    if result.source == Source.TRUST_PROFILE:
        return _trust_profile_prompt(result)
    if result.source in (Source.LOCAL_REGISTRY, Source.TRUST_PROFILE_ABI):
        return _abi_verified_prompt(result)
    return _verified_prompt(result)


def validate_prompt_safety(prompt: ExplainerPrompt) -> PromptSafety:
    """Reject prompts that carry hex runs longer than an address (raw calldata)."""
    issues = []
    for part_name, text in (("system", prompt.system), ("user", prompt.user)):
        if not text:
            continue
        long_hex = [m for m in HEX_RUN_PATTERN.findall(text) if len(m) > ADDRESS_HEX_LENGTH]
        if long_hex:
            issues.append(f"{part_name} prompt contains raw hex data longer than an address")
    return PromptSafety(safe=not issues, issues=issues)
