"""Markdown and JSON rendering of decode results."""

import json
from typing import Any, Dict, List, Optional

from .models import DecodeResult, Severity

SEVERITY_ICONS = {
    Severity.OK: "🟢",
    Severity.WARN: "🟡",
    Severity.DANGER: "🟠",
    Severity.HIGH: "🔴",
    Severity.CRITICAL: "⛔",
    Severity.UNKNOWN: "❔",
}


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return f"`{json.dumps(value, default=str)}`"
    return f"`{value}`"


def _section(title: str, items: List[str], numbered: bool = False) -> List[str]:
    if not items:
        return []
    lines = [f"### {title}", ""]
    for idx, item in enumerate(items, 1):
        lines.append(f"{idx}. {item}" if numbered else f"- {item}")
    lines.append("")
    return lines


def _call_lines(result: DecodeResult, heading: str) -> List[str]:
    effect = result.effect
    trust = result.trust_context
    icon = SEVERITY_ICONS[result.header_severity]

    lines = [f"{heading} {icon} {result.header_severity.value}", ""]
    lines.append(f"**Function:** {result.function_name or 'Unidentified function'}")
    if result.signature:
        lines.append(f"**Signature:** `{result.signature}`")
    if result.selector:
        lines.append(f"**Selector:** `{result.selector}`")
    lines.append(f"**Source:** {result.source.value if result.source else 'none'} "
                 f"(verified: {result.verified}, ABI verified: {result.abi_verified})")
    if result.target_address:
        target = result.target_address
        if result.target_name:
            target = f"{result.target_name} ({target})"
        lines.append(f"**Target:** {target}")
    lines.append(f"**Operation:** {result.operation.name}")
    lines.append(f"**Effect:** {effect.effect_type} / {effect.severity.value}"
                 + (f" (was {effect.original_severity.value})" if effect.original_severity else ""))
    if effect.amount_label:
        lines.append(f"**Amount:** {effect.amount_label}")
    if effect.permanence:
        lines.append(f"**Permanence:** {effect.permanence.value}")
    if result.decode_error:
        lines.append(f"**Decode error:** {result.decode_error}")
    lines.append("")

    if trust.profile_loaded:
        classification = trust.contract_classification.value if trust.contract_classification else "-"
        selector_class = trust.selector_classification.value if trust.selector_classification else "-"
        lines.append(f"**Trust:** {classification} / {selector_class}"
                     + (f" ({trust.label}, {trust.trust_level.value})" if trust.label and trust.trust_level else ""))
        if trust.trust_blocked:
            lines.append("**Interpretation blocked:** target is not trusted by the profile")
        lines.append("")

    if result.params:
        lines += ["### Parameters", "", "| Name | Value |", "|------|-------|"]
        for name, value in result.params.items():
            lines.append(f"| {name} | {_format_value(value)} |")
        lines.append("")

    lines += _section("Consequences", effect.consequences, numbered=True)
    lines += _section("Warnings", effect.warnings)
    lines += _section("Mitigations", effect.mitigations)

    if result.unverified_hint:
        hint = result.unverified_hint
        lines.append(f"> Unverified name suggestion from 4byte.directory: `{hint.signature}` "
                     "(not used for any assessment)")
        lines.append("")
    return lines


def format_report(result: DecodeResult, explanation: Optional[str] = None) -> str:
    """
    Render a decode result as markdown.

    Args:
        result: DecodeResult to render
        explanation: Optional narrator text appended at the end

    Returns:
        Markdown string
    """
    lines = _call_lines(result, "## Transaction")

    if result.batch_info:
        info = result.batch_info
        summary = info.batch_summary
        lines += [
            f"## Batch ({info.batch_type.value}, {info.call_count} calls)",
            "",
            f"**Overall:** {SEVERITY_ICONS[summary.overall_severity]} {summary.overall_severity.value}",
            "",
            "| Bucket | Count |",
            "|--------|-------|",
        ]
        lines += [f"| {bucket} | {count} |" for bucket, count in summary.counts.items()]
        lines.append("")
        for call in info.calls:
            lines += _call_lines(
                call.analysis,
                f"### Call {call.index + 1}: {call.operation_label} to {call.to}, value {call.value} wei -",
            )

    if explanation:
        lines += ["## Explanation", "", explanation, ""]

    return "\n".join(lines)


def to_dict(result: DecodeResult) -> Dict[str, Any]:
    return result.model_dump(mode="json", by_alias=True)


def to_json(result: DecodeResult, indent: int = 2) -> str:
    """JSON with camelCase keys, as consumed by API clients."""
    return json.dumps(to_dict(result), indent=indent)
