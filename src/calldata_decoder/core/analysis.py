"""Single-call analysis: resolve, classify, derive the effect."""

import logging
from typing import Optional

from ..decoding import ResolveRequest, resolve
from ..effects import analyze, analyze_native_transfer
from ..models import (
    SOURCE_VERIFICATION,
    BatchInfo,
    DecodeOptions,
    DecodeResult,
    Identification,
    Operation,
    Severity,
    TrustContext,
)
from ..effects.severity import max_severity
from ..selectors import lookup_address
from ..trust import TrustProfile, classify, is_delegatecall_allowed

logger = logging.getLogger(__name__)


class DecoderAnalysisMixin:
    def _identify(
        self,
        selector: str,
        data: bytes,
        target: Optional[str],
        profile: Optional[TrustProfile],
        options: DecodeOptions,
    ) -> Optional[Identification]:
        request = ResolveRequest(
            selector=selector,
            data=data[4:],
            target_address=target,
            chain_id=options.chain_id,
            profile=profile,
            registry=self.registry,
            fourbyte=self.fourbyte,
            offline=options.offline,
        )
        return resolve(request, sources=options.sources, require_lookup=options.require_lookup)

    @staticmethod
    def _target_name(target: Optional[str], profile: Optional[TrustProfile]) -> Optional[str]:
        if profile is not None:
            label = profile.get_address_label(target)
            if label:
                return label
        return lookup_address(target)

    @staticmethod
    def _header_severity(effect_severity: Severity, trust_context: TrustContext) -> Severity:
        # A blocked target never shows a definite grade in the header
        if trust_context.trust_blocked:
            return Severity.UNKNOWN
        return effect_severity

    def _analyze_call(
        self,
        data: bytes,
        target: Optional[str],
        operation: Operation,
        profile: Optional[TrustProfile],
        options: DecodeOptions,
        batch_info: Optional[BatchInfo] = None,
        value: int = 0,
    ) -> DecodeResult:
        """
        Analyze one call (top-level or batch sub-call).

        Args:
            data: Calldata bytes, empty for a plain value transfer
            target: Contract receiving the call
            operation: CALL or DELEGATECALL
            profile: Validated trust profile or None
            options: Decode options for lookup behavior
            batch_info: Parsed sub-calls when this call is a multiSend
            value: Wei sent with the call

        Returns:
            DecodeResult for the call
        """
        operation = Operation(operation)

        if not data:
            trust_context = classify(target, None, profile)
            effect = analyze_native_transfer(value, target, trust_context, operation, profile)
            return DecodeResult(
                calldata="0x",
                effect=effect,
                trust_context=trust_context,
                is_delegatecall=operation == Operation.DELEGATECALL,
                operation=operation,
                target_address=target,
                target_name=self._target_name(target, profile),
                header_severity=self._header_severity(effect.severity, trust_context),
            )

        if len(data) < 4:
            # Only reachable for batch sub-calls; top-level input is rejected earlier
            trust_context = classify(target, None, profile)
            effect = analyze(None, trust_context, operation=operation, profile=profile, target_address=target)
            logger.warning(f"Sub-call data to {target} is {len(data)} byte(s), too short for a selector")
            return DecodeResult(
                calldata="0x" + data.hex(),
                effect=effect,
                trust_context=trust_context,
                is_delegatecall=operation == Operation.DELEGATECALL,
                operation=operation,
                target_address=target,
                target_name=self._target_name(target, profile),
                header_severity=self._header_severity(effect.severity, trust_context),
                decode_error="calldata too short for a selector",
            )

        selector = "0x" + data[:4].hex()
        identification = self._identify(selector, data, target, profile, options)
        trust_context = classify(target, selector, profile)
        delegatecall_allowed = is_delegatecall_allowed(target, selector, profile)
        effect = analyze(
            identification,
            trust_context,
            operation=operation,
            delegatecall_allowed=delegatecall_allowed,
            profile=profile,
            target_address=target,
            call_count=batch_info.call_count if batch_info else None,
        )

        source = identification.source if identification else None
        verified, abi_verified = SOURCE_VERIFICATION[source]

        header = self._header_severity(effect.severity, trust_context)
        if batch_info is not None:
            header = max_severity([header, batch_info.batch_summary.overall_severity])

        logger.info(
            f"Decoded {selector} on {target or 'unknown target'}: "
            f"{source.value if source else 'unresolved'} / {header.value}"
        )
        return DecodeResult(
            calldata="0x" + data.hex(),
            selector=selector,
            function_name=identification.function_name if identification else None,
            signature=identification.signature if identification else None,
            source=source,
            verified=verified,
            abi_verified=abi_verified,
            params=identification.params if identification else None,
            unlimited_params=list(identification.unlimited_params) if identification else [],
            effect=effect,
            trust_context=trust_context,
            is_delegatecall=operation == Operation.DELEGATECALL,
            operation=operation,
            target_address=target,
            target_name=self._target_name(target, profile),
            is_batch=batch_info is not None,
            batch_info=batch_info,
            header_severity=header,
            unverified_hint=identification.hint if identification else None,
            decode_error=identification.decode_error if identification else None,
        )
