"""Structured result models produced by the decode pipeline."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Source(str, Enum):
    VERIFIED_DATABASE = "VERIFIED_DATABASE"
    LOCAL_REGISTRY = "LOCAL_REGISTRY"
    TRUST_PROFILE_ABI = "TRUST_PROFILE_ABI"
    TRUST_PROFILE = "TRUST_PROFILE"
    FOURBYTE = "FOURBYTE"


class Severity(str, Enum):
    OK = "OK"
    WARN = "WARN"
    DANGER = "DANGER"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"


class Permanence(str, Enum):
    PERMANENT = "PERMANENT"
    PERMANENT_UNTIL_REVOKED = "PERMANENT_UNTIL_REVOKED"
    TEMPORARY = "TEMPORARY"
    IMMEDIATE = "IMMEDIATE"
    ONE_TIME = "ONE_TIME"


class Operation(IntEnum):
    CALL = 0
    DELEGATECALL = 1


class TrustLevel(str, Enum):
    INTERNAL = "INTERNAL"
    PROTOCOL = "PROTOCOL"
    PARTNER = "PARTNER"
    WATCHED = "WATCHED"


class ContractClassification(str, Enum):
    TRUSTED = "TRUSTED"
    WATCHED = "WATCHED"
    UNKNOWN = "UNKNOWN"


class SelectorClassification(str, Enum):
    EXPECTED = "EXPECTED"
    UNUSUAL = "UNUSUAL"
    NEVER_USED = "NEVER_USED"
    NOT_ALLOWED = "NOT_ALLOWED"


class BatchType(str, Enum):
    MULTISEND = "MULTISEND"
    MULTISEND_CALL_ONLY = "MULTISEND_CALL_ONLY"
    UNRECOGNIZED_TARGET = "UNRECOGNIZED_TARGET"


# Verification flags are a pure function of the identifying source
SOURCE_VERIFICATION = {
    Source.VERIFIED_DATABASE: (True, False),
    Source.LOCAL_REGISTRY: (False, True),
    Source.TRUST_PROFILE_ABI: (False, True),
    Source.TRUST_PROFILE: (False, False),
    Source.FOURBYTE: (False, False),
    None: (False, False),
}


class DecoderModel(BaseModel):
    """Base model serialized with camelCase keys for consumers."""
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class EffectModel(DecoderModel):
    effect_type: str
    label: Optional[str] = None
    permanence: Optional[Permanence] = None
    beneficiary: Optional[str] = None
    consequences: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    mitigations: List[str] = Field(default_factory=list)
    severity: Severity
    amount_label: Optional[str] = None
    delegatecall_override: bool = False
    trust_override: bool = False
    original_severity: Optional[Severity] = None


class TrustContext(DecoderModel):
    profile_loaded: bool = False
    contract_classification: Optional[ContractClassification] = None
    selector_classification: Optional[SelectorClassification] = None
    trust_level: Optional[TrustLevel] = None
    label: Optional[str] = None
    selector_label: Optional[str] = None
    usage_count: Optional[int] = None
    last_used: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    trust_blocked: bool = False


class UnverifiedHint(DecoderModel):
    """Name suggested by the untrusted lookup. Never affects severity."""
    name: Optional[str] = None
    signature: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    all_matches: List[str] = Field(default_factory=list)
    verified: bool = False


class BatchSummary(DecoderModel):
    counts: Dict[str, int]
    overall_severity: Severity


class SubCall(DecoderModel):
    index: int
    operation: Operation
    operation_label: str
    to: str
    value: int
    data_length: int
    analysis: "DecodeResult"


class BatchInfo(DecoderModel):
    batch_type: BatchType
    calls: List[SubCall] = Field(default_factory=list)
    call_count: int
    batch_summary: BatchSummary


class DecodeResult(DecoderModel):
    calldata: Optional[str] = None
    selector: Optional[str] = None
    function_name: Optional[str] = None
    signature: Optional[str] = None
    source: Optional[Source] = None
    verified: bool = False
    abi_verified: bool = False
    params: Optional[Dict[str, Any]] = None
    unlimited_params: List[str] = Field(default_factory=list)
    effect: EffectModel
    trust_context: TrustContext
    is_delegatecall: bool = False
    operation: Operation = Operation.CALL
    target_address: Optional[str] = None
    target_name: Optional[str] = None
    is_batch: bool = False
    batch_info: Optional[BatchInfo] = None
    header_severity: Severity
    unverified_hint: Optional[UnverifiedHint] = None
    decode_error: Optional[str] = None


SubCall.model_rebuild()


@dataclass(frozen=True)
class DecodeOptions:
    """
    Caller-supplied context for a single decode.

    Attributes:
        target_address: Contract the calldata is sent to
        operation: 0 for CALL, 1 for DELEGATECALL
        profile: Loaded trust profile (or None)
        offline: Suppress the untrusted network lookup
        chain_id: Chain used to key the local ABI registry
        sources: Restrict the resolver chain to these sources (None = all)
        require_lookup: Fail instead of degrading when a requested store is unreachable
    """
    target_address: Optional[str] = None
    operation: int = 0
    profile: Any = None
    offline: bool = False
    chain_id: int = 1
    sources: Optional[Tuple[Source, ...]] = None
    require_lookup: bool = False


@dataclass(frozen=True)
class Identification:
    """Outcome of the resolver chain for one selector."""
    source: Source
    function_name: Optional[str]
    signature: Optional[str]
    category: Optional[str] = None
    template_id: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    unlimited_params: Tuple[str, ...] = ()
    label: Optional[str] = None
    decode_error: Optional[str] = None
    hint: Optional[UnverifiedHint] = None


@dataclass
class SubCallRecord:
    """One raw record read from a batch payload."""
    index: int
    operation: int
    to: str
    value: int
    data: bytes = field(repr=False)
