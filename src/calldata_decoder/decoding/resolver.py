"""
Priority-ordered selector identification.

Each source is a function taking a ResolveRequest and returning an
Identification or None. Sources run in a fixed order and the first hit is
authoritative for naming; nothing is merged across sources.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..abi import ABI, AbiEntry, parse_signature
from ..clients import AbiRegistry, FourByteClient
from ..errors import LookupUnavailableError, ParamDecodingError
from ..models import Identification, Source, TrustLevel, UnverifiedHint
from ..selectors import Category, lookup_selector
from ..trust.profile import TrustProfile
from .params import decode_params, inputs_from_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveRequest:
    selector: str
    data: bytes
    target_address: Optional[str] = None
    chain_id: int = 1
    profile: Optional[TrustProfile] = None
    registry: Optional[AbiRegistry] = None
    fourbyte: Optional[FourByteClient] = None
    offline: bool = False


def from_catalog(request: ResolveRequest) -> Optional[Identification]:
    entry = lookup_selector(request.selector)
    if entry is None:
        return None

    params = None
    unlimited: Tuple[str, ...] = ()
    decode_error = None
    _, types = parse_signature(entry.signature)
    try:
        decoded = decode_params(inputs_from_signature(types, entry.param_names), request.data)
        params, unlimited = decoded.values, decoded.unlimited
    except ParamDecodingError as e:
        # Catalog entries are never shadowed, so a bad payload keeps the verified name
        logger.warning(f"Catalog decode failed for {entry.signature}: {e.message}")
        decode_error = e.message

    return Identification(
        source=Source.VERIFIED_DATABASE,
        function_name=entry.function_name,
        signature=entry.signature,
        category=entry.category,
        template_id=entry.effect_template_id,
        params=params,
        unlimited_params=unlimited,
        label=entry.description,
        decode_error=decode_error,
    )


def _identify_from_abi(entry: Optional[AbiEntry], request: ResolveRequest, source: Source) -> Optional[Identification]:
    if entry is None:
        return None
    function = ABI(entry.abi_fragments).find_function_by_selector(request.selector)
    if function is None:
        return None

    # Raises ParamDecodingError; the chain falls through to the next source
    decoded = decode_params(function["inputs"], request.data)
    return Identification(
        source=source,
        function_name=function["name"],
        signature=function["signature"],
        category=Category.CONTRACT_CALL,
        params=decoded.values,
        unlimited_params=decoded.unlimited,
        label=function["name"],
    )


def from_local_registry(request: ResolveRequest) -> Optional[Identification]:
    if request.registry is None or not request.target_address:
        return None
    entry = request.registry.lookup(request.chain_id, request.target_address)
    return _identify_from_abi(entry, request, Source.LOCAL_REGISTRY)


def from_profile_abi(request: ResolveRequest) -> Optional[Identification]:
    if request.registry is None or request.profile is None:
        return None
    contract = request.profile.get_contract(request.target_address)
    if contract is None or not contract.abi_path:
        return None
    entry = request.registry.load_profile_abi(contract.abi_path, request.chain_id, request.target_address)
    return _identify_from_abi(entry, request, Source.TRUST_PROFILE_ABI)


def from_profile_label(request: ResolveRequest) -> Optional[Identification]:
    if request.profile is None:
        return None
    contract = request.profile.get_contract(request.target_address)
    if contract is None or contract.trust_level == TrustLevel.WATCHED:
        return None
    # A label never unlocks a selector the profile does not allow
    if not contract.allows(request.selector):
        return None
    label = contract.allowed_selectors_labels.get(request.selector.lower())
    if not label:
        return None
    return Identification(
        source=Source.TRUST_PROFILE,
        function_name=label,
        signature=None,
        category=Category.CONTRACT_CALL,
        label=label,
    )


def from_fourbyte(request: ResolveRequest) -> Optional[Identification]:
    if request.offline or request.fourbyte is None:
        return None
    match = request.fourbyte.lookup(request.selector)
    if match is None:
        return None
    hint = UnverifiedHint(
        name=match.name,
        signature=match.signature,
        args=list(match.args),
        all_matches=list(match.all_matches),
    )
    return Identification(
        source=Source.FOURBYTE,
        function_name=match.name,
        signature=match.signature,
        category=Category.UNRESOLVED,
        hint=hint,
    )


SOURCE_CHAIN: List[Tuple[Source, Callable[[ResolveRequest], Optional[Identification]]]] = [
    (Source.VERIFIED_DATABASE, from_catalog),
    (Source.LOCAL_REGISTRY, from_local_registry),
    (Source.TRUST_PROFILE_ABI, from_profile_abi),
    (Source.TRUST_PROFILE, from_profile_label),
    (Source.FOURBYTE, from_fourbyte),
]


def resolve(
    request: ResolveRequest,
    sources: Optional[Sequence[Source]] = None,
    require_lookup: bool = False,
) -> Optional[Identification]:
    """
    Run the source chain and return the first identification.

    Args:
        request: Selector, calldata tail and lookup context
        sources: Restrict the chain to these sources (order is always the fixed priority)
        require_lookup: Propagate LOOKUP_UNAVAILABLE when it hits the only requested source

    Returns:
        Identification, or None when no source knows the selector

    Raises:
        LookupUnavailableError: only when require_lookup is set and the sole requested source is unreachable
    """
    enabled = [(s, fn) for s, fn in SOURCE_CHAIN if sources is None or s in sources]
    sole_source = len(enabled) == 1

    for source, source_fn in enabled:
        try:
            identification = source_fn(request)
        except ParamDecodingError as e:
            logger.warning(f"{source.value} ABI did not decode {request.selector} ({e.message}) - trying next source")
            continue
        except LookupUnavailableError as e:
            if require_lookup and sole_source:
                raise
            logger.warning(f"{source.value} unavailable for {request.selector}: {e.message}")
            continue

        if identification is not None:
            logger.info(f"Resolved {request.selector} via {source.value}: {identification.function_name}")
            return identification

    logger.info(f"No source identified selector {request.selector}")
    return None
