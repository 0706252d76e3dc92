"""
Trust profile schema and loading.

Trust is anchored on contract addresses, not selectors: a selector only
means something in the context of a trusted contract. Addresses and
selectors are normalized to lower case at load time.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..errors import ProfileValidationError
from ..models import TrustLevel

logger = logging.getLogger(__name__)

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
SELECTOR_PATTERN = re.compile(r"^0x[a-fA-F0-9]{8}$")


def _normalize_address(address: str) -> str:
    if not isinstance(address, str) or not ADDRESS_PATTERN.match(address):
        raise ValueError(f"Invalid address: {address!r}")
    return address.lower()


def _normalize_selector(selector: str) -> str:
    if not isinstance(selector, str) or not SELECTOR_PATTERN.match(selector):
        raise ValueError(f"Invalid selector: {selector!r}")
    return selector.lower()


def _normalize_address_keys(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    return {_normalize_address(k): v for k, v in value.items()}


class ProfileModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SelectorUsage(ProfileModel):
    count: int = Field(default=0, ge=0)
    last_used: Optional[str] = None


class TrustedContractConfig(ProfileModel):
    label: str = Field(min_length=1)
    trust_level: TrustLevel
    allowed_selectors: Union[Literal["*"], List[str]] = Field(default_factory=list)
    allowed_selectors_labels: Dict[str, str] = Field(default_factory=dict)
    notes: Optional[str] = None
    abi_path: Optional[str] = None

    @field_validator("allowed_selectors", mode="before")
    @classmethod
    def _check_allowed_selectors(cls, value):
        if value == "*":
            return value
        if not isinstance(value, list):
            raise ValueError('allowedSelectors must be "*" or an array of selector strings')
        return [_normalize_selector(s) for s in value]

    @field_validator("allowed_selectors_labels", mode="before")
    @classmethod
    def _check_labels(cls, value):
        if not isinstance(value, dict):
            return value
        return {_normalize_selector(k): v for k, v in value.items()}

    @field_validator("abi_path")
    @classmethod
    def _check_abi_path(cls, value):
        if value is None:
            return value
        path = Path(value)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError("abiPath must be relative to the ABI registry directory")
        return value

    @model_validator(mode="after")
    def _wildcard_only_internal(self):
        if self.allowed_selectors == "*" and self.trust_level != TrustLevel.INTERNAL:
            raise ValueError('allowedSelectors "*" is only valid for INTERNAL contracts')
        return self

    def allows(self, selector: str) -> bool:
        return self.allowed_selectors == "*" or selector.lower() in self.allowed_selectors


class TrustedDelegateCall(ProfileModel):
    allowed_selectors: List[str]

    @field_validator("allowed_selectors", mode="before")
    @classmethod
    def _check_selectors(cls, value):
        if not isinstance(value, list):
            raise ValueError("trustedDelegateCalls entries must have an allowedSelectors array")
        return [_normalize_selector(s) for s in value]


class TrustedAsset(ProfileModel):
    symbol: str
    name: Optional[str] = None
    decimals: Optional[int] = None


class TrustProfile(ProfileModel):
    safe_address: str
    version: str = "1.0"
    trusted_contracts: Dict[str, TrustedContractConfig]
    selector_usage_history: Dict[str, Dict[str, SelectorUsage]] = Field(default_factory=dict)
    trusted_delegate_calls: Dict[str, TrustedDelegateCall] = Field(default_factory=dict)
    trusted_assets: Dict[str, TrustedAsset] = Field(default_factory=dict)

    @field_validator("safe_address", mode="before")
    @classmethod
    def _check_safe_address(cls, value):
        return _normalize_address(value)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value):
        return str(value)

    @field_validator("trusted_contracts", "trusted_delegate_calls", "trusted_assets", mode="before")
    @classmethod
    def _check_address_keys(cls, value):
        return _normalize_address_keys(value)

    @field_validator("selector_usage_history", mode="before")
    @classmethod
    def _check_usage_keys(cls, value):
        if not isinstance(value, dict):
            return value
        return {
            _normalize_address(address): (
                {_normalize_selector(s): usage for s, usage in selectors.items()}
                if isinstance(selectors, dict) else selectors
            )
            for address, selectors in value.items()
        }

    def get_contract(self, address: Optional[str]) -> Optional[TrustedContractConfig]:
        if not address:
            return None
        return self.trusted_contracts.get(address.lower())

    def get_usage(self, address: str, selector: str) -> Optional[SelectorUsage]:
        return self.selector_usage_history.get(address.lower(), {}).get(selector.lower())

    def get_address_label(self, address: Optional[str]) -> Optional[str]:
        """Human label from trustedContracts or trustedAssets. Never inferred from calldata."""
        if not address:
            return None
        contract = self.trusted_contracts.get(address.lower())
        if contract:
            return contract.label
        asset = self.trusted_assets.get(address.lower())
        if asset:
            return asset.symbol
        return None


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "profile"
        parts.append(f"{location}: {err.get('msg')}")
    return "; ".join(parts)


def parse_profile(data: Any) -> TrustProfile:
    """
    Validate a profile document.

    Raises:
        ProfileValidationError: the document does not match the schema
    """
    if not isinstance(data, dict):
        raise ProfileValidationError("Profile must be a JSON object")
    try:
        return TrustProfile.model_validate(data)
    except ValidationError as e:
        raise ProfileValidationError(f"Invalid trust profile: {_format_validation_error(e)}") from e


def load_profile(path: Union[str, Path]) -> TrustProfile:
    """
    Load and validate a trust profile JSON file.

    Args:
        path: Path to the profile file

    Returns:
        Validated, normalized TrustProfile
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ProfileValidationError(f"Profile file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ProfileValidationError(f"Failed to load profile {path}: {e}") from e

    profile = parse_profile(data)
    logger.info(f"Loaded trust profile for {profile.safe_address} ({len(profile.trusted_contracts)} trusted contracts)")
    return profile


def create_empty_profile(safe_address: str) -> Dict[str, Any]:
    """Profile template for a Safe, ready to be edited and saved as JSON."""
    if not ADDRESS_PATTERN.match(safe_address or ""):
        raise ProfileValidationError(f"Invalid Safe address: {safe_address!r}")
    return {
        "safeAddress": safe_address,
        "version": "1.0",
        "description": "Trust profile for Safe multisig. Define trusted contracts and allowed selectors.",
        "trustedContracts": {
            "0x0000000000000000000000000000000000000000": {
                "label": "Example Contract (replace this)",
                "trustLevel": "PROTOCOL",
                "allowedSelectors": ["0x00000000"],
                "allowedSelectorsLabels": {"0x00000000": "exampleFunction"},
                "notes": "Add notes about why this contract is trusted",
            }
        },
        "selectorUsageHistory": {},
        "trustedDelegateCalls": {},
        "trustedAssets": {},
    }
