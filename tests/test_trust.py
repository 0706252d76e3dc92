import json

import pytest

from calldata_decoder.errors import ErrorCode, ProfileValidationError
from calldata_decoder.models import ContractClassification, SelectorClassification, TrustLevel
from calldata_decoder.trust import (
    classify,
    create_empty_profile,
    is_delegatecall_allowed,
    load_profile,
    parse_profile,
)

from .conftest import (
    AAVE_POOL,
    AAVE_SUPPLY,
    APPROVE,
    SAFE,
    SPENDER,
    TOKEN,
    TRANSFER,
    UNKNOWN_CONTRACT,
    profile_data,
)


def _contract(**overrides):
    contract = {"label": "Token", "trustLevel": "PARTNER", "allowedSelectors": [APPROVE]}
    contract.update(overrides)
    return contract


class TestProfileValidation:
    def test_normalizes_case(self):
        profile = parse_profile(profile_data(
            contracts={TOKEN.upper().replace("0X", "0x"): _contract(
                allowedSelectors=["0x095EA7B3"],
                allowedSelectorsLabels={"0x095EA7B3": "approve"},
            )},
            usage={TOKEN.upper().replace("0X", "0x"): {"0x095EA7B3": {"count": 3}}},
        ))
        contract = profile.get_contract(TOKEN)
        assert contract.allowed_selectors == [APPROVE]
        assert contract.allowed_selectors_labels == {APPROVE: "approve"}
        assert profile.get_usage(TOKEN, APPROVE).count == 3

    @pytest.mark.parametrize("data", [
        {"trustedContracts": {}},
        {"safeAddress": "0x1234", "trustedContracts": {}},
        {"safeAddress": SAFE},
        {"safeAddress": SAFE, "trustedContracts": {"not-an-address": {"label": "x", "trustLevel": "PARTNER"}}},
        {"safeAddress": SAFE, "trustedContracts": {TOKEN: {"label": "x", "trustLevel": "FRIENDLY"}}},
        {"safeAddress": SAFE, "trustedContracts": {TOKEN: {"label": "", "trustLevel": "PARTNER"}}},
        {"safeAddress": SAFE, "trustedContracts": {TOKEN: _contract(allowedSelectors=["0x1234"])}},
        {"safeAddress": SAFE, "trustedContracts": {TOKEN: _contract(allowedSelectors="all")}},
        {"safeAddress": SAFE, "trustedContracts": {TOKEN: _contract(abiPath="../secrets.json")}},
        {"safeAddress": SAFE, "trustedContracts": {}, "trustedDelegateCalls": {TOKEN: {}}},
        {"safeAddress": SAFE, "trustedContracts": {},
         "selectorUsageHistory": {TOKEN: {APPROVE: {"count": -1}}}},
    ])
    def test_rejects_invalid_documents(self, data):
        with pytest.raises(ProfileValidationError) as exc_info:
            parse_profile(data)
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_wildcard_only_for_internal(self):
        with pytest.raises(ProfileValidationError, match="INTERNAL"):
            parse_profile(profile_data(contracts={TOKEN: _contract(allowedSelectors="*")}))
        profile = parse_profile(profile_data(
            contracts={TOKEN: _contract(trustLevel="INTERNAL", allowedSelectors="*")},
        ))
        assert profile.get_contract(TOKEN).allows("0xdeadbeef")

    def test_rejects_non_object(self):
        with pytest.raises(ProfileValidationError):
            parse_profile(["not", "a", "profile"])

    def test_load_profile(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps(profile_data(contracts={TOKEN: _contract()})))
        profile = load_profile(path)
        assert profile.safe_address == SAFE
        assert profile.get_contract(TOKEN).trust_level == TrustLevel.PARTNER

    def test_load_profile_missing_file(self, tmp_path):
        with pytest.raises(ProfileValidationError, match="not found"):
            load_profile(tmp_path / "missing.json")

    def test_load_profile_bad_json(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text("{")
        with pytest.raises(ProfileValidationError):
            load_profile(path)

    def test_empty_profile_template_is_valid(self):
        template = create_empty_profile(SAFE)
        profile = parse_profile(template)
        assert profile.safe_address == SAFE
        assert len(profile.trusted_contracts) == 1

    def test_empty_profile_template_rejects_bad_address(self):
        with pytest.raises(ProfileValidationError):
            create_empty_profile("0x1234")

    def test_address_labels(self):
        profile = parse_profile(profile_data(
            contracts={TOKEN: _contract(label="USD Coin")},
            assets={SPENDER: {"symbol": "DAI"}},
        ))
        assert profile.get_address_label(TOKEN) == "USD Coin"
        assert profile.get_address_label(SPENDER) == "DAI"
        assert profile.get_address_label(UNKNOWN_CONTRACT) is None


class TestClassifier:
    def test_without_profile_is_neutral(self):
        context = classify(TOKEN, APPROVE, None)
        assert context.profile_loaded is False
        assert context.trust_blocked is False
        assert context.contract_classification is None

    def test_unknown_contract_is_blocked(self, token_profile):
        context = classify(UNKNOWN_CONTRACT, APPROVE, token_profile)
        assert context.contract_classification == ContractClassification.UNKNOWN
        assert context.trust_blocked is True
        assert context.selector_classification is None
        assert context.warnings

    def test_missing_target_is_blocked(self, token_profile):
        context = classify(None, APPROVE, token_profile)
        assert context.contract_classification == ContractClassification.UNKNOWN
        assert context.trust_blocked is True

    def test_watched_contract_is_blocked(self, token_profile):
        context = classify(SPENDER, APPROVE, token_profile)
        assert context.contract_classification == ContractClassification.WATCHED
        assert context.label == "Treasury Router"
        assert context.trust_blocked is True

    def test_expected(self, token_profile):
        context = classify(TOKEN, TRANSFER, token_profile)
        assert context.contract_classification == ContractClassification.TRUSTED
        assert context.selector_classification == SelectorClassification.EXPECTED
        assert context.usage_count == 12
        assert context.warnings == []

    def test_unusual(self, token_profile):
        context = classify(TOKEN, APPROVE, token_profile)
        assert context.selector_classification == SelectorClassification.UNUSUAL
        assert context.usage_count == 1
        assert context.last_used == "2024-01-02"
        assert any("rarely used" in w for w in context.warnings)

    def test_never_used(self):
        profile = parse_profile(profile_data(contracts={TOKEN: _contract()}))
        context = classify(TOKEN, APPROVE, profile)
        assert context.selector_classification == SelectorClassification.NEVER_USED
        assert context.usage_count == 0
        assert any("FIRST TIME" in w for w in context.warnings)

    def test_not_allowed(self, token_profile):
        context = classify(TOKEN, "0x23b872dd", token_profile)
        assert context.selector_classification == SelectorClassification.NOT_ALLOWED
        assert context.trust_blocked is False
        assert context.selector_label is None

    def test_wildcard_is_expected(self):
        profile = parse_profile(profile_data(
            contracts={TOKEN: _contract(trustLevel="INTERNAL", allowedSelectors="*")},
        ))
        context = classify(TOKEN, "0xdeadbeef", profile)
        assert context.selector_classification == SelectorClassification.EXPECTED

    def test_selector_label(self, aave_profile):
        context = classify(AAVE_POOL, AAVE_SUPPLY, aave_profile)
        assert context.selector_label == "supply"
        assert context.label == "Aave V3 Pool"
        assert context.trust_level == TrustLevel.PROTOCOL
        assert context.notes == "Treasury lending"


class TestDelegatecallAllowList:
    @pytest.fixture
    def profile(self):
        return parse_profile(profile_data(
            contracts={TOKEN: _contract()},
            delegate_calls={TOKEN: {"allowedSelectors": [APPROVE]}},
        ))

    def test_listed_selector(self, profile):
        assert is_delegatecall_allowed(TOKEN, APPROVE, profile) is True

    def test_other_selector(self, profile):
        assert is_delegatecall_allowed(TOKEN, TRANSFER, profile) is False

    def test_empty_calldata_never_allowed(self, profile):
        assert is_delegatecall_allowed(TOKEN, None, profile) is False

    def test_no_profile(self):
        assert is_delegatecall_allowed(TOKEN, APPROVE, None) is False
