import pytest
from eth_utils import keccak

from calldata_decoder.abi import ABI, parse_signature
from calldata_decoder.selectors import (
    MULTISEND_SELECTOR,
    VERIFIED_SELECTORS,
    Category,
    lookup_address,
    lookup_selector,
)

from .conftest import AAVE_SUPPLY, APPROVE, MULTISEND_130


class TestSelectorCatalog:
    @pytest.mark.parametrize("selector", sorted(VERIFIED_SELECTORS))
    def test_selector_matches_signature_hash(self, selector):
        entry = VERIFIED_SELECTORS[selector]
        assert "0x" + keccak(text=entry.signature).hex()[:8] == selector

    @pytest.mark.parametrize("selector", sorted(VERIFIED_SELECTORS))
    def test_param_names_match_signature_types(self, selector):
        entry = VERIFIED_SELECTORS[selector]
        _, types = parse_signature(entry.signature)
        assert len(entry.param_names) == len(types)

    def test_lookup_is_case_insensitive(self):
        entry = lookup_selector(APPROVE.upper().replace("0X", "0x"))
        assert entry is not None
        assert entry.function_name == "approve"
        assert entry.category == Category.APPROVAL
        assert entry.param_names == ("spender", "amount")

    def test_unknown_selector(self):
        assert lookup_selector(AAVE_SUPPLY) is None
        assert lookup_selector("0xdeadbeef") is None

    def test_multisend_entry(self):
        entry = lookup_selector(MULTISEND_SELECTOR)
        assert entry.category == Category.BATCH
        assert entry.effect_template_id == "multisend"

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            VERIFIED_SELECTORS["0x12345678"] = VERIFIED_SELECTORS[APPROVE]

    def test_known_addresses(self):
        assert lookup_address(MULTISEND_130.upper().replace("0X", "0x")) == "Safe MultiSend 1.3.0"
        assert lookup_address(None) is None
        assert lookup_address("0x" + "00" * 20) is None


class TestParseSignature:
    def test_simple(self):
        assert parse_signature("transfer(address,uint256)") == ("transfer", ["address", "uint256"])

    def test_no_arguments(self):
        assert parse_signature("deposit()") == ("deposit", [])

    def test_tuple_types_are_kept_whole(self):
        name, types = parse_signature("aggregate((address,bytes)[],uint256)")
        assert name == "aggregate"
        assert types == ["(address,bytes)[]", "uint256"]

    @pytest.mark.parametrize("signature", [
        "transfer",
        "transfer(address,uint256",
        "transfer(address,,uint256)",
        "bad((address)",
        "bad(address))",
    ])
    def test_malformed(self, signature):
        assert parse_signature(signature) is None


class TestAbi:
    def test_find_function_by_selector(self):
        abi = ABI([
            {"type": "event", "name": "Transfer", "inputs": []},
            {"type": "function", "name": "transfer", "inputs": [
                {"name": "to", "type": "address"},
                {"name": "", "type": "uint256"},
            ]},
        ])
        function = abi.find_function_by_selector("0xA9059CBB")
        assert function["signature"] == "transfer(address,uint256)"
        assert function["param_names"] == ["to", "param_1"]
        assert abi.find_function_by_selector("0xdeadbeef") is None

    def test_tuple_inputs_in_signature(self):
        abi = ABI([{"type": "function", "name": "aggregate", "inputs": [
            {"name": "calls", "type": "tuple[]", "components": [
                {"name": "target", "type": "address"},
                {"name": "callData", "type": "bytes"},
            ]},
        ]}])
        function = abi.find_function_by_selector("0x252dba42")
        assert function["signature"] == "aggregate((address,bytes)[])"
