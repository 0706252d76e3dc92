from unittest.mock import MagicMock, patch

import pytest
import requests

from calldata_decoder.clients import FourByteClient, FourByteMatch
from calldata_decoder.decoding import ResolveRequest, resolve
from calldata_decoder.errors import LookupUnavailableError
from calldata_decoder.models import Source
from calldata_decoder.trust import parse_profile

from .conftest import (
    AAVE_POOL,
    AAVE_SUPPLY,
    APPROVE,
    TOKEN,
    UNKNOWN_CONTRACT,
    approve_calldata,
    profile_data,
    supply_calldata,
    to_bytes,
)

SUPPLY_ABI = [{
    "type": "function",
    "name": "supply",
    "inputs": [
        {"name": "asset", "type": "address"},
        {"name": "amount", "type": "uint256"},
        {"name": "onBehalfOf", "type": "address"},
        {"name": "referralCode", "type": "uint16"},
    ],
}]

SHADOW_APPROVE_ABI = [{
    "type": "function",
    "name": "approve",
    "inputs": [{"name": "who", "type": "address"}, {"name": "howMuch", "type": "uint256"}],
}]


def _request(calldata, target=None, **kwargs):
    data = to_bytes(calldata)
    return ResolveRequest(selector="0x" + data[:4].hex(), data=data[4:], target_address=target, **kwargs)


def _supply_profile(**contract_overrides):
    contract = {
        "label": "Aave V3 Pool",
        "trustLevel": "PROTOCOL",
        "allowedSelectors": [AAVE_SUPPLY],
        "allowedSelectorsLabels": {AAVE_SUPPLY: "supply"},
    }
    contract.update(contract_overrides)
    return parse_profile(profile_data(contracts={AAVE_POOL: contract}))


class TestResolverChain:
    def test_catalog_hit(self, registry):
        identification = resolve(_request(approve_calldata(), TOKEN, registry=registry))
        assert identification.source == Source.VERIFIED_DATABASE
        assert identification.function_name == "approve"
        assert identification.unlimited_params == ("amount",)

    def test_catalog_is_never_shadowed(self, registry, write_abi):
        write_abi(TOKEN, SHADOW_APPROVE_ABI)
        identification = resolve(_request(approve_calldata(), TOKEN, registry=registry))
        assert identification.source == Source.VERIFIED_DATABASE
        assert list(identification.params) == ["spender", "amount"]

    def test_catalog_decode_failure_keeps_verified_name(self, registry):
        identification = resolve(_request(APPROVE + "00" * 8, TOKEN, registry=registry))
        assert identification.source == Source.VERIFIED_DATABASE
        assert identification.params is None
        assert identification.decode_error

    def test_local_registry(self, registry, write_abi):
        write_abi(AAVE_POOL, SUPPLY_ABI)
        identification = resolve(_request(supply_calldata(), AAVE_POOL, registry=registry))
        assert identification.source == Source.LOCAL_REGISTRY
        assert identification.function_name == "supply"
        assert identification.params["amount"] == 1000

    def test_registry_is_keyed_by_chain(self, registry, write_abi):
        write_abi(AAVE_POOL, SUPPLY_ABI, chain_id=137)
        assert resolve(_request(supply_calldata(), AAVE_POOL, registry=registry)) is None
        identification = resolve(_request(supply_calldata(), AAVE_POOL, registry=registry, chain_id=137))
        assert identification.source == Source.LOCAL_REGISTRY

    def test_profile_abi(self, registry, write_abi):
        write_abi(AAVE_POOL, SUPPLY_ABI, relative="profiles/aave_pool.json")
        profile = _supply_profile(abiPath="profiles/aave_pool.json")
        identification = resolve(_request(supply_calldata(), AAVE_POOL, registry=registry, profile=profile))
        assert identification.source == Source.TRUST_PROFILE_ABI
        assert identification.signature == "supply(address,uint256,address,uint16)"

    def test_profile_label(self, registry):
        identification = resolve(_request(supply_calldata(), AAVE_POOL, registry=registry, profile=_supply_profile()))
        assert identification.source == Source.TRUST_PROFILE
        assert identification.function_name == "supply"
        assert identification.params is None

    def test_profile_label_requires_allowed_selector(self, registry):
        profile = _supply_profile(allowedSelectors=[APPROVE])
        assert resolve(_request(supply_calldata(), AAVE_POOL, registry=registry, profile=profile)) is None

    def test_watched_contract_label_is_ignored(self, registry):
        profile = _supply_profile(trustLevel="WATCHED")
        assert resolve(_request(supply_calldata(), AAVE_POOL, registry=registry, profile=profile)) is None

    def test_mismatched_abi_falls_through(self, registry, write_abi):
        write_abi(AAVE_POOL, SUPPLY_ABI)
        truncated = supply_calldata()[:10 + 64]
        identification = resolve(_request(truncated, AAVE_POOL, registry=registry, profile=_supply_profile()))
        assert identification.source == Source.TRUST_PROFILE

    def test_fourbyte_is_last(self, registry):
        fourbyte = MagicMock(spec=FourByteClient)
        fourbyte.lookup.return_value = FourByteMatch(
            name="supply",
            signature="supply(address,uint256,address,uint16)",
            args=["address", "uint256", "address", "uint16"],
            all_matches=["supply(address,uint256,address,uint16)"],
        )
        identification = resolve(_request(supply_calldata(), UNKNOWN_CONTRACT, registry=registry, fourbyte=fourbyte))
        assert identification.source == Source.FOURBYTE
        assert identification.hint.signature == "supply(address,uint256,address,uint16)"
        assert identification.hint.verified is False
        assert identification.params is None

    def test_offline_suppresses_fourbyte(self, registry):
        fourbyte = MagicMock(spec=FourByteClient)
        result = resolve(_request(supply_calldata(), UNKNOWN_CONTRACT, registry=registry,
                                  fourbyte=fourbyte, offline=True))
        assert result is None
        fourbyte.lookup.assert_not_called()

    def test_unreachable_lookup_degrades(self, registry):
        fourbyte = MagicMock(spec=FourByteClient)
        fourbyte.lookup.side_effect = LookupUnavailableError("timed out")
        assert resolve(_request(supply_calldata(), UNKNOWN_CONTRACT, registry=registry, fourbyte=fourbyte)) is None

    def test_required_lookup_propagates(self, registry):
        fourbyte = MagicMock(spec=FourByteClient)
        fourbyte.lookup.side_effect = LookupUnavailableError("timed out")
        request = _request(supply_calldata(), UNKNOWN_CONTRACT, registry=registry, fourbyte=fourbyte)
        with pytest.raises(LookupUnavailableError):
            resolve(request, sources=[Source.FOURBYTE], require_lookup=True)

    def test_source_restriction(self, registry):
        assert resolve(_request(approve_calldata(), TOKEN, registry=registry), sources=[Source.LOCAL_REGISTRY]) is None

    def test_unreadable_registry_file_degrades(self, registry, abi_dir):
        path = abi_dir / "1" / f"{AAVE_POOL}.json"
        path.parent.mkdir()
        path.write_text("{not json")
        assert resolve(_request(supply_calldata(), AAVE_POOL, registry=registry)) is None


class TestFourByteClient:
    @patch("calldata_decoder.clients.fourbyte.requests.get")
    def test_first_result_wins(self, mock_get):
        mock_get.return_value.json.return_value = {"results": [
            {"text_signature": "supply(address,uint256,address,uint16)"},
            {"text_signature": "other_collision(bytes)"},
        ]}
        match = FourByteClient(timeout=2).lookup(AAVE_SUPPLY)
        assert match.name == "supply"
        assert match.args == ["address", "uint256", "address", "uint16"]
        assert len(match.all_matches) == 2
        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"hex_signature": AAVE_SUPPLY}
        assert kwargs["timeout"] == 2

    @patch("calldata_decoder.clients.fourbyte.requests.get")
    def test_no_results(self, mock_get):
        mock_get.return_value.json.return_value = {"results": []}
        assert FourByteClient().lookup("0xdeadbeef") is None

    @pytest.mark.parametrize("body", [[], "oops", {"results": "oops"}])
    @patch("calldata_decoder.clients.fourbyte.requests.get")
    def test_unexpected_body(self, mock_get, body):
        mock_get.return_value.json.return_value = body
        with pytest.raises(LookupUnavailableError):
            FourByteClient().lookup("0xdeadbeef")

    @patch("calldata_decoder.clients.fourbyte.requests.get")
    def test_skips_malformed_entries(self, mock_get):
        mock_get.return_value.json.return_value = {"results": ["junk", {"id": 1}, {"text_signature": "claim(address)"}]}
        match = FourByteClient().lookup("0xdeadbeef")
        assert match.signature == "claim(address)"
        assert match.all_matches == ["claim(address)"]

    @patch("calldata_decoder.clients.fourbyte.requests.get")
    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.Timeout("slow")
        with pytest.raises(LookupUnavailableError):
            FourByteClient().lookup("0xdeadbeef")

    @patch("calldata_decoder.clients.fourbyte.requests.get")
    def test_http_error(self, mock_get):
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("502")
        with pytest.raises(LookupUnavailableError):
            FourByteClient().lookup("0xdeadbeef")


class TestAbiRegistry:
    def test_wrapped_abi_file(self, registry, abi_dir):
        path = abi_dir / "1" / f"{AAVE_POOL}.json"
        path.parent.mkdir()
        path.write_text('{"abi": [{"type": "function", "name": "f", "inputs": []}]}')
        entry = registry.lookup(1, AAVE_POOL.upper().replace("0X", "0x"))
        assert entry.function_count == 1

    def test_missing_entry(self, registry):
        assert registry.lookup(1, AAVE_POOL) is None

    def test_profile_abi_cannot_escape(self, registry):
        with pytest.raises(LookupUnavailableError):
            registry.load_profile_abi("../outside.json", 1, AAVE_POOL)
