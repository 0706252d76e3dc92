"""Shared fixtures and calldata builders."""

import json
from typing import Dict, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from calldata_decoder.clients import AbiRegistry, FourByteClient
from calldata_decoder.config import DecoderSettings
from calldata_decoder.core import CalldataDecoder
from calldata_decoder.trust import parse_profile

MAX_UINT256 = 2**256 - 1

SAFE = "0x5afe5afe5afe5afe5afe5afe5afe5afe5afe5afe"
SPENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
AAVE_POOL = "0x87870bca3f3fd6335c3f4ce8392d69350b4fa4e2"
UNKNOWN_CONTRACT = "0x9999999999999999999999999999999999999999"
MULTISEND_130 = "0xa238cbeb142c10ef7ad8442c6d1f9e89e07e7761"
MULTISEND_CALL_ONLY = "0x9641d764fc13c8b624c04430c7356c1c7c8102e2"

APPROVE = "0x095ea7b3"
TRANSFER = "0xa9059cbb"
DEPOSIT = "0xd0e30db0"
MULTISEND = "0x8d80ff0a"
AAVE_SUPPLY = "0x617ba037"

_w3 = Web3()


def encode_call(selector: str, types: Sequence[str] = (), values: Sequence = ()) -> str:
    """Hex calldata for a selector and ABI-encoded arguments."""
    return selector + _w3.codec.encode(list(types), list(values)).hex()


def approve_calldata(spender: str = SPENDER, amount: int = MAX_UINT256) -> str:
    return encode_call(APPROVE, ["address", "uint256"], [spender, amount])


def transfer_calldata(to: str = RECIPIENT, amount: int = 100) -> str:
    return encode_call(TRANSFER, ["address", "uint256"], [to, amount])


def supply_calldata() -> str:
    return encode_call(
        AAVE_SUPPLY,
        ["address", "uint256", "address", "uint16"],
        [TOKEN, 1000, SAFE, 0],
    )


def pack_multisend(records: List[Tuple[int, str, int, bytes]]) -> bytes:
    """Packed multiSend transactions: (operation, to, value, data) per record."""
    packed = b""
    for operation, to, value, data in records:
        packed += operation.to_bytes(1, "big")
        packed += bytes.fromhex(to[2:])
        packed += value.to_bytes(32, "big")
        packed += len(data).to_bytes(32, "big")
        packed += data
    return packed


def multisend_calldata(records: List[Tuple[int, str, int, bytes]]) -> str:
    return MULTISEND + _w3.codec.encode(["bytes"], [pack_multisend(records)]).hex()


def to_bytes(calldata: str) -> bytes:
    return bytes.fromhex(calldata[2:] if calldata.startswith("0x") else calldata)


def profile_data(
    contracts: Optional[Dict] = None,
    usage: Optional[Dict] = None,
    delegate_calls: Optional[Dict] = None,
    assets: Optional[Dict] = None,
) -> Dict:
    return {
        "safeAddress": SAFE,
        "version": "1.0",
        "trustedContracts": contracts or {},
        "selectorUsageHistory": usage or {},
        "trustedDelegateCalls": delegate_calls or {},
        "trustedAssets": assets or {},
    }


@pytest.fixture
def abi_dir(tmp_path):
    path = tmp_path / "abis"
    path.mkdir()
    return path


@pytest.fixture
def write_abi(abi_dir):
    """Write an ABI file into the registry: write_abi(address, fragments, chain_id=1)."""
    def _write(address: str, fragments: List[Dict], chain_id: int = 1, relative: Optional[str] = None):
        if relative:
            path = abi_dir / relative
        else:
            path = abi_dir / str(chain_id) / f"{address.lower()}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(fragments))
        return path
    return _write


@pytest.fixture
def fourbyte():
    client = MagicMock(spec=FourByteClient)
    client.lookup.return_value = None
    return client


@pytest.fixture
def registry(abi_dir):
    return AbiRegistry(abi_dir)


@pytest.fixture
def decoder(abi_dir, fourbyte):
    settings = DecoderSettings(abi_registry_dir=abi_dir, batch_max_workers=4)
    return CalldataDecoder(settings, fourbyte=fourbyte)


@pytest.fixture
def aave_profile():
    return parse_profile(profile_data(
        contracts={
            AAVE_POOL: {
                "label": "Aave V3 Pool",
                "trustLevel": "PROTOCOL",
                "allowedSelectors": [AAVE_SUPPLY],
                "allowedSelectorsLabels": {AAVE_SUPPLY: "supply"},
                "notes": "Treasury lending",
            },
        },
        usage={AAVE_POOL: {AAVE_SUPPLY: {"count": 47, "lastUsed": "2024-05-01"}}},
    ))


@pytest.fixture
def token_profile():
    """Profile trusting TOKEN for approve/transfer with varied usage."""
    return parse_profile(profile_data(
        contracts={
            TOKEN: {
                "label": "USDC",
                "trustLevel": "PARTNER",
                "allowedSelectors": [APPROVE, TRANSFER],
            },
            SPENDER: {
                "label": "Treasury Router",
                "trustLevel": "WATCHED",
            },
        },
        usage={TOKEN: {TRANSFER: {"count": 12}, APPROVE: {"count": 1, "lastUsed": "2024-01-02"}}},
        assets={TOKEN: {"symbol": "USDC", "decimals": 6}},
    ))
