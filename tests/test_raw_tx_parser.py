import pytest
import rlp

from calldata_decoder.errors import InvalidCalldataError
from calldata_decoder.raw_tx_parser import parse_raw_transaction

from .conftest import TOKEN, to_bytes, transfer_calldata

TO = bytes.fromhex(TOKEN[2:])


def _legacy(v=37, to=TO, data=None):
    data = to_bytes(transfer_calldata()) if data is None else data
    return "0x" + rlp.encode([1, 20 * 10**9, 60000, to, 5, data, v, 1, 1]).hex()


def _eip1559(chain_id=1, to=TO):
    fields = [chain_id, 1, 10**9, 20 * 10**9, 60000, to, 0, to_bytes(transfer_calldata()), [], 1, 1, 1]
    return "0x02" + rlp.encode(fields).hex()


def _eip2930(chain_id=10):
    fields = [chain_id, 1, 20 * 10**9, 60000, TO, 0, to_bytes(transfer_calldata()), [], 1, 1, 1]
    return "0x01" + rlp.encode(fields).hex()


class TestParseRawTransaction:
    def test_legacy(self):
        tx = parse_raw_transaction(_legacy())
        assert tx.type == "legacy"
        assert tx.to.lower() == TOKEN
        assert tx.value == 5
        assert tx.chain_id == 1
        assert tx.input == transfer_calldata()
        assert tx.selector == "0xa9059cbb"

    def test_legacy_without_chain_id(self):
        assert parse_raw_transaction(_legacy(v=27)).chain_id is None

    def test_eip1559(self):
        tx = parse_raw_transaction(_eip1559(chain_id=137))
        assert tx.type == "eip1559"
        assert tx.chain_id == 137
        assert tx.input == transfer_calldata()

    def test_eip2930(self):
        tx = parse_raw_transaction(_eip2930())
        assert tx.type == "eip2930"
        assert tx.chain_id == 10

    def test_contract_creation_has_no_target(self):
        tx = parse_raw_transaction(_legacy(to=b""))
        assert tx.to is None

    def test_empty_input(self):
        tx = parse_raw_transaction(_legacy(data=b""))
        assert tx.input == "0x"
        assert tx.selector is None

    @pytest.mark.parametrize("raw", [
        "",
        "0x",
        "0xnothex",
        "0x03" + "c0",
        "0x02" + "ff",
        "0x" + rlp.encode([1, 2, 3]).hex(),
    ])
    def test_rejects_malformed(self, raw):
        with pytest.raises(InvalidCalldataError):
            parse_raw_transaction(raw)

    def test_rejects_bad_to_length(self):
        with pytest.raises(InvalidCalldataError, match="'to' field"):
            parse_raw_transaction(_legacy(to=b"\x01\x02"))
