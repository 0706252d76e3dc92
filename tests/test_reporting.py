import json

from calldata_decoder.models import DecodeOptions
from calldata_decoder.reporting import format_report, to_json

from .conftest import (
    AAVE_POOL,
    MULTISEND_130,
    TOKEN,
    approve_calldata,
    multisend_calldata,
    supply_calldata,
    to_bytes,
    transfer_calldata,
)


class TestFormatReport:
    def test_single_call(self, decoder):
        result = decoder.decode(approve_calldata(), DecodeOptions(target_address=TOKEN, offline=True))
        report = format_report(result)
        assert report.startswith("## Transaction ⛔ CRITICAL")
        assert "**Function:** approve" in report
        assert "**Amount:** unlimited" in report
        assert "### Consequences" in report
        assert "| spender |" in report

    def test_trust_section(self, decoder, aave_profile):
        result = decoder.decode(
            supply_calldata(),
            DecodeOptions(target_address=AAVE_POOL, profile=aave_profile, offline=True),
        )
        report = format_report(result, explanation="Lending deposit.")
        assert "**Trust:** TRUSTED / EXPECTED (Aave V3 Pool, PROTOCOL)" in report
        assert report.rstrip().endswith("Lending deposit.")

    def test_batch_table(self, decoder):
        calldata = multisend_calldata([(0, TOKEN, 0, to_bytes(transfer_calldata()))])
        result = decoder.decode(calldata, DecodeOptions(target_address=MULTISEND_130, offline=True))
        report = format_report(result)
        assert "## Batch (MULTISEND, 1 calls)" in report
        assert "| DANGER | 1 |" in report
        assert "### Call 1: CALL to" in report


class TestJson:
    def test_round_trips_through_json(self, decoder):
        result = decoder.decode(approve_calldata(), DecodeOptions(target_address=TOKEN, offline=True))
        data = json.loads(to_json(result))
        assert data["functionName"] == "approve"
        assert data["source"] == "VERIFIED_DATABASE"
        assert data["params"]["amount"] == 2**256 - 1
