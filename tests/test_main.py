import json

import pytest

from calldata_decoder.main import main

from .conftest import AAVE_POOL, SAFE, TOKEN, approve_calldata, profile_data, supply_calldata


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, abi_dir):
    for name in ("TARGET_ADDRESS", "TRUST_PROFILE", "CHAIN_ID", "BATCH_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ABI_REGISTRY_DIR", str(abi_dir))


@pytest.fixture
def profile_file(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(profile_data(
        contracts={AAVE_POOL: {
            "label": "Aave V3 Pool",
            "trustLevel": "PROTOCOL",
            "allowedSelectors": ["0x617ba037"],
            "allowedSelectorsLabels": {"0x617ba037": "supply"},
        }},
        usage={AAVE_POOL: {"0x617ba037": {"count": 10}}},
    )))
    return path


class TestMain:
    def test_critical_result_exits_1(self, capsys):
        code = main([approve_calldata(), "--target", TOKEN, "--offline", "--json"])
        assert code == 1
        output = json.loads(capsys.readouterr().out)
        assert output["headerSeverity"] == "CRITICAL"

    def test_trusted_call_exits_0(self, capsys, profile_file):
        code = main([supply_calldata(), "--target", AAVE_POOL, "--profile", str(profile_file), "--offline"])
        assert code == 0
        assert "**Function:** supply" in capsys.readouterr().out

    def test_invalid_calldata_exits_2(self, capsys):
        code = main(["0xzz", "--offline"])
        assert code == 2
        assert "Error [INVALID_CALLDATA]" in capsys.readouterr().err

    def test_invalid_profile_exits_2(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"safeAddress": SAFE}))
        code = main([approve_calldata(), "--target", TOKEN, "--profile", str(path), "--offline"])
        assert code == 2
        assert "Error [VALIDATION_ERROR]" in capsys.readouterr().err

    def test_init_profile(self, capsys):
        assert main(["--init-profile", SAFE]) == 0
        template = json.loads(capsys.readouterr().out)
        assert template["safeAddress"] == SAFE

    def test_missing_calldata(self):
        with pytest.raises(SystemExit):
            main(["--offline"])
