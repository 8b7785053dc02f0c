"""Unit tests for contract ABI loading."""

import json

import pytest

from cascadewatch.core.exceptions import ConfigurationError
from cascadewatch.services.chain.abi import TOMB_ABI, load_abi


@pytest.mark.unit
class TestLoadAbi:
    def test_builtin_abi_by_default(self):
        assert load_abi() is TOMB_ABI

    def test_builtin_abi_describes_both_methods(self):
        by_name = {entry["name"]: entry for entry in TOMB_ABI}

        assert [i["type"] for i in by_name["emitCascade"]["inputs"]] == ["string", "uint256"]
        assert [i["type"] for i in by_name["claimYield"]["inputs"]] == ["string"]

    def test_loads_bare_list(self, tmp_path):
        path = tmp_path / "tomb.json"
        path.write_text(json.dumps(TOMB_ABI))

        assert load_abi(path) == TOMB_ABI

    def test_loads_compiler_artifact(self, tmp_path):
        path = tmp_path / "Tomb.json"
        path.write_text(json.dumps({"contractName": "Tomb", "abi": TOMB_ABI}))

        assert load_abi(path) == TOMB_ABI

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_abi(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            load_abi(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "object.json"
        path.write_text(json.dumps({"abi": {"name": "emitCascade"}}))

        with pytest.raises(ConfigurationError):
            load_abi(path)

    def test_missing_method(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps([TOMB_ABI[0]]))

        with pytest.raises(ConfigurationError, match="claimYield"):
            load_abi(path)
