"""
Tests for ABI map loading and lookup.
"""

import json
from pathlib import Path

import pytest

from ownersdb.abi import load_abi_map, lookup_abi
from ownersdb.errors import ConfigError


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadAbiMap:
    def test_loads_object(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "pr-hashes.json", {"zlib": {"abi": "abc"}})
        assert load_abi_map(path) == {"zlib": {"abi": "abc"}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="pr-hashes file not found"):
            load_abi_map(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "pr-hashes.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Malformed JSON"):
            load_abi_map(path)

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "pr-hashes.json", ["zlib"])
        with pytest.raises(ConfigError, match="JSON object"):
            load_abi_map(path)

    def test_config_error_exit_code(self) -> None:
        assert ConfigError.exit_code == 2


class TestLookupAbi:
    def test_lowercase_key(self) -> None:
        assert lookup_abi({"zlib": {"abi": "abc"}}, "zlib") == "abc"

    def test_uppercase_key(self) -> None:
        assert lookup_abi({"zlib": {"ABI": "ABC"}}, "zlib") == "ABC"

    def test_lowercase_wins(self) -> None:
        assert lookup_abi({"zlib": {"abi": "low", "ABI": "up"}}, "zlib") == "low"

    def test_empty_lowercase_falls_back(self) -> None:
        assert lookup_abi({"zlib": {"abi": "", "ABI": "up"}}, "zlib") == "up"

    def test_missing_port(self) -> None:
        assert lookup_abi({"fmt": {"abi": "x"}}, "zlib") is None

    def test_entry_without_hash(self) -> None:
        assert lookup_abi({"zlib": {"version": "1.3"}}, "zlib") is None

    def test_entry_not_an_object(self) -> None:
        assert lookup_abi({"zlib": "abc"}, "zlib") is None
