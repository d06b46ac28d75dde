"""
Tool settings (path.json) tests.

These tests verify first-run defaults, explicit settings files and the
rejection of malformed settings.
"""

import json
from unittest.mock import patch

import pytest

from modpacker.config.env import string_to_bool
from modpacker.config.settings import ToolPaths, load_tool_paths, read_tool_paths
from modpacker.core.errors import SettingsError


class TestLoadToolPaths:
    """Tests for load_tool_paths()."""

    def test_writes_defaults_on_first_run(self, tmp_path):
        with patch("modpacker.config.env.CONFIG_DIR", tmp_path):
            paths = load_tool_paths()

        assert paths == ToolPaths()
        written = json.loads((tmp_path / "path.json").read_text())
        assert written == {
            "paa_converter_path": "./external_tools/paa/ImageToPAA.exe",
            "rvmat_converter_path": "./external_tools/config/CfgConvert.exe",
            "config_converter_path": "./external_tools/config/CfgConvert.exe",
            "pbo_packer_path": "./external_tools/pbo/pboc.exe",
            "pbo_signer_path": "./external_tools/signing/dsSignFile.exe",
        }

    def test_reads_existing_default_file(self, tmp_path):
        custom = dict(ToolPaths().to_dict(), pbo_packer_path="/opt/pboc")
        (tmp_path / "path.json").write_text(json.dumps(custom))

        with patch("modpacker.config.env.CONFIG_DIR", tmp_path):
            paths = load_tool_paths()

        assert paths.pbo_packer_path == "/opt/pboc"

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(SettingsError):
            load_tool_paths(tmp_path / "missing.json")

        assert not (tmp_path / "missing.json").exists()

    def test_explicit_path_is_read(self, tmp_path):
        settings_file = tmp_path / "tools.json"
        settings_file.write_text(json.dumps(ToolPaths(pbo_signer_path="sign").to_dict()))

        assert load_tool_paths(settings_file).pbo_signer_path == "sign"


class TestReadToolPaths:
    """Tests for malformed settings files."""

    def test_unknown_key_rejected(self, tmp_path):
        settings_file = tmp_path / "path.json"
        settings_file.write_text(json.dumps(dict(ToolPaths().to_dict(), extra_tool="x")))

        with pytest.raises(SettingsError, match="extra_tool"):
            read_tool_paths(settings_file)

    def test_missing_key_rejected(self, tmp_path):
        data = ToolPaths().to_dict()
        del data["pbo_signer_path"]
        settings_file = tmp_path / "path.json"
        settings_file.write_text(json.dumps(data))

        with pytest.raises(SettingsError, match="pbo_signer_path"):
            read_tool_paths(settings_file)

    def test_invalid_json_rejected(self, tmp_path):
        settings_file = tmp_path / "path.json"
        settings_file.write_text("{")

        with pytest.raises(SettingsError):
            read_tool_paths(settings_file)

    def test_non_utf8_file_rejected(self, tmp_path):
        settings_file = tmp_path / "path.json"
        settings_file.write_bytes(b'{"pbo_packer_path": "\xff"}')

        with pytest.raises(SettingsError, match="UTF-8"):
            read_tool_paths(settings_file)

    def test_non_string_value_rejected(self, tmp_path):
        settings_file = tmp_path / "path.json"
        settings_file.write_text(json.dumps(dict(ToolPaths().to_dict(), pbo_packer_path=3)))

        with pytest.raises(SettingsError):
            read_tool_paths(settings_file)


class TestStringToBool:
    @pytest.mark.parametrize("value", ["true", "TRUE", "yes", "1", "y"])
    def test_truthy(self, value):
        assert string_to_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", ""])
    def test_falsy(self, value):
        assert string_to_bool(value) is False
