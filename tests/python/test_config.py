"""
Tests for configuration loading.
"""

import pytest
from pathlib import Path

from cbind.config import TranslatorConfig, parse_const_rule
from cbind.errors import CBIND_ERROR_CONFIG, ConfigError
from cbind.ir import ConstRule, ConstScope


CONFIG_TOML = """
[parser]
std = "c11"
include_dirs = ["include", "/opt/sdk/include"]
defines = { API_EXPORT = "", VERSION = 3 }
clang_args = ["-fms-extensions"]

[constants]
enum = "foreign_alias"
foreign_prefix = "lib."
"""


class TestDefaults:
    """Test the default configuration."""

    def test_defaults(self):
        """Test default values."""
        config = TranslatorConfig()
        assert config.parser.std == "c99"
        assert config.parser.include_dirs == []
        assert config.constants.enum is ConstRule.VALUE
        assert config.constants.foreign_prefix == "C."
        assert config.constants.rules == {ConstScope.ENUM: ConstRule.VALUE}

    def test_string_project_root(self):
        """Test that project_root is coerced to a Path."""
        config = TranslatorConfig(project_root="/tmp/project")
        assert config.project_root == Path("/tmp/project")


class TestFromFile:
    """Test loading cbind.toml."""

    def test_full_file(self, tmp_path):
        """Test every section."""
        path = tmp_path / "cbind.toml"
        path.write_text(CONFIG_TOML)
        config = TranslatorConfig.from_file(path)

        assert config.project_root == tmp_path
        assert config.parser.std == "c11"
        assert config.parser.defines == {"API_EXPORT": "", "VERSION": "3"}
        assert config.parser.clang_args == ["-fms-extensions"]
        assert config.constants.enum is ConstRule.FOREIGN_ALIAS
        assert config.constants.foreign_prefix == "lib."

    def test_include_dirs_resolved(self, tmp_path):
        """Test that relative include dirs resolve against the file's directory."""
        path = tmp_path / "cbind.toml"
        path.write_text(CONFIG_TOML)
        config = TranslatorConfig.from_file(path)
        assert config.include_dirs_abs == [tmp_path / "include", Path("/opt/sdk/include")]

    def test_empty_file(self, tmp_path):
        """Test that an empty file gives defaults."""
        path = tmp_path / "cbind.toml"
        path.write_text("")
        config = TranslatorConfig.from_file(path)
        assert config.parser.std == "c99"
        assert config.constants.enum is ConstRule.VALUE

    def test_unknown_rule(self, tmp_path):
        """Test that an unknown rule name is rejected."""
        path = tmp_path / "cbind.toml"
        path.write_text('[constants]\nenum = "inline"\n')
        with pytest.raises(ConfigError, match="inline") as exc_info:
            TranslatorConfig.from_file(path)
        assert exc_info.value.code == CBIND_ERROR_CONFIG

    def test_invalid_toml(self, tmp_path):
        """Test that malformed TOML is a configuration error."""
        path = tmp_path / "cbind.toml"
        path.write_text("[parser\n")
        with pytest.raises(ConfigError):
            TranslatorConfig.from_file(path)


class TestDiscovery:
    """Test config file discovery."""

    def test_find_in_parent(self, tmp_path):
        """Test that cbind.toml is found in a parent directory."""
        (tmp_path / "cbind.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert TranslatorConfig.find_config(nested) == (tmp_path / "cbind.toml").resolve()

    def test_load_discovers(self, tmp_path, monkeypatch):
        """Test that load() picks up the discovered file."""
        (tmp_path / "cbind.toml").write_text('[parser]\nstd = "gnu11"\n')
        monkeypatch.chdir(tmp_path)
        assert TranslatorConfig.load().parser.std == "gnu11"

    def test_load_explicit_missing(self, tmp_path, monkeypatch):
        """Test that a missing explicit file falls back to defaults."""
        monkeypatch.chdir(tmp_path)
        config = TranslatorConfig.load(tmp_path / "missing.toml")
        assert config.project_root == tmp_path


class TestParseConstRule:
    """Test rule name parsing."""

    @pytest.mark.parametrize("name,rule", [
        ("value", ConstRule.VALUE),
        ("foreign_alias", ConstRule.FOREIGN_ALIAS),
        ("foreign-alias", ConstRule.FOREIGN_ALIAS),
        ("EXPAND", ConstRule.EXPAND),
    ])
    def test_names(self, name, rule):
        """Test accepted spellings."""
        assert parse_const_rule(name) is rule

    def test_unknown(self):
        """Test the error message lists the choices."""
        with pytest.raises(ConfigError, match="value, foreign_alias, expand"):
            parse_const_rule("bogus")
