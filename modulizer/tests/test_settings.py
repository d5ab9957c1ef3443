"""Tests for conversion settings."""

import pytest
from pydantic import ValidationError

from modulizer.core.settings import ConversionSettings, load_settings


class TestConversionSettings:

    def test_defaults(self):
        settings = ConversionSettings()
        assert settings.namespaces == set()
        assert settings.constructor_bridge_member == "_polymerFn"

    def test_is_mutable(self):
        settings = ConversionSettings(mutable_exports={"Polymer.Settings": ["rootPath", ""]})
        assert settings.is_mutable("Polymer.Settings", "rootPath")
        assert not settings.is_mutable("Polymer.Settings", "other")
        assert not settings.is_mutable("Polymer.Other", "rootPath")
        assert settings.mutable_exports == {"Polymer.Settings": ["rootPath"]}

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValidationError):
            ConversionSettings(namespace=["Polymer"])

    def test_empty_bridge_member_is_rejected(self):
        with pytest.raises(ValidationError):
            ConversionSettings(constructor_bridge_member="")


class TestLoadSettings:

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "modulizer.yaml"
        path.write_text(
            "namespaces:\n"
            "  - Polymer\n"
            "mutable_exports:\n"
            "  Polymer.Settings: [rootPath]\n"
            "exclude_references: [Polymer.DomModule]\n"
        )
        settings = load_settings(path)
        assert settings.namespaces == {"Polymer"}
        assert settings.is_mutable("Polymer.Settings", "rootPath")
        assert settings.exclude_references == {"Polymer.DomModule"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "modulizer.yaml"
        path.write_text("")
        assert load_settings(path) == ConversionSettings()

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "missing.yaml") == ConversionSettings()

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "modulizer.yaml"
        path.write_text("namespaces: 3\n")
        with pytest.raises(ValidationError):
            load_settings(path)
