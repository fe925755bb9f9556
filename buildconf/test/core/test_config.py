"""Tests for buildconf.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildconf.core.config import (
    DEFAULT_BASE_URL,
    CollaboratorsConfig,
    Config,
    PathsConfig,
    ToolchainConfig,
    load_config,
)
from buildconf.core.result import Err, Ok


class TestDefaults:
    def test_toolchain(self) -> None:
        config = ToolchainConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.version is None
        assert config.transport == "auto"

    def test_paths(self) -> None:
        config = PathsConfig()
        assert (config.release, config.debug, config.deps) == ("release", "debug", "deps")

    def test_collaborators(self) -> None:
        config = CollaboratorsConfig()
        assert config.python_installer.endswith("install_python_toolchain.sh")
        assert config.r_installer.endswith("install_r_toolchain.sh")


class TestFromDict:
    def test_empty(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_overrides(self) -> None:
        config = Config.from_dict(
            {
                "toolchain": {
                    "base_url": "https://mirror.example.com/deps/",
                    "version": 14,
                    "transport": "curl",
                    "timeout": 30,
                },
                "paths": {"release": "rel"},
                "collaborators": {"r_installer": "scripts/r.sh"},
            }
        )
        assert config.toolchain.base_url == "https://mirror.example.com/deps"
        assert config.toolchain.version == 14
        assert config.toolchain.transport == "curl"
        assert config.toolchain.timeout == 30.0
        assert config.paths.release == "rel"
        assert config.paths.debug == "debug"
        assert config.collaborators.r_installer == "scripts/r.sh"

    def test_invalid_transport(self) -> None:
        with pytest.raises(ValueError, match="transport"):
            Config.from_dict({"toolchain": {"transport": "ftp"}})

    def test_bool_is_not_a_version(self) -> None:
        config = Config.from_dict({"toolchain": {"version": True}})
        assert config.toolchain.version is None


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "buildconf.toml"
        path.write_text('[toolchain]\ntransport = "wget"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.toolchain.transport == "wget"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "buildconf.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "buildconf.toml"
        path.write_text("[toolchain\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "buildconf.toml"
        path.write_text('[toolchain]\ntransport = "carrier-pigeon"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message
