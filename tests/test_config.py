"""Unit tests for Config (dappgen.config).

Tests cover:
- Config defaults
- save/load round trip
- from_env parsing of every DAPPGEN_* variable
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from dappgen.config import Config


class TestConfigDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        config = Config()
        assert config.output_dir == Path(".")
        assert config.base_template == "with-typescript"
        assert config.shim_process_version == "v9.40"
        assert config.run_formatter is True
        assert config.package_author is None

    @pytest.mark.unit
    def test_invalid_type_rejected(self):
        with pytest.raises(ValidationError):
            Config(run_formatter="maybe")


class TestConfigPersistence:
    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        original = Config(
            output_dir=tmp_path / "projects",
            base_template="blank",
            run_formatter=False,
            package_author="Jane Doe",
        )
        saved = original.save(tmp_path / "conf" / "dappgen.json")
        assert saved.exists()

        loaded = Config.load(saved)
        assert loaded == original

    @pytest.mark.unit
    def test_saved_file_is_json(self, tmp_path: Path):
        path = Config().save(tmp_path / "dappgen.json")
        data = json.loads(path.read_text())
        assert data["base_template"] == "with-typescript"
        assert data["run_formatter"] is True


class TestConfigFromEnv:
    @pytest.mark.unit
    def test_empty_environment_gives_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            assert Config.from_env() == Config()

    @pytest.mark.unit
    def test_reads_every_variable(self, tmp_path: Path):
        env = {
            "DAPPGEN_OUTPUT_DIR": str(tmp_path),
            "DAPPGEN_BASE_TEMPLATE": "blank",
            "DAPPGEN_SHIM_PROCESS_VERSION": "v16.0.0",
            "DAPPGEN_RUN_FORMATTER": "false",
            "DAPPGEN_PACKAGE_AUTHOR": "Jane Doe",
        }
        with patch.dict("os.environ", env, clear=True):
            config = Config.from_env()
        assert config.output_dir == tmp_path
        assert config.base_template == "blank"
        assert config.shim_process_version == "v16.0.0"
        assert config.run_formatter is False
        assert config.package_author == "Jane Doe"

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [("1", True), ("YES", True), ("0", False), ("off", False)])
    def test_formatter_flag_parsing(self, value: str, expected: bool):
        with patch.dict("os.environ", {"DAPPGEN_RUN_FORMATTER": value}, clear=True):
            assert Config.from_env().run_formatter is expected
