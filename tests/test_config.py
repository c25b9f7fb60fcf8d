"""Tests for gridcalc.yaml configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from gridcalc.config import CONFIG_FILENAME, DEFAULT_CONFIG, load_config


class TestLoadConfig:
    def test_defaults_without_path(self) -> None:
        assert load_config() == DEFAULT_CONFIG

    def test_defaults_returned_as_copy(self) -> None:
        cfg = load_config()
        cfg["percent_display_scaling"] = False
        assert DEFAULT_CONFIG["percent_display_scaling"] is True

    def test_directory_without_file(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_directory_with_file(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            yaml.dump({"percent_display_scaling": False, "log_dir": "logs"})
        )
        cfg = load_config(tmp_path)
        assert cfg["percent_display_scaling"] is False
        assert cfg["log_dir"] == "logs"
        assert cfg["logging_fsync"] is False

    def test_explicit_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("logging_fsync: true\n")
        assert load_config(path)["logging_fsync"] is True

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(tmp_path)
