"""Tests for sparkserve.registry module.

Tests PresetRegistry directory scanning, skipping rules, fatal startup
conditions and lookup.
"""

import logging
from pathlib import Path

import pytest

from conftest import PI_PRESET, write_preset
from sparkserve.errors import (
    ConfigDirMissing,
    ConfigDirUnreadable,
    ConfigError,
    NoPresetsFound,
    PresetNotFoundError,
)
from sparkserve.registry import PresetRegistry
from sparkserve.schemas import Preset


class TestLoad:
    """Tests for PresetRegistry.load."""

    def test_single_document_round_trip(self, preset_dir):
        registry = PresetRegistry.load(preset_dir)

        assert len(registry) == 1
        preset = registry.lookup("pi")
        assert preset.main == PI_PRESET["main"]
        assert list(preset.args) == PI_PRESET["args"]
        assert preset.spark_conf == PI_PRESET["sparkConf"]

    def test_name_is_file_name_without_suffix(self, tmp_path):
        write_preset(tmp_path, "nightly-etl.yaml", {"main": "etl.py"})
        registry = PresetRegistry.load(tmp_path)
        assert registry.names() == ["nightly-etl"]

    def test_ignores_other_suffixes(self, preset_dir):
        write_preset(preset_dir, "other.yml", {"main": "other.py"})
        write_preset(preset_dir, "notes.json", {"main": "notes.py"})
        (preset_dir / "README.md").write_text("# presets")

        registry = PresetRegistry.load(preset_dir)
        assert registry.names() == ["pi"]

    def test_ignores_subdirectories(self, preset_dir):
        write_preset(preset_dir / "archive", "old.yaml", {"main": "old.py"})
        (preset_dir / "dir.yaml").mkdir()

        registry = PresetRegistry.load(preset_dir)
        assert registry.names() == ["pi"]

    def test_skips_unparseable_yaml(self, preset_dir, caplog, test_logger):
        write_preset(preset_dir, "broken.yaml", "main: [unclosed\n")

        with caplog.at_level(logging.WARNING, logger=test_logger.name):
            registry = PresetRegistry.load(preset_dir, logger=test_logger)

        assert "broken" not in registry
        assert registry.names() == ["pi"]
        assert any("broken.yaml" in r.getMessage() for r in caplog.records)

    def test_skips_documents_without_main(self, preset_dir):
        write_preset(preset_dir, "nomain.yaml", {"args": ["1"]})
        write_preset(preset_dir, "empty.yaml", "")

        registry = PresetRegistry.load(preset_dir)
        assert registry.names() == ["pi"]

    def test_skips_file_with_empty_name(self, preset_dir):
        write_preset(preset_dir, ".yaml", {"main": "hidden.py"})

        registry = PresetRegistry.load(preset_dir)
        assert registry.names() == ["pi"]

    def test_scalars_keep_raw_text(self, tmp_path):
        write_preset(tmp_path, "tuned.yaml", (
            "main: app.py\n"
            "args: [010, 1_000, 0.10, yes, 2024-01-01]\n"
            "sparkConf:\n"
            "  spark.memory.fraction: 0.60\n"
            "  spark.sql.adaptive.enabled: yes\n"
            "  spark.executor.instances: 2\n"
            "  spark.empty:\n"
        ))
        preset = PresetRegistry.load(tmp_path).lookup("tuned")

        assert preset.args == ("010", "1_000", "0.10", "yes", "2024-01-01")
        assert preset.spark_conf == {
            "spark.memory.fraction": "0.60",
            "spark.sql.adaptive.enabled": "yes",
            "spark.executor.instances": "2",
            "spark.empty": "",
        }

    def test_date_values_do_not_skip_the_file(self, preset_dir):
        write_preset(preset_dir, "daily.yaml", "main: daily.py\nargs: [2024-01-01]\n")

        registry = PresetRegistry.load(preset_dir)
        assert registry.names() == ["daily", "pi"]
        assert registry.lookup("daily").args == ("2024-01-01",)

    def test_loaded_preset_cannot_be_changed(self, preset_dir):
        registry = PresetRegistry.load(preset_dir)

        with pytest.raises(TypeError):
            registry.lookup("pi").spark_conf["injected"] = "x"
        assert "injected" not in registry.lookup("pi").spark_conf

    def test_multiple_presets(self, preset_dir):
        write_preset(preset_dir, "wordcount.yaml", {"main": "wc.py", "args": ["in", "out"]})

        registry = PresetRegistry.load(preset_dir)
        assert registry.names() == ["pi", "wordcount"]
        assert registry.lookup("wordcount").args == ("in", "out")

    def test_source_dir_recorded(self, preset_dir):
        assert PresetRegistry.load(preset_dir).source_dir == preset_dir


class TestLoadErrors:
    """Tests for fatal startup conditions."""

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigDirMissing):
            PresetRegistry.load(tmp_path / "does-not-exist")

    def test_path_is_a_file(self, tmp_path):
        path = tmp_path / "presets.yaml"
        path.write_text("main: x")
        with pytest.raises(ConfigDirMissing):
            PresetRegistry.load(path)

    def test_unreadable_directory(self, preset_dir, monkeypatch):
        def denied(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "iterdir", denied)
        with pytest.raises(ConfigDirUnreadable):
            PresetRegistry.load(preset_dir)

    def test_empty_directory(self, tmp_path):
        with pytest.raises(NoPresetsFound):
            PresetRegistry.load(tmp_path)

    def test_only_invalid_presets(self, tmp_path):
        write_preset(tmp_path, "broken.yaml", "{{{")
        write_preset(tmp_path, "nomain.yaml", {"sparkConf": {"a": "b"}})
        with pytest.raises(NoPresetsFound):
            PresetRegistry.load(tmp_path)

    def test_all_are_config_errors(self, tmp_path):
        with pytest.raises(ConfigError):
            PresetRegistry.load(tmp_path)


class TestLookup:
    """Tests for lookup and inspection helpers."""

    @pytest.fixture
    def registry(self):
        return PresetRegistry({
            "pi": Preset(name="pi", main="pi.py"),
            "etl": Preset(name="etl", main="etl.py"),
        })

    def test_lookup(self, registry):
        assert registry.lookup("pi").main == "pi.py"

    def test_lookup_missing(self, registry):
        with pytest.raises(PresetNotFoundError) as exc_info:
            registry.lookup("missing")
        assert exc_info.value.name == "missing"

    def test_names_sorted(self, registry):
        assert registry.names() == ["etl", "pi"]

    def test_contains(self, registry):
        assert "pi" in registry
        assert "missing" not in registry

    def test_iter_in_name_order(self, registry):
        assert [p.name for p in registry] == ["etl", "pi"]

    def test_registry_copies_input(self):
        presets = {"pi": Preset(name="pi", main="pi.py")}
        registry = PresetRegistry(presets)
        presets.clear()
        assert len(registry) == 1
