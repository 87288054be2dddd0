"""Tests for the configuration store"""

import json
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data.models import Color, default_thresholds
from settings.migration import legacy_source_id
from settings.store import ConfigurationStore

RED = Color(1.0, 0.0, 0.0)


def _write(path: Path, document) -> None:
    path.write_text(json.dumps(document), encoding="utf-8")


class TestLoading:
    """Test loading and persisting settings"""

    def test_missing_file_writes_defaults(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"

        store = ConfigurationStore(path)

        assert path.exists()
        assert store.window_length == 30
        assert store.thresholds == default_thresholds()
        assert store.data_sources == []
        assert store.is_first_launch is True

    def test_round_trips_through_disk(self, tmp_path):
        path = tmp_path / "settings.json"
        store = ConfigurationStore(path)
        source = store.add_data_source("Laptop", "/data/a.json")
        store.set_window_length(90)
        store.add_threshold(1800, RED)

        reloaded = ConfigurationStore(path)

        assert reloaded.window_length == 90
        assert reloaded.data_sources == [source]
        assert 1800 in [t.seconds for t in reloaded.thresholds]
        assert reloaded.is_first_launch is False

    def test_invalid_window_falls_back_to_default(self, tmp_path):
        path = tmp_path / "settings.json"
        _write(path, {"daysCount": 45, "dataSources": []})

        assert ConfigurationStore(path).window_length == 30

    @pytest.mark.parametrize("value", [60.0, "60", True, None])
    def test_non_integer_window_falls_back_to_default(self, tmp_path, value):
        path = tmp_path / "settings.json"
        _write(path, {"daysCount": value, "dataSources": []})

        window = ConfigurationStore(path).window_length

        assert window == 30
        assert type(window) is int

    @pytest.mark.parametrize("value", [None, {"id": "x"}, "sources"])
    def test_non_list_sources_are_dropped(self, tmp_path, value):
        path = tmp_path / "settings.json"
        _write(path, {"daysCount": 60, "dataSources": value})

        store = ConfigurationStore(path)

        assert store.data_sources == []
        assert store.window_length == 60

    def test_duplicate_source_ids_are_reassigned(self, tmp_path):
        path = tmp_path / "settings.json"
        _write(
            path,
            {
                "dataSources": [
                    {"id": "x", "name": "A", "locator": "/data/a.json", "isEnabled": True},
                    {"id": "x", "name": "B", "locator": "/data/b.json", "isEnabled": True},
                ]
            },
        )

        first = ConfigurationStore(path).data_sources
        second = ConfigurationStore(path).data_sources

        assert [s.locator for s in first] == ["/data/a.json", "/data/b.json"]
        assert first[0].id == "x"
        assert first[1].id != "x"
        assert first == second, "Reassigned ids should be stable across loads"

    def test_threshold_table_without_baseline_is_replaced(self, tmp_path):
        path = tmp_path / "settings.json"
        _write(
            path,
            {
                "dataSources": [],
                "thresholds": [{"seconds": 60, "color": RED.to_dict(), "isEditable": True}],
            },
        )

        assert ConfigurationStore(path).thresholds == default_thresholds()

    def test_thresholds_are_sorted_on_load(self, tmp_path):
        path = tmp_path / "settings.json"
        table = list(reversed(default_thresholds()))
        _write(path, {"dataSources": [], "thresholds": [t.to_dict() for t in table]})

        assert [t.seconds for t in ConfigurationStore(path).thresholds] == [0, 3600, 7200, 14400, 21600, 28800]

    def test_corrupt_file_uses_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")

        store = ConfigurationStore(path)

        assert store.window_length == 30
        assert store.data_sources == []

    def test_legacy_file_is_migrated_and_saved(self, tmp_path):
        path = tmp_path / "settings.json"
        _write(path, {"daysCount": 60, "filePath": "/Users/me/codingTimeData.json", "fileBookmark": "Ym9vaw=="})

        store = ConfigurationStore(path)

        assert store.window_length == 60
        [source] = store.data_sources
        assert source.id == legacy_source_id("/Users/me/codingTimeData.json")
        assert source.locator == "/Users/me/codingTimeData.json"
        assert source.is_enabled
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert "filePath" not in saved
        assert saved["dataSources"][0]["id"] == source.id

    def test_legacy_migration_is_idempotent(self, tmp_path):
        path = tmp_path / "settings.json"
        _write(path, {"filePath": "/Users/me/codingTimeData.json"})

        first = ConfigurationStore(path).data_sources
        second = ConfigurationStore(path).data_sources

        assert first == second


class TestDataSources:
    """Test source management"""

    def test_add_and_enable_toggle(self, config_store):
        source = config_store.add_data_source("Desktop", "/data/a.json")

        config_store.set_source_enabled(source.id, False)

        assert config_store.enabled_sources() == []
        assert config_store.get_data_source(source.id).is_enabled is False

    def test_rename(self, config_store):
        source = config_store.add_data_source("Desktop", "/data/a.json")

        config_store.rename_data_source(source.id, "Work")

        assert config_store.get_data_source(source.id).name == "Work"
        assert config_store.get_data_source(source.id).locator == "/data/a.json"

    def test_default_name_from_locator(self, config_store):
        assert config_store.add_data_source("", "/data/codingTimeData.json").name == "codingTimeData"

    def test_remove(self, config_store):
        keep = config_store.add_data_source("A", "/data/a.json")
        drop = config_store.add_data_source("B", "/data/b.json")

        config_store.remove_data_source(drop.id)

        assert config_store.data_sources == [keep]

    def test_unknown_source_raises_key_error(self, config_store):
        with pytest.raises(KeyError):
            config_store.rename_data_source("missing", "x")
        with pytest.raises(KeyError):
            config_store.remove_data_source("missing")

    def test_source_cap(self, tmp_path):
        store = ConfigurationStore(tmp_path / "settings.json", max_data_sources=2)
        store.add_data_source("A", "/a")
        store.add_data_source("B", "/b")

        with pytest.raises(ValueError, match="At most 2"):
            store.add_data_source("C", "/c")

    def test_returned_list_is_a_copy(self, config_store):
        config_store.data_sources.append("junk")

        assert config_store.data_sources == []


class TestThresholdEditing:
    """Test threshold table mutations"""

    def test_update_color_and_cutoff(self, config_store):
        config_store.update_threshold(3600, new_seconds=1800, color=RED)

        rule = next(t for t in config_store.thresholds if t.seconds == 1800)
        assert rule.color == RED
        assert 3600 not in [t.seconds for t in config_store.thresholds]

    def test_baseline_is_not_editable(self, config_store):
        with pytest.raises(ValueError, match="not editable"):
            config_store.update_threshold(0, color=RED)

    def test_baseline_cannot_be_removed(self, config_store):
        with pytest.raises(ValueError):
            config_store.remove_threshold(0)

    def test_duplicate_cutoff_is_rejected(self, config_store):
        with pytest.raises(ValueError):
            config_store.add_threshold(7200, RED)
        with pytest.raises(ValueError):
            config_store.update_threshold(3600, new_seconds=7200)

    def test_remove_and_reset(self, config_store):
        config_store.remove_threshold(28800)
        assert [t.seconds for t in config_store.thresholds] == [0, 3600, 7200, 14400, 21600]

        config_store.reset_thresholds()
        assert config_store.thresholds == default_thresholds()

    def test_window_length_validation(self, config_store):
        config_store.set_window_length(60)
        assert config_store.window_length == 60

        with pytest.raises(ValueError):
            config_store.set_window_length(14)
        with pytest.raises(ValueError):
            config_store.set_window_length(90.0)
        assert config_store.window_length == 60


class TestListeners:
    """Test change notification"""

    def test_mutations_notify_listeners(self, config_store):
        calls = []
        config_store.add_listener(lambda: calls.append(1))

        source = config_store.add_data_source("A", "/a")
        config_store.set_source_enabled(source.id, False)
        config_store.set_window_length(90)
        config_store.reset_thresholds()

        assert len(calls) == 4

    def test_rejected_mutation_does_not_notify(self, config_store):
        calls = []
        config_store.add_listener(lambda: calls.append(1))

        with pytest.raises(ValueError):
            config_store.set_window_length(7)

        assert calls == []

    def test_complete_first_launch(self, tmp_path):
        path = tmp_path / "settings.json"
        ConfigurationStore(path).complete_first_launch()

        assert ConfigurationStore(path).is_first_launch is False
