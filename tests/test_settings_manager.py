import json

import config
import settings_manager
from settings_discovery import DiscoveryOptions, STRICTNESS_PRECISE


def test_missing_file_gives_defaults(tmp_path):
    settings, first_launch = settings_manager.load_settings(str(tmp_path / "settings.json"))
    assert first_launch
    assert settings == settings_manager.get_default_settings()


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2", encoding="utf-8")
    settings, first_launch = settings_manager.load_settings(str(path))
    assert first_launch
    assert settings["max_results"] == config.DEFAULT_MAX_RESULTS


def test_invalid_values_fall_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "strictness": "extreme",
        "max_results": 0,
        "max_file_size_mb": True,
        "registry_scan_enabled": "yes",
        "fuzzy_fallback_enabled": False,
    }), encoding="utf-8")
    settings, first_launch = settings_manager.load_settings(str(path))
    defaults = settings_manager.get_default_settings()
    assert not first_launch
    assert settings["strictness"] == defaults["strictness"]
    assert settings["max_results"] == defaults["max_results"]
    assert settings["max_file_size_mb"] == defaults["max_file_size_mb"]
    assert settings["registry_scan_enabled"] is True
    assert settings["fuzzy_fallback_enabled"] is False


def test_save_then_load(tmp_path):
    path = str(tmp_path / "nested" / "settings.json")
    wanted = dict(settings_manager.get_default_settings(), strictness=STRICTNESS_PRECISE, max_results=5)
    assert settings_manager.save_settings(wanted, path)
    assert settings_manager.load_settings(path) == (wanted, False)


def test_settings_path_uses_app_data_folder(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "get_app_data_folder", lambda: str(tmp_path))
    assert settings_manager.get_settings_path() == str(tmp_path / "settings.json")


def test_options_from_settings():
    precise = DiscoveryOptions.from_settings({"strictness": STRICTNESS_PRECISE, "max_results": 5,
                                              "registry_scan_enabled": False})
    assert precise.precise
    assert precise.min_score == config.MIN_SCORE_PRECISE
    assert precise.max_results == 5
    assert not precise.registry_scan

    broad = DiscoveryOptions.from_settings(settings_manager.get_default_settings())
    assert not broad.precise
    assert broad.min_score == config.MIN_SCORE_BROAD
    assert broad.max_results == config.DEFAULT_MAX_RESULTS
