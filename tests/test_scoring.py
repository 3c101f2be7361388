import os

import pytest

import config
from scoring import ScoringEngine, cleaned_software_name


@pytest.fixture
def engine():
    return ScoringEngine()


def test_high_value_settings_file(engine):
    # high-value name + config extension + keyword + reasonable size
    assert engine.score("/x/Code/User/settings.json", "Visual Studio Code", size_bytes=100) == 190


@pytest.mark.parametrize("filename", [
    "configtool_settings.exe",
    "config_installer.msi",
    "settings.dmp",
    "preferences.dll",
])
def test_noise_extension_is_never_admitted(engine, filename):
    score = engine.score(f"/x/{filename}", "Config Tool", size_bytes=100, in_whitelisted_subfolder=True)
    assert score < config.MIN_SCORE_BROAD
    assert score < config.MIN_SCORE_PRECISE


def test_exclusion_keyword_penalty(engine):
    assert engine.score("/x/cache.json", "Tool", size_bytes=100) == 50 - 50 + 10


def test_size_bands(engine):
    assert engine.score("/x/app.json", "Other", size_bytes=200 * 1024 * 1024) == 50 - 30
    assert engine.score("/x/app.json", "Other", size_bytes=2) == 50


def test_name_in_filename(engine):
    assert engine.score("/x/mygame_slot1.sav", "My Game", size_bytes=100) == 20 + 10


def test_size_read_from_disk(engine, tmp_path):
    path = tmp_path / "app_options.ini"
    path.write_text("[main]\nvolume=3\n")
    assert engine.score(str(path), "Other") == 50 + 30 + 10


def test_whitelisted_subfolder_bonus(engine):
    base = engine.score(os.path.join("x", "app.json"), "Other", size_bytes=100)
    assert engine.score(os.path.join("x", "app.json"), "Other", 100, in_whitelisted_subfolder=True) == base + 10


def test_registry_key_score(engine):
    assert engine.score_registry_key("HKCU\\Software\\MyTool", "MyTool", 3) == 60 + 6 + 20
    assert engine.score_registry_key("HKCU\\Software\\Acme\\Other", "MyTool", 50) == 60 + 20


def test_admission_thresholds():
    assert ScoringEngine(config.MIN_SCORE_BROAD).is_admitted(50)
    assert not ScoringEngine(config.MIN_SCORE_PRECISE).is_admitted(50)


def test_cleaned_software_name():
    assert cleaned_software_name("Visual Studio Code (User) 1.85") == "visualstudiocode"
