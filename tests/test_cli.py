import os

import pytest

import config
import config_scout_cli
import path_expander
from conftest import write_file
from utils import format_file_size, shorten_path


@pytest.fixture
def cli_env(monkeypatch, tmp_path, token_table):
    app_folder = tmp_path / "app"
    app_folder.mkdir()
    monkeypatch.setattr(config, "get_app_data_folder", lambda: str(app_folder))
    monkeypatch.setattr(path_expander, "default_token_table", lambda: dict(token_table))
    monkeypatch.setattr(config_scout_cli, "setup_logging", lambda verbose=False: None)
    return app_folder


def test_parser_flags():
    args = config_scout_cli.build_parser().parse_args(
        ["Visual Studio Code", "--strictness", "precise", "--max-results", "3", "--no-registry"])
    options = config_scout_cli.options_from_args(args, {"fuzzy_fallback_enabled": True})
    assert options.precise
    assert options.max_results == 3
    assert not options.registry_scan
    assert options.fuzzy_fallback


def test_finds_settings_through_known_profile(cli_env, appdata, capsys):
    write_file(os.path.join(appdata, "Code", "User", "settings.json"))
    exit_code = config_scout_cli.main(["Visual Studio Code", "--no-registry", "--no-fuzzy"])
    out = capsys.readouterr().out
    assert exit_code == 0
    assert "settings.json" in out
    assert "Visual Studio Code" in out


def test_nothing_found(cli_env, capsys):
    exit_code = config_scout_cli.main(["Nonexistent Widget Pro", "--no-registry", "--no-cache"])
    assert exit_code == 1
    assert "No settings found" in capsys.readouterr().out


def test_clear_cache(cli_env):
    assert config_scout_cli.main(["--clear-cache"]) == 0
    assert (cli_env / config.PROFILE_CACHE_FILENAME).exists()


def test_invalid_max_results(cli_env):
    with pytest.raises(SystemExit):
        config_scout_cli.main(["Tool", "--max-results", "0"])


def test_format_file_size():
    assert format_file_size(512) == "512 B"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(None) == "?"


def test_shorten_path(tmp_path):
    install = str(tmp_path / "App")
    assert shorten_path(os.path.join(install, "config", "app.ini"), install) == os.path.join("install folder", "config", "app.ini")
    assert shorten_path("HKCU\\Software\\Tool") == "HKCU\\Software\\Tool"
    home = str(tmp_path / "home")
    assert shorten_path(os.path.join(home, ".config", "x.json"), home_dir=home) == os.path.join("~", ".config", "x.json")
