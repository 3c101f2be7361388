import os

import pytest

import steam_utils


MANIFEST = """"AppState"
{
\t"appid"\t\t"620"
\t"name"\t\t"Portal 2"
\t"installdir"\t\t"Portal 2"
}
"""


@pytest.fixture(autouse=True)
def reset_steam_cache():
    steam_utils.clear_steam_cache()
    yield
    steam_utils.clear_steam_cache()


@pytest.fixture
def steam_library(tmp_path):
    library = tmp_path / "SteamLibrary"
    steamapps = library / "steamapps"
    (steamapps / "common" / "Portal 2").mkdir(parents=True)
    (steamapps / "appmanifest_620.acf").write_text(MANIFEST, encoding="utf-8")
    (steamapps / "appmanifest_999.acf").write_text("not a manifest {", encoding="utf-8")
    (library / "userdata" / "12345678" / "620" / "remote").mkdir(parents=True)
    return library


def test_split_install_path(steam_library):
    install = steam_library / "steamapps" / "common" / "Portal 2"
    assert steam_utils.split_steam_install_path(str(install)) == (os.path.normpath(str(steam_library)), "Portal 2")
    assert steam_utils.split_steam_install_path("/opt/games/Portal 2") is None
    assert steam_utils.split_steam_install_path("") is None


def test_appid_from_manifest(steam_library):
    install = steam_library / "steamapps" / "common" / "portal 2"
    assert steam_utils.find_appid_for_install_dir(str(install)) == "620"
    assert steam_utils.find_appid_for_install_dir(str(steam_library / "steamapps" / "common" / "Other")) is None


def test_userdata_root_from_library(steam_library):
    install = steam_library / "steamapps" / "common" / "Portal 2"
    assert steam_utils.find_steam_userdata_root(str(install)) == os.path.normpath(str(steam_library))


def test_library_folders(tmp_path):
    steam = tmp_path / "Steam"
    (steam / "steamapps").mkdir(parents=True)
    second = tmp_path / "Games"
    (second / "steamapps").mkdir(parents=True)
    (steam / "steamapps" / "libraryfolders.vdf").write_text(
        '"libraryfolders"\n{\n'
        f'\t"0"\n\t{{\n\t\t"path"\t\t"{steam.as_posix()}"\n\t}}\n'
        f'\t"1"\n\t{{\n\t\t"path"\t\t"{second.as_posix()}"\n\t}}\n'
        '\t"2"\n\t{\n\t\t"path"\t\t"/does/not/exist"\n\t}\n'
        '}\n', encoding="utf-8")
    libraries = steam_utils.find_steam_libraries(str(steam))
    assert libraries == [os.path.normpath(str(steam)), os.path.normpath(str(second))]


def test_parse_vdf_missing_file(tmp_path):
    assert steam_utils._parse_vdf(str(tmp_path / "missing.vdf")) is None


def test_appid_for_install_outside_library(steam_library, tmp_path, monkeypatch):
    steam = tmp_path / "Steam"
    (steam / "steamapps").mkdir(parents=True)
    (steam / "steamapps" / "libraryfolders.vdf").write_text(
        '"libraryfolders"\n{\n'
        f'\t"1"\n\t{{\n\t\t"path"\t\t"{steam_library.as_posix()}"\n\t}}\n'
        '}\n', encoding="utf-8")
    monkeypatch.setattr(steam_utils, "get_steam_install_path", lambda: str(steam))
    moved = tmp_path / "Games" / "Portal 2"
    moved.mkdir(parents=True)
    assert steam_utils.find_appid_for_install_dir(str(moved)) == "620"
    assert steam_utils.find_appid_for_install_dir(str(tmp_path / "Games" / "Other")) is None
