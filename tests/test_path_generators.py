import os

import steam_utils
from models import SoftwareRecord
from name_variations import generate_name_variations, publisher_variants
from path_generators import (
    DocumentsGenerator,
    InstallAdjacentGenerator,
    PublisherLauncherGenerator,
    StandardLocationGenerator,
    default_generators,
    ordered_variants,
)


def templates_of(generator, software, variants=None, publishers=None):
    variants = variants if variants is not None else generate_name_variations(software.name)
    publishers = publishers if publishers is not None else publisher_variants(software.publisher)
    return generator.generate(software, variants, publishers)


def test_standard_locations():
    software = SoftwareRecord(name="Visual Studio Code", publisher="Microsoft Corporation")
    generated = templates_of(StandardLocationGenerator(), software)
    paths = {t.template for t in generated}
    assert "%APPDATA%/Code" in paths
    assert "%LOCALAPPDATA%/Code/User" in paths
    assert "%APPDATA%/Code.json" in paths
    assert "%APPDATA%/Microsoft/Code" in paths
    assert "%USERPROFILE%/AppData/LocalLow/Code" in paths
    assert "%USERPROFILE%/.code" in paths
    assert "%USERPROFILE%/.config/code" in paths
    assert all(t.source_generator == "standard-location" for t in generated)


def test_dotfiles_skip_names_with_spaces():
    generated = StandardLocationGenerator().generate(SoftwareRecord(name="My Tool"), ["My Tool"], [])
    assert not any("/." in t.template for t in generated)


def test_documents_locations():
    software = SoftwareRecord(name="Witcher", publisher="CD Projekt Red")
    paths = {t.template for t in templates_of(DocumentsGenerator(), software)}
    assert "%DOCUMENTS%/Witcher" in paths
    assert "%DOCUMENTS%/My Games/Witcher" in paths
    assert "%SAVEDGAMES%/Witcher" in paths
    assert "%DOCUMENTS%/My Games/CD Projekt Red/Witcher" in paths


def test_install_adjacent_requires_existing_folder(tmp_path):
    software = SoftwareRecord(name="Tool", install_path=str(tmp_path / "missing"))
    assert templates_of(InstallAdjacentGenerator(), software) == []


def test_install_adjacent_locations(tmp_path):
    install = tmp_path / "Tool"
    install.mkdir()
    (install / "helper.exe").write_bytes(b"x")
    (install / "tool.exe").write_bytes(b"x")
    software = SoftwareRecord(name="Tool", install_path=str(install))
    paths = {t.template for t in templates_of(InstallAdjacentGenerator(), software)}
    assert os.path.join(str(install), "config") in paths
    assert os.path.join(str(install), "Tool.ini") in paths
    assert os.path.join(str(install), "tool.exe") + ".config" in paths


def test_main_executable_falls_back_to_largest(tmp_path):
    (tmp_path / "small.exe").write_bytes(b"x")
    (tmp_path / "large.exe").write_bytes(b"x" * 100)
    assert InstallAdjacentGenerator.find_main_executable(str(tmp_path), ["Other"]) == str(tmp_path / "large.exe")
    assert InstallAdjacentGenerator.find_main_executable(str(tmp_path / "none"), ["Other"]) is None


def test_publisher_aliases():
    aliases = PublisherLauncherGenerator.publisher_aliases("Ubisoft Entertainment SA", [])
    assert "Ubisoft" in aliases
    assert PublisherLauncherGenerator.publisher_aliases("", []) == []


def test_launcher_and_category_templates():
    software = SoftwareRecord(name="Overwatch", publisher="Blizzard Entertainment", category="Game")
    paths = {t.template for t in templates_of(PublisherLauncherGenerator(), software)}
    assert "%APPDATA%/Battle.net/Overwatch" in paths
    assert "%APPDATA%/Blizzard/Overwatch" in paths
    assert "%USERPROFILE%/Saved Games/Overwatch" in paths


def test_detect_categories():
    assert PublisherLauncherGenerator.detect_categories(SoftwareRecord(name="Visual Studio Code")) == ["ide"]
    assert PublisherLauncherGenerator.detect_categories(SoftwareRecord(name="Google Chrome")) == ["browser"]
    assert PublisherLauncherGenerator.detect_categories(SoftwareRecord(name="Calculator")) == []


def test_steam_userdata_templates(tmp_path):
    steam_utils.clear_steam_cache()
    library = tmp_path / "SteamLibrary"
    install = library / "steamapps" / "common" / "Portal 2"
    install.mkdir(parents=True)
    (library / "steamapps" / "appmanifest_620.acf").write_text(
        '"AppState"\n{\n\t"appid"\t\t"620"\n\t"installdir"\t\t"Portal 2"\n}\n', encoding="utf-8")
    (library / "userdata").mkdir()
    software = SoftwareRecord(name="Portal 2", install_path=str(install))
    paths = {t.template for t in templates_of(PublisherLauncherGenerator(), software)}
    assert os.path.join(str(library), "userdata", "*", "620", "remote") in paths


def test_default_generators_and_variant_order():
    assert [g.name for g in default_generators()] == [
        "standard-location", "documents", "install-adjacent", "publisher-launcher"]
    assert ordered_variants({"b", "A", "", "a"}) == ["A", "a", "b"]
