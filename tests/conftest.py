import os

import pytest

from settings_discovery import DiscoveryOptions, DiscoveryOrchestrator


@pytest.fixture
def fake_home(tmp_path):
    """A Windows-like user profile under the pytest temp folder."""
    home = tmp_path / "home"
    for sub in ("AppData/Roaming", "AppData/Local", "AppData/LocalLow",
                "Documents/My Games", "Saved Games"):
        (home / sub).mkdir(parents=True)
    return home


@pytest.fixture
def token_table(fake_home, tmp_path):
    program_files = tmp_path / "Program Files"
    program_files.mkdir()
    return {
        "USERPROFILE": str(fake_home),
        "APPDATA": str(fake_home / "AppData" / "Roaming"),
        "LOCALAPPDATA": str(fake_home / "AppData" / "Local"),
        "DOCUMENTS": str(fake_home / "Documents"),
        "SAVEDGAMES": str(fake_home / "Saved Games"),
        "PROGRAMFILES": str(program_files),
        "PROGRAMFILES(X86)": str(program_files),
        "PROGRAMDATA": str(tmp_path / "ProgramData"),
    }


@pytest.fixture
def appdata(token_table):
    return token_table["APPDATA"]


@pytest.fixture
def make_orchestrator(token_table):
    """Orchestrator bound to the fake profile, registry off and no fuzzy pauses."""
    def _make(options=None, **kwargs):
        if options is None:
            options = DiscoveryOptions.broad(registry_scan=False, fuzzy_chunk_pause=0)
        kwargs.setdefault("token_table", token_table)
        return DiscoveryOrchestrator(options=options, **kwargs)
    return _make


def write_file(path, content="{\"key\": \"value\"}"):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return os.path.normpath(path)
