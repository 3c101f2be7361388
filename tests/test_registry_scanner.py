import pytest

import registry_scanner
from cancellation_utils import CancellationManager
from models import ArtifactKind
from registry_scanner import RegistryScanner, value_count_of


class FakeKey:
    def __init__(self, values, subkeys):
        self.values = values
        self.subkeys = subkeys

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeRegistry:
    """Minimal stand-in for the winreg module over an in-memory HKCU tree."""
    HKEY_CURRENT_USER = object()

    def __init__(self, keys):
        self.keys = {path.lower(): data for path, data in keys.items()}

    def OpenKey(self, hive, path):
        assert hive is self.HKEY_CURRENT_USER
        data = self.keys.get(path.lower())
        if data is None:
            raise FileNotFoundError(path)
        return FakeKey(*data)

    def QueryInfoKey(self, key):
        # (subkey count, value count, last write as FILETIME)
        return len(key.subkeys), key.values, 133000000000000000

    def EnumKey(self, key, index):
        if index >= len(key.subkeys):
            raise OSError("no more subkeys")
        return key.subkeys[index]


@pytest.fixture
def fake_registry():
    return FakeRegistry({
        "Software\\MyTool": (3, ["Settings"]),
        "Software\\MyTool\\Settings": (5, []),
        "Software\\Acme\\MyTool": (2, []),
        "Software\\Empty": (0, []),
    })


def test_scan_finds_name_and_publisher_keys(fake_registry):
    results = RegistryScanner(registry=fake_registry).scan(["MyTool"], ["Acme"])
    assert [c.path for c in results] == [
        "HKCU\\Software\\MyTool",
        "HKCU\\Software\\MyTool\\Settings",
        "HKCU\\Software\\Acme\\MyTool",
    ]
    assert all(c.artifact_kind == ArtifactKind.REGISTRY_KEY for c in results)
    assert results[0].is_directory
    assert value_count_of(results[1]) == 5
    assert results[0].last_modified > 0


def test_empty_and_missing_keys_are_ignored(fake_registry):
    scanner = RegistryScanner(registry=fake_registry)
    assert scanner.scan(["Empty", "Missing"]) == []


def test_candidate_key_paths_are_limited_and_unique():
    scanner = RegistryScanner(registry=FakeRegistry({}), variant_limit=2)
    paths = scanner.candidate_key_paths(["Tool", "TOOL", "Other"], ["Acme"])
    assert paths == ["Software\\Tool", "Software\\Acme\\Tool"]


def test_unavailable_registry(monkeypatch):
    monkeypatch.setattr(registry_scanner, "_load_winreg", lambda: None)
    scanner = RegistryScanner()
    assert not scanner.available
    assert scanner.scan(["MyTool"]) == []


def test_cancelled_registry_scan(fake_registry):
    manager = CancellationManager()
    manager.cancel()
    assert RegistryScanner(registry=fake_registry, cancellation_manager=manager).scan(["MyTool"]) == []
