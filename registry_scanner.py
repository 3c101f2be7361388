"""
registry_scanner.py
Read-only lookup of per-user registry keys named after a program.
"""

import logging
from typing import Iterable, List

import config
from models import ArtifactKind, Candidate


# Seconds between 1601-01-01 (FILETIME epoch) and 1970-01-01
_FILETIME_EPOCH_OFFSET = 11644473600
SOFTWARE_ROOT = "Software"
HIVE_PREFIX = "HKCU"


def _filetime_to_epoch(filetime: int) -> float:
    if not filetime:
        return 0.0
    return max(0.0, filetime / 10_000_000 - _FILETIME_EPOCH_OFFSET)


def _load_winreg():
    """Return the winreg module, or None on non-Windows systems."""
    try:
        import winreg
        return winreg
    except ImportError:
        logging.debug("winreg module not available (normal for non-Windows).")
        return None


class RegistryScanner:
    """Looks for HKCU\\Software\\<name> and HKCU\\Software\\<publisher>\\<name> keys."""

    def __init__(self, registry=None,
                 variant_limit: int = config.REGISTRY_VARIANT_LIMIT,
                 subkey_limit: int = config.REGISTRY_SUBKEY_LIMIT,
                 cancellation_manager=None):
        # Any object exposing the winreg API (OpenKey, QueryInfoKey, EnumKey, HKEY_CURRENT_USER)
        self.registry = registry if registry is not None else _load_winreg()
        self.variant_limit = variant_limit
        self.subkey_limit = subkey_limit
        self.cancellation_manager = cancellation_manager

    @property
    def available(self) -> bool:
        return self.registry is not None

    def candidate_key_paths(self, name_variants: Iterable[str], publisher_variants: Iterable[str] = ()) -> List[str]:
        names = [n for n in name_variants if n][:self.variant_limit]
        publishers = [p for p in publisher_variants if p][:self.variant_limit]
        paths = []
        for name in names:
            paths.append(f"{SOFTWARE_ROOT}\\{name}")
            for publisher in publishers:
                paths.append(f"{SOFTWARE_ROOT}\\{publisher}\\{name}")
        # Keep the first spelling of each key
        seen = set()
        unique = []
        for path in paths:
            if path.lower() not in seen:
                seen.add(path.lower())
                unique.append(path)
        return unique

    def scan(self, name_variants: Iterable[str], publisher_variants: Iterable[str] = ()) -> List[Candidate]:
        if not self.available:
            return []
        results: List[Candidate] = []
        for key_path in self.candidate_key_paths(name_variants, publisher_variants):
            if self.cancellation_manager and self.cancellation_manager.check_cancelled():
                logging.info("Registry scan cancelled.")
                break
            candidate, subkeys = self.inspect_key(key_path)
            if candidate is None:
                continue
            results.append(candidate)
            for subkey_name in subkeys:
                sub_candidate, _ = self.inspect_key(f"{key_path}\\{subkey_name}", list_subkeys=False)
                if sub_candidate is not None:
                    results.append(sub_candidate)
        if results:
            logging.info(f"Registry scan found {len(results)} key(s).")
        return results

    def inspect_key(self, key_path: str, list_subkeys: bool = True):
        reg = self.registry
        try:
            with reg.OpenKey(reg.HKEY_CURRENT_USER, key_path) as hkey:
                subkey_count, value_count, modified = reg.QueryInfoKey(hkey)
                subkeys = []
                if list_subkeys:
                    for index in range(min(subkey_count, self.subkey_limit)):
                        try:
                            subkeys.append(reg.EnumKey(hkey, index))
                        except OSError:
                            break
        except (FileNotFoundError, OSError):
            return None, []
        except Exception as e:
            logging.warning(f"Unexpected error reading registry key '{key_path}': {e}")
            return None, []

        if value_count <= 0 and subkey_count <= 0:
            return None, []

        candidate = Candidate(
            path=f"{HIVE_PREFIX}\\{key_path}",
            is_directory=subkey_count > 0,
            size_bytes=value_count * config.REGISTRY_BYTES_PER_VALUE,
            last_modified=_filetime_to_epoch(modified),
            artifact_kind=ArtifactKind.REGISTRY_KEY,
            source_description="registry",
        )
        return candidate, subkeys


def value_count_of(candidate: Candidate) -> int:
    return candidate.size_bytes // config.REGISTRY_BYTES_PER_VALUE
