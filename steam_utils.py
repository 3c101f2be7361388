# steam_utils.py
# -*- coding: utf-8 -*-
"""
Steam detection utilities used by the launcher path generator.

This module provides functions to:
- Find the Steam installation path across Windows, Linux, and macOS
- Parse VDF (Valve Data Format) files
- Discover Steam library folders
- Resolve the app id of a game from its install folder
"""

import logging
import os
import platform
from typing import List, Optional, Tuple

import vdf

# --- Cache Variables ---
# These cache the results of expensive operations to avoid repeated filesystem scans

_steam_install_path = None
_steam_libraries = None


def clear_steam_cache():
    """
    Clear all cached Steam data.

    Call this function when the Steam installation may have changed.
    """
    global _steam_install_path, _steam_libraries
    _steam_install_path = None
    _steam_libraries = None
    logging.info("Steam cache cleared.")


def _parse_vdf(file_path: str) -> Optional[dict]:
    """
    Parse a Valve Data Format (VDF) file such as libraryfolders.vdf or an
    appmanifest_*.acf.

    Returns:
        Parsed dictionary, or None if the file is missing or malformed
    """
    if not os.path.isfile(file_path):
        return None

    def _load(encoding):
        with open(file_path, 'r', encoding=encoding) as f:
            content = f.read()
        # Remove C-style comments if present
        content = '\n'.join(line for line in content.splitlines() if not line.strip().startswith('//'))
        return vdf.loads(content, mapper=dict)

    try:
        return _load('utf-8')
    except UnicodeDecodeError:
        logging.warning(f"Encoding error reading VDF '{os.path.basename(file_path)}'. Trying fallback encoding...")
        try:
            return _load('latin-1')
        except Exception as e_fallback:
            logging.error(f"ERROR parsing VDF '{os.path.basename(file_path)}' (fallback failed): {e_fallback}")
            return None
    except OSError as e:
        logging.debug(f"Cannot read VDF '{file_path}': {e}")
        return None
    except Exception as e:
        logging.error(f"ERROR parsing VDF '{os.path.basename(file_path)}': {e}")
        return None


def get_steam_install_path() -> Optional[str]:
    """
    Find the Steam installation path.

    Searches the registry on Windows (HKCU then HKLM) and the common
    installation folders on Linux and macOS. Results are cached.
    """
    global _steam_install_path

    if _steam_install_path is not None:
        return _steam_install_path

    current_os = platform.system()
    found_path = None

    if current_os == "Windows":
        found_path = _find_steam_windows()
    elif current_os in ("Linux", "Darwin"):
        found_path = _find_steam_unix(current_os)
    else:
        logging.info(f"Steam path detection for OS '{current_os}' is not specifically implemented.")

    if found_path:
        _steam_install_path = found_path
        return _steam_install_path

    logging.debug("Steam installation path could not be determined.")
    return None


def _find_steam_windows() -> Optional[str]:
    """Find Steam installation on Windows via registry."""
    try:
        import winreg
    except ImportError:
        logging.info("winreg module not available (normal for non-Windows).")
        return None

    key_path = r"Software\Valve\Steam"
    potential_hives = [
        (winreg.HKEY_CURRENT_USER, "HKCU"),
        (winreg.HKEY_LOCAL_MACHINE, "HKLM"),
    ]

    for hive, hive_name in potential_hives:
        try:
            with winreg.OpenKey(hive, key_path) as hkey:
                path_value, _ = winreg.QueryValueEx(hkey, "SteamPath")
            norm_path = os.path.normpath(path_value)
            if os.path.isdir(norm_path):
                logging.info(f"Found Steam installation ({hive_name}) via registry: {norm_path}")
                return norm_path
        except (FileNotFoundError, OSError):
            logging.debug(f"SteamPath not found in registry hive: {hive_name}\\{key_path}")
            continue

    logging.debug("Steam installation not found in Windows registry.")
    return None


def _find_steam_unix(current_os: str) -> Optional[str]:
    """Find Steam installation on Linux or macOS."""
    if current_os == "Darwin":
        common_paths = [os.path.expanduser("~/Library/Application Support/Steam")]
    else:
        common_paths = [
            os.path.expanduser("~/.local/share/Steam"),
            os.path.expanduser("~/.steam/steam"),
            os.path.expanduser("~/.steam/root"),
            os.path.expanduser("~/.var/app/com.valvesoftware.Steam/data/Steam"),  # Flatpak
        ]

    for path_to_check in common_paths:
        if not os.path.isdir(path_to_check):
            continue
        has_steamapps = os.path.isdir(os.path.join(path_to_check, "steamapps"))
        has_userdata = os.path.isdir(os.path.join(path_to_check, "userdata"))
        if has_steamapps or has_userdata:
            found_path = os.path.normpath(path_to_check)
            logging.info(f"Found Steam installation at: {found_path}")
            return found_path

    logging.debug(f"Steam installation not found in common {current_os} paths.")
    return None


def find_steam_libraries(steam_path: Optional[str] = None) -> List[str]:
    """
    Find all Steam library folders.

    Reads libraryfolders.vdf (steamapps/ in current clients, config/ in
    older ones) to discover libraries beyond the main installation. Results
    for the auto-detected installation are cached.
    """
    global _steam_libraries

    use_cache = steam_path is None
    if use_cache and _steam_libraries is not None:
        return _steam_libraries

    steam_path = steam_path or get_steam_install_path()
    libs = []
    if not steam_path:
        if use_cache:
            _steam_libraries = []
        return libs

    if os.path.isdir(os.path.join(steam_path, 'steamapps')):
        libs.append(os.path.normpath(steam_path))

    for vdf_path in (os.path.join(steam_path, 'steamapps', 'libraryfolders.vdf'),
                     os.path.join(steam_path, 'config', 'libraryfolders.vdf')):
        data = _parse_vdf(vdf_path)
        if not data:
            continue
        lib_folders_data = data.get('libraryfolders', data)
        if not isinstance(lib_folders_data, dict):
            continue
        for key, value in lib_folders_data.items():
            lib_path_raw = None
            if isinstance(value, dict):
                lib_path_raw = value.get('path')
            elif key.isdigit() and isinstance(value, str):
                lib_path_raw = value  # Old format: "1" "D:\\SteamLibrary"
            if not lib_path_raw:
                continue
            lib_path = os.path.normpath(lib_path_raw.replace('\\\\', '\\'))
            if os.path.isdir(os.path.join(lib_path, 'steamapps')) and lib_path not in libs:
                libs.append(lib_path)

    libs = list(dict.fromkeys(libs))
    logging.debug(f"Found {len(libs)} Steam libraries.")
    if use_cache:
        _steam_libraries = libs
    return libs


def split_steam_install_path(install_path: str) -> Optional[Tuple[str, str]]:
    """"D:/SteamLibrary/steamapps/common/Portal 2" -> ("D:/SteamLibrary", "Portal 2")."""
    if not install_path:
        return None
    parts = os.path.normpath(install_path).replace('\\', '/').split('/')
    lowered = [p.lower() for p in parts]
    for index in range(len(lowered) - 2):
        if lowered[index] == 'steamapps' and lowered[index + 1] == 'common':
            library = '/'.join(parts[:index]) or '/'
            return os.path.normpath(library), parts[index + 2]
    return None


def _appid_in_library(library: str, install_dir: str) -> Optional[str]:
    steamapps_path = os.path.join(library, 'steamapps')
    try:
        manifest_names = sorted(f for f in os.listdir(steamapps_path)
                                if f.startswith('appmanifest_') and f.endswith('.acf'))
    except OSError as e:
        logging.debug(f"Cannot list '{steamapps_path}': {e}")
        return None

    for filename in manifest_names:
        data = _parse_vdf(os.path.join(steamapps_path, filename))
        if not data or 'AppState' not in data:
            continue
        app_state = data['AppState']
        if str(app_state.get('installdir', '')).lower() == install_dir.lower():
            appid = str(app_state.get('appid') or filename[len('appmanifest_'):-len('.acf')])
            logging.info(f"Resolved Steam app id {appid} for '{install_dir}'.")
            return appid
    return None


def find_appid_for_install_dir(install_path: str) -> Optional[str]:
    """
    Resolve a Steam app id from a game's install folder via its appmanifest.

    A folder under <library>/steamapps/common is looked up in that library.
    Any other folder (moved or symlinked installs) is matched by its folder
    name against the manifests of every known Steam library.
    """
    split = split_steam_install_path(install_path)
    if split:
        return _appid_in_library(*split)
    if not install_path:
        return None

    install_dir = os.path.basename(os.path.normpath(install_path))
    for library in find_steam_libraries():
        appid = _appid_in_library(library, install_dir)
        if appid:
            return appid
    return None


def find_steam_userdata_root(install_path: str) -> Optional[str]:
    """The Steam folder holding userdata/ for a game installed under a library."""
    split = split_steam_install_path(install_path)
    if split and os.path.isdir(os.path.join(split[0], "userdata")):
        return split[0]
    steam_path = get_steam_install_path()
    if steam_path and os.path.isdir(os.path.join(steam_path, "userdata")):
        return steam_path
    return None
