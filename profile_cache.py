"""
profile_cache.py
Known configuration locations per program: predefined profiles shipped with
the app plus profiles learned from earlier discovery runs.

The learned profiles are persisted as JSON in the app data folder:

    {"__metadata__": {"version": 1, "saved_at": "..."}, "profiles": [...]}

A missing or corrupt file is an empty cache. Writes overwrite the whole file.
"""

import os
import re
import json
import fnmatch
import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

import config
from models import Profile, ProfilePath
from fuzzy_matcher import significant_words
from name_variations import clean_name


CACHE_FORMAT_VERSION = 1

_TRAILING_VERSION_RE = re.compile(r'\s+v?\d+(\.\d+)*$', re.IGNORECASE)


def normalize_profile_name(name: Optional[str]) -> str:
    """"7-Zip 23.01 (x64) Setup" -> "7-zip"."""
    if not name:
        return ""
    cleaned = clean_name(name)
    changed = True
    while changed and cleaned:
        changed = False
        for suffix in config.INSTALLER_NAME_SUFFIXES:
            if cleaned.lower().endswith(' ' + suffix.lower()):
                cleaned = cleaned[:-len(suffix) - 1].strip()
                changed = True
        stripped = _TRAILING_VERSION_RE.sub('', cleaned).strip()
        if stripped and stripped != cleaned:
            cleaned = stripped
            changed = True
    return ' '.join(cleaned.lower().split())


def _contains_words(haystack: str, needle: str) -> bool:
    """Whole-word containment ("git" is in "git lfs" but not in "github")."""
    return re.search(r"(?<![a-z0-9])" + re.escape(needle) + r"(?![a-z0-9])", haystack) is not None


def match_score(profile: Profile, name: str, publisher: str = "") -> int:
    """How well a (name, publisher) query fits a profile; >= 50 qualifies."""
    query = normalize_profile_name(name)
    if not query:
        return 0
    profile_name = normalize_profile_name(profile.name)
    alternates = [normalize_profile_name(a) for a in profile.alternate_names]
    score = 0

    if query == profile_name:
        score += config.PROFILE_SCORE_EXACT_NAME
    elif query in alternates:
        score += config.PROFILE_SCORE_ALTERNATE_NAME
    elif len(profile_name) >= 3 and _contains_words(query, profile_name):
        score += config.PROFILE_SCORE_QUERY_CONTAINS_NAME
    elif len(query) >= 3 and _contains_words(profile_name, query):
        score += config.PROFILE_SCORE_NAME_CONTAINS_QUERY

    if publisher and profile.publisher:
        pub_query = normalize_profile_name(publisher)
        pub_profile = normalize_profile_name(profile.publisher)
        if pub_query and pub_profile and (pub_profile in pub_query or pub_query in pub_profile):
            score += config.PROFILE_SCORE_PUBLISHER

    keyword_bonus = 0
    query_words = set(re.split(r'[^a-z0-9+]+', query))
    for keyword in profile.keywords:
        if keyword.lower() in query_words:
            keyword_bonus += config.PROFILE_SCORE_KEYWORD
    score += min(keyword_bonus, config.PROFILE_KEYWORD_BONUS_CAP)

    if query in config.GENERIC_SOFTWARE_WORDS:
        score += config.PROFILE_GENERIC_NAME_PENALTY

    return max(0, score)


def matches_exclude_pattern(path: str, pattern: str) -> bool:
    """Directory pattern ("logs/"), wildcard ("*.log") or plain substring."""
    if not pattern:
        return False
    normalized = path.replace('\\', '/').lower()
    pattern_lower = pattern.replace('\\', '/').lower()
    if pattern_lower.endswith('/'):
        folder = pattern_lower.rstrip('/')
        return folder in normalized.split('/')[:-1]
    if '*' in pattern_lower or '?' in pattern_lower:
        return (fnmatch.fnmatch(os.path.basename(normalized), pattern_lower)
                or fnmatch.fnmatch(normalized, pattern_lower))
    return pattern_lower in normalized


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    return any(matches_exclude_pattern(path, p) for p in patterns)


def _path(path, description="", required=False, is_directory=False, priority=1):
    return ProfilePath(path=path, description=description, required=required,
                       is_directory=is_directory, priority=priority)


def predefined_profiles() -> List[Profile]:
    """Profiles for widely used programs whose settings locations are well known."""
    return [
        Profile(
            name="Visual Studio Code",
            publisher="Microsoft Corporation",
            alternate_names=["VSCode", "VS Code", "Code", "Microsoft Visual Studio Code"],
            keywords=["vscode", "code", "editor"],
            config_paths=[
                _path("%APPDATA%/Code/User/settings.json", "User settings", required=True, priority=1),
                _path("%APPDATA%/Code/User/keybindings.json", "Key bindings", priority=2),
                _path("%APPDATA%/Code/User/snippets", "User snippets", is_directory=True, priority=3),
                _path("%USERPROFILE%/.vscode/argv.json", "Runtime arguments", priority=4),
            ],
            exclude_patterns=["logs/", "CachedData/", "Cache/", "workspaceStorage/", "globalStorage/", "*.log"],
            priority=10,
            predefined=True,
        ),
        Profile(
            name="Google Chrome",
            publisher="Google LLC",
            alternate_names=["Chrome", "Google Chrome Browser"],
            keywords=["chrome", "browser"],
            config_paths=[
                _path("%LOCALAPPDATA%/Google/Chrome/User Data/Default/Preferences", "Profile preferences", required=True, priority=1),
                _path("%LOCALAPPDATA%/Google/Chrome/User Data/Default/Bookmarks", "Bookmarks", priority=2),
                _path("%LOCALAPPDATA%/Google/Chrome/User Data/Local State", "Browser state", priority=3),
            ],
            exclude_patterns=["Cache/", "Code Cache/", "GPUCache/", "Service Worker/", "*.log", "*.tmp"],
            priority=10,
            predefined=True,
        ),
        Profile(
            name="Mozilla Firefox",
            publisher="Mozilla",
            alternate_names=["Firefox", "Firefox Browser"],
            keywords=["firefox", "browser"],
            config_paths=[
                _path("%APPDATA%/Mozilla/Firefox/profiles.ini", "Profile index", required=True, priority=1),
                _path("%APPDATA%/Mozilla/Firefox/installs.ini", "Install index", priority=2),
                _path("%APPDATA%/Mozilla/Firefox/Profiles", "Profiles", is_directory=True, priority=3),
            ],
            exclude_patterns=["cache2/", "crashes/", "minidumps/", "storage/", "*.sqlite-wal", "*.log"],
            priority=10,
            predefined=True,
        ),
        Profile(
            name="Steam",
            publisher="Valve Corporation",
            alternate_names=["Steam Client"],
            keywords=["steam"],
            config_paths=[
                _path("%PROGRAMFILES(X86)%/Steam/config/config.vdf", "Client configuration", required=True, priority=1),
                _path("%PROGRAMFILES(X86)%/Steam/config/loginusers.vdf", "Known accounts", priority=2),
            ],
            exclude_patterns=["logs/", "appcache/", "dumps/", "*.log"],
            priority=8,
            predefined=True,
        ),
        Profile(
            name="Git",
            publisher="The Git Development Community",
            alternate_names=["Git for Windows"],
            keywords=["git", "scm"],
            config_paths=[
                _path("%USERPROFILE%/.gitconfig", "Global configuration", required=True, priority=1),
                _path("%USERPROFILE%/.gitignore_global", "Global ignore rules", priority=2),
                _path("%USERPROFILE%/.ssh", "SSH keys and config", is_directory=True, priority=3),
            ],
            exclude_patterns=["*.log"],
            priority=5,
            predefined=True,
        ),
        Profile(
            name="Discord",
            publisher="Discord Inc.",
            alternate_names=["Discord App"],
            keywords=["discord", "chat"],
            config_paths=[
                _path("%APPDATA%/discord/settings.json", "Client settings", required=True, priority=1),
            ],
            exclude_patterns=["Cache/", "Code Cache/", "GPUCache/", "logs/", "*.log"],
            priority=5,
            predefined=True,
        ),
        Profile(
            name="7-Zip",
            publisher="Igor Pavlov",
            alternate_names=["7zip", "7 Zip"],
            keywords=["7zip", "archiver"],
            config_paths=[
                _path("HKCU\\Software\\7-Zip", "Settings stored in the registry", required=True, priority=1),
            ],
            exclude_patterns=[],
            priority=5,
            predefined=True,
        ),
        Profile(
            name="Notepad++",
            publisher="Notepad++ Team",
            alternate_names=["Notepad Plus Plus", "NotepadPlusPlus"],
            keywords=["notepad++", "editor"],
            config_paths=[
                _path("%APPDATA%/Notepad++/config.xml", "Main configuration", required=True, priority=1),
                _path("%APPDATA%/Notepad++/shortcuts.xml", "Shortcuts", priority=2),
                _path("%APPDATA%/Notepad++/stylers.xml", "Styles", priority=3),
            ],
            exclude_patterns=["backup/", "*.bak"],
            priority=5,
            predefined=True,
        ),
        Profile(
            name="OBS Studio",
            publisher="OBS Project",
            alternate_names=["OBS", "Open Broadcaster Software"],
            keywords=["obs", "streaming"],
            config_paths=[
                _path("%APPDATA%/obs-studio/global.ini", "Global settings", required=True, priority=1),
                _path("%APPDATA%/obs-studio/basic/profiles", "Output profiles", is_directory=True, priority=2),
                _path("%APPDATA%/obs-studio/basic/scenes", "Scene collections", is_directory=True, priority=3),
            ],
            exclude_patterns=["logs/", "crashes/", "updates/", "*.log"],
            priority=5,
            predefined=True,
        ),
    ]


def build_discovered_profile(name: str, publisher: str, candidates) -> Optional[Profile]:
    """Turn the ranked result of a discovery run into a reusable profile."""
    paths = [
        _path(c.path,
              f"{c.artifact_kind.value} (score {c.score})",
              required=index == 0,
              is_directory=c.is_directory,
              priority=index + 1)
        for index, c in enumerate(candidates)
    ]
    if not paths or not normalize_profile_name(name):
        return None
    return Profile(
        name=name,
        publisher=publisher or "",
        keywords=significant_words(name),
        config_paths=paths,
        exclude_patterns=list(config.DEFAULT_EXCLUDE_PATTERNS),
        priority=0,
        predefined=False,
        notes="Auto-discovered",
        created_at=datetime.now().isoformat(),
    )


class ProfileCache:
    """Predefined plus learned profiles, lazily loaded, safe for concurrent use."""

    def __init__(self, cache_file: Optional[str] = None,
                 predefined: Optional[List[Profile]] = None):
        self.cache_file = cache_file or os.path.join(config.get_app_data_folder(), config.PROFILE_CACHE_FILENAME)
        self._predefined = list(predefined) if predefined is not None else predefined_profiles()
        self._discovered: Dict[str, Profile] = {}
        self._loaded = False
        self._lock = threading.Lock()

    # --- Persistence ---

    def _ensure_loaded(self):
        if not self._loaded:
            self._discovered = self._read_file()
            self._loaded = True

    def _read_file(self) -> Dict[str, Profile]:
        if not os.path.exists(self.cache_file):
            return {}
        try:
            with open(self.cache_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logging.warning(f"Profile cache '{self.cache_file}' is corrupt or empty. It will be overwritten on next save.")
            return {}
        except OSError as e:
            logging.error(f"Unable to read profile cache '{self.cache_file}': {e}")
            return {}

        if not isinstance(data, dict) or not isinstance(data.get("profiles"), list):
            logging.warning(f"Profile cache '{self.cache_file}' has an unexpected layout. Treating as empty.")
            return {}

        loaded = {}
        for entry in data["profiles"]:
            if not isinstance(entry, dict):
                logging.warning("Skipping malformed profile entry in cache.")
                continue
            try:
                profile = Profile.from_dict(entry)
            except (TypeError, ValueError) as e:
                logging.warning(f"Skipping invalid cached profile: {e}")
                continue
            key = normalize_profile_name(profile.name)
            if key and profile.config_paths:
                loaded[key] = profile
        logging.info(f"Loaded {len(loaded)} cached profiles from '{self.cache_file}'.")
        return loaded

    def _write_file(self) -> bool:
        data_to_save = {
            "__metadata__": {
                "version": CACHE_FORMAT_VERSION,
                "saved_at": datetime.now().isoformat(),
            },
            "profiles": [p.to_dict() for p in self._discovered.values()],
        }
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.cache_file)), exist_ok=True)
            with open(self.cache_file, 'w', encoding='utf-8') as f:
                json.dump(data_to_save, f, indent=4, ensure_ascii=False)
            logging.info(f"Saved {len(self._discovered)} profiles in '{self.cache_file}'.")
            return True
        except (OSError, TypeError) as e:
            logging.error(f"Error saving profiles in '{self.cache_file}': {e}")
            return False

    # --- Queries ---

    @property
    def profiles(self) -> List[Profile]:
        with self._lock:
            self._ensure_loaded()
            return self._predefined + list(self._discovered.values())

    def find_profile(self, name: str, publisher: str = "") -> Optional[Profile]:
        best: Optional[Tuple[int, int, Profile]] = None
        for profile in self.profiles:
            score = match_score(profile, name, publisher)
            if score < config.PROFILE_MATCH_THRESHOLD:
                continue
            if best is None or (score, profile.priority) > (best[0], best[1]):
                best = (score, profile.priority, profile)
        if best:
            logging.debug(f"Profile '{best[2].name}' matched '{name}' (score {best[0]}).")
            return best[2]
        return None

    # --- Updates ---

    def add_profile(self, profile: Profile) -> bool:
        """Store a learned profile (replacing any with the same name) and persist."""
        if not profile.config_paths:
            return False
        key = normalize_profile_name(profile.name)
        if not key:
            return False
        with self._lock:
            self._ensure_loaded()
            self._discovered[key] = profile
            return self._write_file()

    def clear(self) -> bool:
        """Forget learned profiles; predefined ones stay."""
        with self._lock:
            self._discovered = {}
            self._loaded = True
            return self._write_file()
