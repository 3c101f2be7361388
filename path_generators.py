"""
path_generators.py
Turns name variants into templated candidate locations.

Each generator covers one family of conventions and knows nothing about the
others; the orchestrator concatenates all of their output. Templates are
over-generated on purpose and deduplicated after expansion.
"""

import os
import re
import logging
from typing import Iterable, List, Optional, Sequence

import config
import steam_utils
from models import PathTemplate, SoftwareRecord
from fuzzy_matcher import normalize_for_match


_TOKEN_RE = re.compile(r'[^a-z0-9]+')


def ordered_variants(variants: Iterable[str]) -> List[str]:
    """Deterministic order for an unordered variant set."""
    return sorted({v for v in variants if v}, key=lambda v: (v.lower(), v))


def fill_name(template: str, name: str) -> str:
    return template.replace("{name}", name)


class PathGenerator:
    """Base class: generate(software, name_variants, publisher_variants) -> templates."""
    name = "base"

    def generate(self, software: SoftwareRecord, name_variants: Iterable[str],
                 publisher_variants: Sequence[str]) -> List[PathTemplate]:
        raise NotImplementedError

    def _template(self, template: str) -> PathTemplate:
        return PathTemplate(template, self.name)


class StandardLocationGenerator(PathGenerator):
    """Roaming / local application data and the user profile (dotfiles)."""
    name = "standard-location"

    APP_DATA_ROOTS = ("%APPDATA%", "%LOCALAPPDATA%")
    LOCAL_LOW_ROOT = "%USERPROFILE%/AppData/LocalLow"

    def generate(self, software, name_variants, publisher_variants):
        templates = []
        publishers = list(publisher_variants)[:config.ROAMING_PUBLISHER_LIMIT]
        for name in ordered_variants(name_variants):
            for root in self.APP_DATA_ROOTS:
                base = f"{root}/{name}"
                templates.append(base)
                templates.extend(f"{base}/{leaf}" for leaf in config.STANDARD_LEAF_SUBFOLDERS)
                # Unreal Engine layout and "<Name>Game" project folders
                templates.append(f"{base}/Saved/SaveGames")
                templates.append(f"{root}/{name}Game/Saved/SaveGames")
                templates.extend(f"{root}/{name}{ext}" for ext in config.NAME_FILE_EXTENSIONS)
            templates.append(f"{self.LOCAL_LOW_ROOT}/{name}")

            for publisher in publishers:
                templates.append(f"%APPDATA%/{publisher}/{name}")
                templates.append(f"%LOCALAPPDATA%/{publisher}/{name}")
                templates.append(f"{self.LOCAL_LOW_ROOT}/{publisher}/{name}")

            templates.extend(self._dotfile_templates(name))
        return [self._template(t) for t in templates]

    @staticmethod
    def _dotfile_templates(name: str) -> List[str]:
        if ' ' in name:
            return []
        lower = name.lower()
        templates = [
            f"%USERPROFILE%/.{lower}",
            f"%USERPROFILE%/.config/{lower}",
            f"%USERPROFILE%/.config/{name}",
        ]
        templates.extend(f"%USERPROFILE%/.{lower}{ext}" for ext in config.DOTFILE_EXTENSIONS)
        return templates


class DocumentsGenerator(PathGenerator):
    """Documents, Documents/My Games and the Saved Games folder."""
    name = "documents"

    ROOTS = ("%DOCUMENTS%",) + tuple(f"%DOCUMENTS%/{sub}" for sub in config.DOCUMENTS_SUBFOLDERS) + ("%SAVEDGAMES%",)

    def generate(self, software, name_variants, publisher_variants):
        templates = []
        publishers = list(publisher_variants)[:config.DOCUMENTS_PUBLISHER_LIMIT]
        for name in ordered_variants(name_variants):
            for root in self.ROOTS:
                templates.append(f"{root}/{name}")
                for publisher in publishers:
                    templates.append(f"{root}/{publisher}/{name}")
        return [self._template(t) for t in templates]


class InstallAdjacentGenerator(PathGenerator):
    """Config folders and files next to the installed program."""
    name = "install-adjacent"

    def generate(self, software, name_variants, publisher_variants):
        install_path = software.install_path
        if not install_path or not os.path.isdir(install_path):
            return []

        install_path = os.path.normpath(install_path)
        templates = [os.path.join(install_path, folder) for folder in config.INSTALL_ADJACENT_FOLDERS]
        for name in ordered_variants(name_variants):
            templates.extend(os.path.join(install_path, f"{name}{ext}") for ext in config.NAME_FILE_EXTENSIONS)

        executable = self.find_main_executable(install_path, name_variants)
        if executable:
            exe_dir, exe_name = os.path.split(executable)
            stem = os.path.splitext(exe_name)[0]
            templates.append(f"{executable}.config")
            templates.extend(os.path.join(exe_dir, f"{stem}{ext}") for ext in config.NAME_FILE_EXTENSIONS)
        return [self._template(t) for t in templates]

    @staticmethod
    def find_main_executable(install_path: str, name_variants: Iterable[str]) -> Optional[str]:
        """Pick the executable whose name matches the program, else the largest one."""
        variant_keys = {normalize_for_match(v) for v in name_variants if v}
        executables = []
        for folder in (install_path, os.path.join(install_path, 'bin')):
            try:
                with os.scandir(folder) as entries:
                    for entry in entries:
                        if entry.is_file() and entry.name.lower().endswith('.exe'):
                            executables.append((entry.path, entry.stat().st_size))
            except OSError:
                continue

        if not executables:
            return None
        for path, _ in executables:
            stem = os.path.splitext(os.path.basename(path))[0]
            if normalize_for_match(stem) in variant_keys:
                return path
        return max(executables, key=lambda item: item[1])[0]


class PublisherLauncherGenerator(PathGenerator):
    """Publisher aliases, distribution platforms and category heuristics."""
    name = "publisher-launcher"

    def generate(self, software, name_variants, publisher_variants):
        names = ordered_variants(name_variants)
        templates = []

        for alias in self.publisher_aliases(software.publisher, publisher_variants):
            for name in names:
                templates.append(f"%APPDATA%/{alias}/{name}")
                templates.append(f"%LOCALAPPDATA%/{alias}/{name}")
                templates.append(f"%DOCUMENTS%/{alias}/{name}")

        for _platform, launcher_template in config.LAUNCHER_TEMPLATES:
            if "{name}" in launcher_template:
                templates.extend(fill_name(launcher_template, name) for name in names)
            else:
                templates.append(launcher_template)

        templates.extend(self._steam_templates(software))

        for category in self.detect_categories(software):
            for category_template in config.CATEGORY_TEMPLATES.get(category, ()):
                templates.extend(fill_name(category_template, name) for name in names)

        return [self._template(t) for t in templates]

    @staticmethod
    def publisher_aliases(publisher: str, publisher_variants: Iterable[str]) -> List[str]:
        keys = {normalize_for_match(p) for p in [publisher, *publisher_variants] if p}
        keys.discard("")
        aliases = []
        for brand, brand_aliases in config.KNOWN_PUBLISHERS.items():
            brand_keys = {normalize_for_match(a) for a in (brand, *brand_aliases)}
            if any(k == b or (len(b) >= 4 and b in k) for k in keys for b in brand_keys):
                for alias in brand_aliases:
                    if alias not in aliases:
                        aliases.append(alias)
        return aliases

    @staticmethod
    def detect_categories(software: SoftwareRecord) -> List[str]:
        text = f"{software.name} {software.category}".lower()
        tokens = {t for t in _TOKEN_RE.split(text) if t}
        detected = []
        for category, keywords in config.CATEGORY_KEYWORDS.items():
            for keyword in keywords:
                if (' ' in keyword and keyword in text) or keyword in tokens:
                    detected.append(category)
                    break
        return detected

    @staticmethod
    def _steam_templates(software: SoftwareRecord) -> List[str]:
        if not software.install_path:
            return []
        appid = steam_utils.find_appid_for_install_dir(software.install_path)
        if not appid:
            return []
        steam_root = steam_utils.find_steam_userdata_root(software.install_path)
        if not steam_root:
            logging.debug(f"Steam app id {appid} resolved but no userdata folder found.")
            return []
        userdata = os.path.join(steam_root, 'userdata')
        return [
            os.path.join(userdata, '*', appid, 'remote'),
            os.path.join(userdata, '*', appid),
        ]


def default_generators() -> List[PathGenerator]:
    return [
        StandardLocationGenerator(),
        DocumentsGenerator(),
        InstallAdjacentGenerator(),
        PublisherLauncherGenerator(),
    ]
