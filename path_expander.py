"""
path_expander.py
Resolves %TOKEN% placeholders and a single '*' directory level in path templates.
"""

import os
import re
import logging
import platform
from typing import Dict, List, Mapping, Optional

import config


TOKEN_RE = re.compile(r'%([A-Za-z0-9_()]+)%')
WILDCARD = '*'


def default_token_table() -> Dict[str, str]:
    """Map template tokens to real folders for the current platform.

    On Windows the environment provides every token. Elsewhere the Windows
    names are mapped onto their XDG / macOS counterparts so the same templates
    stay meaningful (e.g. Wine prefixes, cross-platform apps).
    """
    home = os.path.expanduser('~')
    system = platform.system()
    table: Dict[str, str] = {}

    if system == "Windows":
        table["USERPROFILE"] = os.getenv('USERPROFILE', home)
        for token in ("APPDATA", "LOCALAPPDATA", "PROGRAMFILES", "PROGRAMDATA"):
            value = os.getenv(token)
            if value:
                table[token] = value
        program_files_x86 = os.getenv('PROGRAMFILES(X86)') or os.getenv('ProgramFiles(x86)')
        if program_files_x86:
            table["PROGRAMFILES(X86)"] = program_files_x86
    else:
        table["USERPROFILE"] = home
        if system == "Darwin":
            app_support = os.path.join(home, 'Library', 'Application Support')
            table["APPDATA"] = app_support
            table["LOCALAPPDATA"] = app_support
            table["PROGRAMFILES"] = "/Applications"
        else:
            table["APPDATA"] = os.getenv('XDG_CONFIG_HOME', os.path.join(home, '.config'))
            table["LOCALAPPDATA"] = os.getenv('XDG_DATA_HOME', os.path.join(home, '.local', 'share'))
            table["PROGRAMFILES"] = "/opt"
        table["PROGRAMFILES(X86)"] = table["PROGRAMFILES"]
        # Explicit overrides (e.g. a Wine session exporting Windows variables)
        for token in ("APPDATA", "LOCALAPPDATA"):
            value = os.getenv(token)
            if value:
                table[token] = value

    table["DOCUMENTS"] = os.path.join(table["USERPROFILE"], 'Documents')
    table["SAVEDGAMES"] = os.path.join(table["USERPROFILE"], 'Saved Games')
    return table


class PathExpander:
    """Turns PathTemplate strings into concrete filesystem paths."""

    def __init__(self, token_table: Optional[Mapping[str, str]] = None,
                 wildcard_limit: int = config.WILDCARD_EXPANSION_LIMIT):
        table = default_token_table() if token_table is None else token_table
        self.token_table = {k.upper(): v for k, v in table.items() if v}
        self.wildcard_limit = wildcard_limit

    def substitute_tokens(self, template: str) -> str:
        """Replace known tokens; unknown tokens are left in place."""
        def _replace(match):
            value = self.token_table.get(match.group(1).upper())
            return value if value is not None else match.group(0)
        return TOKEN_RE.sub(_replace, template)

    @staticmethod
    def is_resolved(path: str) -> bool:
        return not TOKEN_RE.search(path) and WILDCARD not in path

    def expand(self, template: str) -> str:
        """Resolve a template to a single path.

        Templates without tokens or wildcard are returned unchanged. A wildcard
        template yields the first usable child of the pre-wildcard prefix, or
        the token-substituted literal when the prefix can't be listed.
        """
        paths = self.expand_all(template)
        return paths[0] if paths else template

    def expand_all(self, template: str) -> List[str]:
        """Resolve a template to up to `wildcard_limit` concrete paths.

        Existing paths come first; when none exists the first constructed
        path (or the degraded literal) is returned alone.
        """
        if not template:
            return []
        if not TOKEN_RE.search(template) and WILDCARD not in template:
            return [template]

        substituted = self.substitute_tokens(template)
        if WILDCARD not in substituted:
            return [os.path.normpath(substituted)]

        degraded = os.path.normpath(substituted)
        prefix, _, suffix = substituted.partition(WILDCARD)
        prefix = prefix.rstrip('/\\')
        suffix = suffix.lstrip('/\\')
        if WILDCARD in suffix or TOKEN_RE.search(prefix):
            logging.debug(f"Template '{template}' can't be expanded (unresolved token or extra wildcard).")
            return [degraded]

        children = self._list_subdirectories(prefix)
        if not children:
            return [degraded]

        constructed = [os.path.normpath(os.path.join(prefix, child, suffix)) if suffix
                       else os.path.normpath(os.path.join(prefix, child))
                       for child in children]
        existing = [p for p in constructed if os.path.exists(p)]
        return existing if existing else constructed[:1]

    def _list_subdirectories(self, prefix: str) -> List[str]:
        if not prefix:
            return []
        try:
            with os.scandir(prefix) as entries:
                names = sorted(e.name for e in entries if e.is_dir(follow_symlinks=False))
        except OSError as e:
            logging.debug(f"Wildcard prefix '{prefix}' not listable: {e}")
            return []
        return names[:self.wildcard_limit]
