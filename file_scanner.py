"""
file_scanner.py
Bounded enumeration of a concrete folder into settings candidates.

Two strictness levels share the same walk:
- broad: descends into anything that looks relevant (important folder names,
  the program name, account-id folders, numbered save slots);
- precise: applies an exclusion blacklist first and descends only into a
  small whitelist of high-value subfolders.
"""

import os
import re
import time
import logging
from typing import Callable, Iterable, List, Optional, Sequence

import config
from models import ArtifactKind, Candidate
from fuzzy_matcher import FuzzyMatcher, normalize_for_match
from scoring import cleaned_software_name


_TOKEN_RE = re.compile(r'[^a-z0-9]+')
_NUMERIC_ID_RE = re.compile(r'^\d{8,20}$')
_OPAQUE_ID_RE = re.compile(r'^[A-Za-z0-9\-]{8,40}$')
_SHORT_NUMERIC_RE = re.compile(r'^\d{1,7}$')


def _matches_keyword(name_lower: str, keywords: Iterable[str]) -> bool:
    """Whole-token match for short keywords, substring match for longer ones."""
    tokens = [t for t in _TOKEN_RE.split(name_lower) if t]
    for keyword in keywords:
        if keyword in tokens or (len(keyword) >= 5 and keyword in name_lower):
            return True
    return False


def classify_artifact(path: str, is_directory: bool = False) -> ArtifactKind:
    """Map a path to the kind of data it most likely holds."""
    if is_directory:
        return ArtifactKind.USER_DATA
    filename = os.path.basename(path).lower()
    ext = os.path.splitext(filename)[1]
    if ext == '.reg':
        return ArtifactKind.REGISTRY_KEY
    if ext in config.DATABASE_EXTENSIONS:
        return ArtifactKind.DATABASE
    if ext in config.CACHE_EXTENSIONS or _matches_keyword(filename, ("cache",)):
        return ArtifactKind.CACHE
    if ext in config.CONFIG_FILE_EXTENSIONS:
        return ArtifactKind.CONFIGURATION
    if ext in config.SAVE_DATA_EXTENSIONS or not ext:
        return ArtifactKind.USER_DATA
    return ArtifactKind.OTHER


def looks_like_account_id(dir_name: str) -> bool:
    """Steam/Ubisoft/GOG style user or session id folders."""
    if _NUMERIC_ID_RE.match(dir_name):
        return True
    return bool(_OPAQUE_ID_RE.match(dir_name)) and any(ch.isdigit() for ch in dir_name)


def is_save_context(path_or_name: str) -> bool:
    lower = (path_or_name or "").lower()
    return any(keyword in lower for keyword in config.SAVE_CONTEXT_KEYWORDS)


class FilesystemScanner:
    """Walks a folder up to a fixed depth and collects settings files."""

    def __init__(self,
                 precise: bool = False,
                 max_depth: int = config.SCAN_DEFAULT_DEPTH,
                 save_context_depth: int = config.SCAN_SAVE_CONTEXT_DEPTH,
                 result_cap: int = config.SCAN_RESULT_CAP,
                 max_file_size_bytes: int = config.DEFAULT_MAX_FILE_SIZE_MB * 1024 * 1024,
                 files_per_directory: int = config.SCAN_FILES_PER_DIRECTORY,
                 subdirs_per_directory: int = config.SCAN_SUBDIRS_PER_DIRECTORY,
                 subfolder_whitelist: Iterable[str] = config.PRECISE_SUBFOLDER_WHITELIST,
                 cancellation_manager=None):
        self.precise = precise
        self.max_depth = max_depth
        self.save_context_depth = save_context_depth
        self.result_cap = result_cap
        self.max_file_size_bytes = max_file_size_bytes
        self.files_per_directory = files_per_directory
        self.subdirs_per_directory = subdirs_per_directory
        self.subfolder_whitelist = frozenset(s.lower() for s in subfolder_whitelist)
        self.cancellation_manager = cancellation_manager

    def _is_cancelled(self) -> bool:
        return bool(self.cancellation_manager and self.cancellation_manager.check_cancelled())

    # --- Admission tests ---

    def is_excluded(self, path: str) -> bool:
        """Precise-mode blacklist on file name, extension and path fragments."""
        filename = os.path.basename(path).lower()
        if filename in config.PRECISE_EXCLUDED_FILENAMES:
            return True
        if os.path.splitext(filename)[1] in config.PRECISE_EXCLUDED_EXTENSIONS:
            return True
        path_lower = os.path.normpath(path).lower().replace('\\', '/')
        parts = path_lower.split('/')[:-1]
        return any(fragment in part for part in parts for fragment in config.PRECISE_EXCLUDED_PATH_FRAGMENTS)

    def is_settings_file(self, filename: str, parent_dir_name: str = "", software_name_hint: str = "") -> bool:
        lower = filename.lower()
        stem, ext = os.path.splitext(lower)
        if ext in config.CONFIG_FILE_EXTENSIONS or ext in config.SAVE_DATA_EXTENSIONS:
            return True
        if any(keyword in lower for keyword in config.SETTINGS_KEYWORDS):
            return True
        hint = cleaned_software_name(software_name_hint)
        if len(hint) >= 3 and hint in normalize_for_match(filename):
            return True
        # Extensionless or numbered save slots (e.g. Saves/1, Saves/slot)
        if is_save_context(parent_dir_name) and (not ext or stem.isdigit()):
            return True
        return False

    def should_scan_subdirectory(self, dir_name: str, parent_dir_name: str = "", software_name_hint: str = "") -> bool:
        lower = dir_name.lower()
        if _matches_keyword(lower, config.AVOID_FOLDER_KEYWORDS):
            return False
        if self.precise:
            return lower in self.subfolder_whitelist
        if _matches_keyword(lower, config.IMPORTANT_FOLDER_KEYWORDS):
            return True
        hint = cleaned_software_name(software_name_hint)
        dir_norm = normalize_for_match(dir_name)
        if len(hint) >= 3 and len(dir_norm) >= 3 and (hint in dir_norm or dir_norm in hint):
            return True
        if looks_like_account_id(dir_name):
            return True
        if _SHORT_NUMERIC_RE.match(dir_name) and is_save_context(parent_dir_name):
            return True
        return False

    # --- Walk ---

    def depth_for(self, root: str) -> int:
        return self.save_context_depth if is_save_context(root) else self.max_depth

    def scan_directory(self, root: str, software_name_hint: str = "", source_description: str = "") -> List[Candidate]:
        results: List[Candidate] = []
        if not root or not os.path.isdir(root):
            return results

        root = os.path.normpath(root)
        max_depth = self.depth_for(root)
        root_depth = root.rstrip(os.sep).count(os.sep)
        source = source_description or f"scan of {root}"

        def _on_walk_error(error):
            logging.debug(f"Skipping unreadable folder during scan: {error}")

        for dirpath, dirnames, filenames in os.walk(root, topdown=True, onerror=_on_walk_error):
            if self._is_cancelled():
                logging.info(f"Scan of '{root}' cancelled.")
                break
            depth = dirpath.rstrip(os.sep).count(os.sep) - root_depth
            parent_name = os.path.basename(dirpath)
            whitelisted = self.precise and self._below_whitelisted(root, dirpath)

            admitted_here = 0
            for filename in sorted(filenames):
                if len(results) >= self.result_cap or admitted_here >= self.files_per_directory:
                    break
                full_path = os.path.join(dirpath, filename)
                if self.precise and self.is_excluded(full_path):
                    continue
                if not self.is_settings_file(filename, parent_name, software_name_hint):
                    continue
                candidate = self.make_candidate(full_path, source, whitelisted)
                if candidate:
                    results.append(candidate)
                    admitted_here += 1

            if len(results) >= self.result_cap:
                logging.debug(f"Result cap ({self.result_cap}) reached while scanning '{root}'.")
                break

            if depth >= max_depth:
                dirnames[:] = []
            else:
                dirnames[:] = [d for d in sorted(dirnames)
                               if self.should_scan_subdirectory(d, parent_name, software_name_hint)
                               ][:self.subdirs_per_directory]

        return results

    def _below_whitelisted(self, root: str, dirpath: str) -> bool:
        if os.path.basename(root).lower() in self.subfolder_whitelist:
            return True
        rel = os.path.relpath(dirpath, root)
        if rel == os.curdir:
            return False
        return any(part.lower() in self.subfolder_whitelist for part in rel.split(os.sep))

    def make_candidate(self, path: str, source_description: str, via_whitelisted_subfolder: bool = False) -> Optional[Candidate]:
        """Stat a file into a Candidate; oversized or unreadable files are dropped."""
        try:
            stat_result = os.stat(path)
        except OSError as e:
            logging.debug(f"Cannot stat '{path}': {e}")
            return None
        size = stat_result.st_size
        if size > self.max_file_size_bytes:
            logging.debug(f"Skipping oversized file '{path}' ({size} bytes).")
            return None
        if self.precise and size < config.MIN_FILE_SIZE_BYTES:
            return None
        return Candidate(
            path=os.path.normpath(path),
            is_directory=False,
            size_bytes=size,
            last_modified=stat_result.st_mtime,
            artifact_kind=classify_artifact(path),
            source_description=source_description,
            via_whitelisted_subfolder=via_whitelisted_subfolder,
        )

    # --- Fuzzy fallback ---

    def scan_fuzzy_global(self, roots: Sequence[str], name_variants: Iterable[str], original_name: str,
                          matcher: Optional[FuzzyMatcher] = None,
                          progress: Optional[Callable[[str], None]] = None,
                          chunk_pause: float = config.FUZZY_CHUNK_PAUSE_SECONDS) -> List[Candidate]:
        """Look one level below each root for folders whose name fuzzily matches."""
        matcher = matcher or FuzzyMatcher()
        variants = list(name_variants)
        results: List[Candidate] = []
        seen_roots = set()

        for index, root in enumerate(roots, start=1):
            if self._is_cancelled():
                logging.info("Fuzzy scan cancelled.")
                break
            if not root or not os.path.isdir(root):
                continue
            root_key = os.path.normcase(os.path.normpath(root))
            if root_key in seen_roots:
                continue
            seen_roots.add(root_key)

            try:
                with os.scandir(root) as entries:
                    subdirs = sorted(e.name for e in entries if e.is_dir(follow_symlinks=False))
            except OSError as e:
                logging.debug(f"Fuzzy scan: cannot list '{root}': {e}")
                continue

            for start in range(0, len(subdirs), config.FUZZY_CHUNK_SIZE):
                if self._is_cancelled():
                    break
                for dir_name in subdirs[start:start + config.FUZZY_CHUNK_SIZE]:
                    if not matcher.is_match(dir_name, variants, original_name):
                        continue
                    match_path = os.path.join(root, dir_name)
                    logging.info(f"Fuzzy match: '{match_path}'")
                    results.extend(self.scan_directory(match_path, original_name, f"fuzzy match in {root}"))
                # Let a host event loop breathe between chunks
                if chunk_pause > 0:
                    time.sleep(chunk_pause)

            if progress and index % 2 == 0:
                progress(f"Fuzzy scan: {index}/{len(roots)} locations checked, {len(results)} files found")

        return results
