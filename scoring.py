"""
scoring.py
Confidence scoring for discovered settings candidates.

The score is a plain sum of independent signals; no state is kept between
calls, so the same engine can be shared by concurrent discovery runs.
"""

import os
import re
import logging
from typing import Optional

from thefuzz import fuzz

import config
from fuzzy_matcher import normalize_for_match
from name_variations import clean_name, strip_version


_TOKEN_RE = re.compile(r'[^a-z0-9]+')

NAME_IN_FILENAME_RATIO = 90


def cleaned_software_name(software_name: Optional[str]) -> str:
    """"Visual Studio Code (User) 1.85" -> "visualstudiocode"."""
    return normalize_for_match(strip_version(clean_name(software_name or "")))


class ScoringEngine:
    """Assigns an integer confidence to file and registry candidates."""

    def __init__(self, min_score: int = config.MIN_SCORE_BROAD):
        self.min_score = min_score

    def is_admitted(self, score: int) -> bool:
        return score >= self.min_score

    def score(self, candidate_path: str, software_name: str,
              size_bytes: Optional[int] = None,
              in_whitelisted_subfolder: bool = False) -> int:
        filename = os.path.basename(os.path.normpath(candidate_path)).lower()
        stem, ext = os.path.splitext(filename)
        tokens = [t for t in _TOKEN_RE.split(filename) if t]
        total = 0

        if filename in config.HIGH_VALUE_FILENAMES:
            total += config.SCORE_HIGH_VALUE_FILENAME
        if ext in config.CONFIG_FILE_EXTENSIONS:
            total += config.SCORE_CONFIG_EXTENSION
        if any(keyword in stem for keyword in config.SETTINGS_KEYWORDS):
            total += config.SCORE_SETTINGS_KEYWORD
        if self._contains_software_name(stem, software_name):
            total += config.SCORE_NAME_IN_FILENAME

        if ext in config.NOISE_EXTENSIONS:
            total += config.SCORE_NOISE_EXTENSION
        if self._has_exclusion_keyword(tokens):
            total += config.SCORE_EXCLUSION_KEYWORD

        if size_bytes is None:
            size_bytes = self._safe_size(candidate_path)
        if size_bytes is not None:
            if size_bytes > config.OVERSIZED_BYTES:
                total += config.SCORE_OVERSIZED
            elif config.MIN_FILE_SIZE_BYTES <= size_bytes <= config.REASONABLE_SIZE_MAX_BYTES:
                total += config.SCORE_REASONABLE_SIZE

        if in_whitelisted_subfolder:
            total += config.SCORE_WHITELISTED_SUBFOLDER

        return total

    def score_registry_key(self, key_path: str, software_name: str, value_count: int) -> int:
        """Registry keys carry no filename signals; score by content and name."""
        total = config.SCORE_REGISTRY_KEY_BASE
        total += min(config.SCORE_REGISTRY_VALUE_BONUS_CAP, max(0, value_count) * config.SCORE_REGISTRY_PER_VALUE)
        leaf = key_path.replace('/', '\\').rstrip('\\').split('\\')[-1]
        if self._contains_software_name(leaf.lower(), software_name):
            total += config.SCORE_NAME_IN_FILENAME
        return total

    @staticmethod
    def _contains_software_name(stem: str, software_name: str) -> bool:
        name_norm = cleaned_software_name(software_name)
        stem_norm = normalize_for_match(stem)
        if len(name_norm) < 3 or len(stem_norm) < len(name_norm):
            return False
        if name_norm in stem_norm:
            return True
        return fuzz.partial_ratio(name_norm, stem_norm) >= NAME_IN_FILENAME_RATIO

    @staticmethod
    def _has_exclusion_keyword(tokens) -> bool:
        for token in tokens:
            for keyword in config.EXCLUSION_KEYWORDS:
                if token == keyword or (len(keyword) >= 5 and keyword in token):
                    return True
        return False

    @staticmethod
    def _safe_size(path: str) -> Optional[int]:
        try:
            return os.path.getsize(path)
        except OSError as e:
            logging.debug(f"Could not stat '{path}' for scoring: {e}")
            return None
