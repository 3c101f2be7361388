"""
fuzzy_matcher.py
Approximate folder-name matching used when direct path probing finds nothing.
"""

import re
import logging
from typing import Iterable, List, Optional

from rapidfuzz.distance import Levenshtein

import config


_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+')


def levenshtein_distance(a: Optional[str], b: Optional[str]) -> int:
    """Minimum number of single-character edits turning a into b."""
    return Levenshtein.distance(a or "", b or "")


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """1 - distance / max(len(a), len(b)); two empty strings are identical."""
    a = a or ""
    b = b or ""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def normalize_for_match(name: Optional[str]) -> str:
    """Lower-case and drop everything that isn't a letter or digit."""
    return _NON_ALNUM_RE.sub('', (name or "").lower())


def significant_words(name: Optional[str],
                      min_length: int = config.MIN_SIGNIFICANT_WORD_LENGTH) -> List[str]:
    """Words of a name that carry identity (no boilerplate, not too short)."""
    words = [w for w in _NON_ALNUM_RE.split((name or "").lower()) if w]
    return [w for w in words
            if len(w) >= min_length and w not in config.SIGNIFICANT_WORD_STOP_WORDS]


def name_initials(name: Optional[str], skip_stop_words: bool = False) -> str:
    words = [w for w in _NON_ALNUM_RE.split((name or "").lower()) if w]
    if skip_stop_words:
        words = [w for w in words if w not in config.SIGNIFICANT_WORD_STOP_WORDS]
    return ''.join(w[0] for w in words)


class FuzzyMatcher:
    """Decides whether a directory name plausibly belongs to a program."""

    def __init__(self,
                 similarity_threshold: float = config.FUZZY_SIMILARITY_THRESHOLD,
                 variants_to_compare: int = config.FUZZY_VARIANTS_TO_COMPARE):
        self.similarity_threshold = similarity_threshold
        self.variants_to_compare = variants_to_compare

    def is_match(self, directory_name: str, name_variants: Iterable[str], original_name: str) -> bool:
        dir_lower = (directory_name or "").strip().lower()
        if not dir_lower or not original_name:
            return False
        variants = [v for v in (name_variants or []) if v]

        # 1. Exact (case-insensitive)
        if dir_lower == original_name.strip().lower() or any(dir_lower == v.lower() for v in variants):
            logging.debug(f"Fuzzy: exact match '{directory_name}'")
            return True

        # 2. Significant word containment, both directions
        dir_norm = normalize_for_match(directory_name)
        original_norm = normalize_for_match(original_name)
        for word in significant_words(original_name):
            if word in dir_norm:
                logging.debug(f"Fuzzy: '{directory_name}' contains significant word '{word}'")
                return True
        for word in significant_words(directory_name):
            if word in original_norm:
                logging.debug(f"Fuzzy: '{original_name}' contains folder word '{word}'")
                return True

        # 3. Edit distance against the most descriptive variants
        for variant in self._top_variants(original_name, variants):
            if similarity(dir_lower, variant.lower()) >= self.similarity_threshold:
                logging.debug(f"Fuzzy: '{directory_name}' similar to '{variant}'")
                return True

        # 4. Abbreviation ("gta" for "Grand Theft Auto")
        if len(dir_norm) < len(original_norm) / config.ABBREVIATION_LENGTH_DIVISOR and len(dir_norm) >= 2:
            if dir_norm in (name_initials(original_name), name_initials(original_name, skip_stop_words=True)):
                logging.debug(f"Fuzzy: '{directory_name}' is an abbreviation of '{original_name}'")
                return True

        return False

    def _top_variants(self, original_name: str, variants: List[str]) -> List[str]:
        ordered = [original_name] + sorted(variants, key=lambda v: (-len(v), v.lower()))
        seen = set()
        top = []
        for v in ordered:
            if v.lower() not in seen:
                seen.add(v.lower())
                top.append(v)
            if len(top) >= self.variants_to_compare:
                break
        return top


_default_matcher = FuzzyMatcher()


def is_fuzzy_match(directory_name: str, name_variants: Iterable[str], original_name: str) -> bool:
    return _default_matcher.is_match(directory_name, name_variants, original_name)
