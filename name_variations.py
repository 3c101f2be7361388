"""
name_variations.py
Generates the spellings under which a program may appear on disk.

A display name such as "Final Fantasy VII (x64)" is rarely the folder name a
vendor picks; this module derives cleaned, reformatted and abbreviated
variants ("Final Fantasy 7", "FinalFantasyVII", "FF7", ...) that the path
generators turn into candidate locations.
"""

import re
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

import config


# Roman <-> arabic numerals for title suffixes
ROMAN_TO_ARABIC = {
    'I': '1', 'II': '2', 'III': '3', 'IV': '4', 'V': '5',
    'VI': '6', 'VII': '7', 'VIII': '8', 'IX': '9', 'X': '10',
}
ARABIC_TO_ROMAN = {v: k for k, v in ROMAN_TO_ARABIC.items()}

_PARENTHESES_RE = re.compile(r'\s*\([^)]*\)')
_TRAILING_VERSION_RE = re.compile(r'\s+v?\d+(\.\d+)*$', re.IGNORECASE)
_WORD_SPLIT_RE = re.compile(r'[\s_\-]+')


def roman_to_arabic_suffix(name: str) -> str:
    """"Part III" -> "Part 3". Names without a roman suffix are returned as-is."""
    words = name.split()
    if len(words) > 1 and words[-1].upper() in ROMAN_TO_ARABIC:
        words[-1] = ROMAN_TO_ARABIC[words[-1].upper()]
        return ' '.join(words)
    return name


def arabic_to_roman_suffix(name: str) -> str:
    """"Part 3" -> "Part III". Names without an arabic suffix are returned as-is."""
    words = name.split()
    if len(words) > 1 and words[-1] in ARABIC_TO_ROMAN:
        words[-1] = ARABIC_TO_ROMAN[words[-1]]
        return ' '.join(words)
    return name


def get_numeral_variants(name: str) -> List[str]:
    """Return the name plus its roman/arabic suffix counterpart.

    Example: "DOOM II" -> ["DOOM II", "DOOM 2"]
    """
    if not name:
        return []
    variants = [name]
    for converted in (roman_to_arabic_suffix(name), arabic_to_roman_suffix(name)):
        if converted != name:
            variants.append(converted)
    return variants


def clean_name(name: str) -> str:
    """Strip parenthetical suffixes and decorative symbols."""
    if not name:
        return ""
    cleaned = _PARENTHESES_RE.sub('', name)
    cleaned = ''.join(ch for ch in cleaned if ch not in config.DECORATIVE_SYMBOLS)
    return ' '.join(cleaned.split())


def strip_version(name: str) -> str:
    """"App 2.1.3" -> "App"."""
    if not name:
        return ""
    return _TRAILING_VERSION_RE.sub('', name).strip()


def split_words(name: str) -> List[str]:
    return [w for w in _WORD_SPLIT_RE.split(name or "") if w]


def initials(name: str, keep_digits: bool = False) -> str:
    """First letter of each word; with keep_digits numeric words are kept whole."""
    parts = []
    for word in split_words(name):
        if keep_digits and word.isdigit():
            parts.append(word)
        elif word[0].isalnum():
            parts.append(word[0])
    return ''.join(parts)


class _VariantSet:
    """Insertion-ordered, case-insensitive string set."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def add(self, value: Optional[str]) -> bool:
        if not value:
            return False
        value = value.strip()
        key = value.lower()
        if not value or key in self._items:
            return False
        self._items[key] = value
        return True

    def update(self, values: Iterable[str]):
        for value in values:
            self.add(value)

    def snapshot(self) -> List[str]:
        return list(self._items.values())


class NameVariationGenerator:
    """Produces case-insensitive, deduplicated spelling variants of a name."""

    def __init__(self,
                 stop_words: Sequence[str] = config.NAME_STOP_WORDS,
                 abbreviations: Mapping[str, str] = config.COMMON_ABBREVIATIONS):
        self.stop_words = tuple(stop_words)
        self.abbreviations = dict(abbreviations)

    def generate(self, name: Optional[str]) -> Set[str]:
        if not name or not name.strip():
            return set()

        try:
            return self._generate(name.strip())
        except Exception as e:
            # Malformed input degrades to the bare name, never to an exception.
            logging.error(f"Name variation failed for '{name}': {e}", exc_info=True)
            return {name.strip()} if len(name.strip()) > 1 else set()

    def _generate(self, original: str) -> Set[str]:
        working = _VariantSet()
        working.add(original)

        cleaned = clean_name(original)
        working.add(cleaned)
        working.add(strip_version(cleaned))

        for base in working.snapshot():
            working.update(get_numeral_variants(base))

        for base in working.snapshot():
            working.update(self._remove_stop_words(base))

        for base in working.snapshot():
            working.update(self._format_variants(base))
            working.update(self._article_variants(base))

        for base in working.snapshot():
            working.update(self._abbreviations(base))

        result = {v for v in working.snapshot() if len(v) > 1}
        logging.debug(f"Generated {len(result)} name variations for '{original}'")
        return result

    def _remove_stop_words(self, name: str) -> List[str]:
        words = name.split()
        results = []
        for stop_word in self.stop_words:
            remaining = [w for w in words if w.lower() != stop_word.lower()]
            if remaining and len(remaining) < len(words):
                results.append(' '.join(remaining))
        return results

    @staticmethod
    def _format_variants(name: str) -> List[str]:
        words = name.split()
        results = [name.lower(), name.upper()]
        if len(words) > 1:
            results.extend([
                ''.join(words),
                '_'.join(words),
                '-'.join(words),
            ])
            if len(words[0]) > 2:
                results.append(words[0])
            if len(words[-1]) > 2:
                results.append(words[-1])
        if len(words) > 2:
            results.append(f"{words[0]} {words[-1]}")
        return results

    @staticmethod
    def _article_variants(name: str) -> List[str]:
        lower = name.lower()
        if lower.startswith("the "):
            return [name[4:].strip()]
        if not lower.startswith("the") and len(name) > 3:
            return [f"The {name}"]
        return []

    def _abbreviations(self, name: str) -> List[str]:
        results = []
        words = split_words(name)

        if len(words) >= 2:
            abbrev = initials(name)
            if 2 <= len(abbrev) <= 6:
                results.extend([abbrev.upper(), abbrev.lower()])
            with_digits = initials(name, keep_digits=True)
            if with_digits != abbrev and 2 <= len(with_digits) <= 8:
                results.append(with_digits.upper())

        lower = name.lower()
        for phrase, short in self.abbreviations.items():
            if phrase in lower:
                results.append(short)
                remainder = lower.replace(phrase, '', 1).strip()
                if remainder:
                    # Keep the original casing of the remainder
                    start = lower.index(phrase)
                    rest = ' '.join((name[:start] + ' ' + name[start + len(phrase):]).split())
                    results.append(f"{short} {rest}")
                    results.append(f"{short}{rest.replace(' ', '')}")

        digits = ''.join(ch for ch in name if ch.isdigit())
        letters = [ch for ch in name if ch.isalpha()]
        if digits and len(letters) >= 2:
            results.append(f"{letters[0]}{digits}{letters[-1]}".upper())

        return results


def strip_legal_suffixes(publisher: str) -> str:
    """"Microsoft Corporation" -> "Microsoft", "Discord Inc." -> "Discord"."""
    words = clean_name(publisher).replace(',', ' ').split()
    suffixes = {s.lower().rstrip('.') for s in config.PUBLISHER_LEGAL_SUFFIXES}
    while len(words) > 1 and words[-1].lower().rstrip('.') in suffixes:
        words.pop()
    return ' '.join(words)


def publisher_variants(publisher: Optional[str], limit: int = config.ROAMING_PUBLISHER_LIMIT) -> List[str]:
    """Folder spellings of a publisher, most likely first."""
    if not publisher or not publisher.strip():
        return []
    original = publisher.strip()
    base = strip_legal_suffixes(original)
    working = _VariantSet()
    working.update([base, original, base.replace(' ', '')])
    return [v for v in working.snapshot() if len(v) > 1][:limit]


_default_generator = NameVariationGenerator()


def generate_name_variations(name: Optional[str]) -> Set[str]:
    """Module-level shortcut using the default tables."""
    return _default_generator.generate(name)
