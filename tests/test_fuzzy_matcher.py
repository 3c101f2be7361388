import pytest

from fuzzy_matcher import (
    FuzzyMatcher,
    is_fuzzy_match,
    levenshtein_distance,
    name_initials,
    significant_words,
    similarity,
)
from name_variations import generate_name_variations


VSCODE = "Visual Studio Code"


def test_vscode_folder_matches():
    assert is_fuzzy_match("vscode", generate_name_variations(VSCODE), VSCODE)


def test_unrelated_folder_does_not_match():
    assert not is_fuzzy_match("totally-unrelated", generate_name_variations(VSCODE), VSCODE)


def test_significant_word_containment():
    assert is_fuzzy_match("witcher3data", [], "The Witcher 3")


def test_edit_distance_match():
    assert FuzzyMatcher().is_match("Skyrm", [], "Skyrim")


def test_abbreviation_match():
    assert FuzzyMatcher().is_match("gta", [], "Grand Theft Auto")
    assert not FuzzyMatcher().is_match("xyz", [], "Grand Theft Auto")


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3


@pytest.mark.parametrize("a, b", [("code", "vscode"), ("steam", "stream"), ("", "abc"), ("abc", "abc")])
def test_similarity_is_symmetric(a, b):
    assert similarity(a, b) == similarity(b, a)


@pytest.mark.parametrize("value", ["", "a", "Visual Studio Code"])
def test_similarity_to_itself_is_one(value):
    assert similarity(value, value) == 1.0


def test_similarity_to_empty():
    assert similarity("", "abc") == 0.0


def test_significant_words_and_initials():
    assert significant_words("The Elder Scrolls Online Game Edition") == ["elder", "scrolls", "online"]
    assert name_initials("The Elder Scrolls") == "tes"
    assert name_initials("The Elder Scrolls", skip_stop_words=True) == "es"
