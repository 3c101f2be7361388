import pytest

from name_variations import (
    ROMAN_TO_ARABIC,
    NameVariationGenerator,
    arabic_to_roman_suffix,
    clean_name,
    generate_name_variations,
    publisher_variants,
    roman_to_arabic_suffix,
    strip_legal_suffixes,
    strip_version,
)


def lowered(variants):
    return {v.lower() for v in variants}


@pytest.mark.parametrize("name", ["Visual Studio Code", "Final Fantasy VII", "7-Zip", "Witcher 3"])
def test_original_name_is_kept(name):
    assert name in generate_name_variations(name)


@pytest.mark.parametrize("name", ["", "   ", None])
def test_empty_name_has_no_variants(name):
    assert generate_name_variations(name) == set()


def test_variants_are_case_insensitively_unique_and_longer_than_one_char():
    variants = generate_name_variations("Grand Theft Auto V")
    assert len(lowered(variants)) == len(variants)
    assert all(len(v) > 1 for v in variants)


def test_decorations_and_versions_are_stripped():
    assert "Photoshop" in generate_name_variations("Photoshop™ (x64)")
    assert "App Suite" in generate_name_variations("App Suite 2.1.3")
    assert clean_name("Foo® Bar (Beta)") == "Foo Bar"
    assert strip_version("Tool v2.10") == "Tool"


def test_numeral_suffixes_both_ways():
    assert "final fantasy 7" in lowered(generate_name_variations("Final Fantasy VII"))
    assert "doom ii" in lowered(generate_name_variations("DOOM 2"))


@pytest.mark.parametrize("roman", sorted(ROMAN_TO_ARABIC))
def test_roman_round_trip(roman):
    name = f"Part {roman}"
    assert arabic_to_roman_suffix(roman_to_arabic_suffix(name)) == name


def test_single_word_is_not_treated_as_numeral():
    assert roman_to_arabic_suffix("X") == "X"
    assert arabic_to_roman_suffix("7") == "7"


def test_formatting_variants():
    variants = lowered(generate_name_variations("Visual Studio Code"))
    for expected in ("visualstudiocode", "visual_studio_code", "visual-studio-code",
                     "visual", "code", "visual code"):
        assert expected in variants


def test_stop_words_are_removed():
    assert "rayman legends" in lowered(generate_name_variations("Ubisoft Rayman Legends"))


def test_leading_article_toggles():
    assert "the witcher 3" in lowered(generate_name_variations("Witcher 3"))
    assert "witcher 3" in lowered(generate_name_variations("The Witcher 3"))


def test_abbreviations():
    variants = lowered(generate_name_variations("Grand Theft Auto V"))
    assert "gta" in variants
    assert "gtav" in variants
    assert "ff7" in lowered(generate_name_variations("Final Fantasy VII"))
    assert "vscode" in lowered(generate_name_variations("Visual Studio Code"))


def test_custom_tables():
    generator = NameVariationGenerator(stop_words=("Deluxe",), abbreviations={"super tool": "ST"})
    variants = generator.generate("Super Tool Deluxe")
    assert "Super Tool" in variants
    assert "ST" in variants


@pytest.mark.parametrize("name", ["Final Fantasy VII", "Visual Studio Code"])
def test_repeated_generation_converges(name):
    generator = NameVariationGenerator()
    current = lowered(generator.generate(name))
    for _ in range(10):
        expanded = set(current)
        for variant in current:
            expanded |= lowered(generator.generate(variant))
        if expanded == current:
            break
        current = expanded
    else:
        pytest.fail(f"variants of {name!r} keep growing")


def test_publisher_variants():
    assert strip_legal_suffixes("Microsoft Corporation") == "Microsoft"
    assert strip_legal_suffixes("Discord Inc.") == "Discord"
    assert publisher_variants("Electronic Arts Inc.") == ["Electronic Arts", "Electronic Arts Inc.", "ElectronicArts"]
    assert publisher_variants("") == []
