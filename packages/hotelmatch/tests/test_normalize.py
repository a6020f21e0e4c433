"""Tests for hotel name and field normalization."""

import pytest

from hotelmatch.normalize import (
    name_tokens,
    normalize_address,
    normalize_country_code,
    normalize_name,
    normalize_postal_code,
    phone_suffix,
)


def test_stop_words_removed():
    assert normalize_name("The Grand Hotel") == "grand"
    assert normalize_name("Grand Plaza Hotel & Suites") == "grand plaza"


def test_stop_words_joined_by_punctuation_removed():
    assert normalize_name("Grand-Hotel Berlin") == "grand berlin"
    assert normalize_name("The-Savoy") == "savoy"
    assert normalize_name("Ho.tel Savoy") == "savoy"


def test_punctuation_stripped():
    assert normalize_name("Château d'Ouchy!") == "château douchy"


def test_abbreviations_expanded():
    assert normalize_name("Hilton Garden Inn St. Louis") == "hilton garden street louis"
    assert normalize_name("Park Ave Intl") == "park avenue international"


def test_abbreviation_inside_word_untouched():
    assert normalize_name("Stanford Court") == "stanford court"


def test_whitespace_collapsed():
    assert normalize_name("  Grand    Plaza \t London ") == "grand plaza london"


def test_only_stop_words_gives_empty():
    assert normalize_name("Hotel & Suites") == ""
    assert normalize_name("") == ""
    assert normalize_name(None) == ""


@pytest.mark.parametrize("name", [
    "The Grand Hotel",
    "Grand Plaza Hotel & Suites",
    "Hilton Garden Inn St. Louis",
    "Motel 6 - Rd. 66",
    "THE   INN  BY  THE  SEA",
    "Hôtel de l'Europe (Intl.)",
    "ctr_point_ave",
    "Grand-Hotel Berlin",
    "The-Savoy",
    "",
])
def test_normalize_is_idempotent(name):
    once = normalize_name(name)
    assert normalize_name(once) == once


def test_name_tokens():
    assert name_tokens("grand plaza london") == {"grand", "plaza", "london"}
    assert name_tokens("") == set()


def test_normalize_address():
    assert normalize_address("1, The  Strand.") == "1 the strand"
    assert normalize_address(None) == ""


def test_normalize_postal_code():
    assert normalize_postal_code("SW1A 1AA") == "sw1a1aa"
    assert normalize_postal_code(" 75003 ") == "75003"
    assert normalize_postal_code(None) == ""


def test_normalize_country_code():
    assert normalize_country_code(" gb ") == "GB"
    assert normalize_country_code("   ") is None
    assert normalize_country_code(None) is None


def test_phone_suffix():
    assert phone_suffix("+1 (212) 555-0199") == "5550199"
    assert phone_suffix("12345") is None
    assert phone_suffix(None) is None
