"""Tests for string and name similarity."""

import pytest

from hotelmatch.similarity import address_similarity, jaccard, name_similarity, string_similarity


def test_string_similarity_identical():
    assert string_similarity("grand plaza", "grand plaza") == 1.0


def test_string_similarity_both_empty():
    assert string_similarity("", "") == 1.0


def test_string_similarity_one_empty():
    assert string_similarity("abc", "") == 0.0


def test_string_similarity_edit_distance():
    # kitten -> sitting is 3 edits over 7 characters
    assert string_similarity("kitten", "sitting") == pytest.approx(4 / 7)


def test_jaccard():
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
    assert jaccard(set(), set()) == 0.0


def test_name_similarity_equal_after_normalization():
    assert name_similarity("The Ritz", "Ritz Hotel") == 1.0
    assert name_similarity("Grand Plaza Hotel & Suites", "Grand Plaza Hotel") == 1.0


def test_name_similarity_ignores_hyphenated_stop_word():
    assert name_similarity("Grand-Hotel Berlin", "Grand Hotel Berlin") == 1.0


def test_name_similarity_stop_words_only_is_not_a_match():
    assert name_similarity("Hotel", "The Inn") == 0.0


def test_name_similarity_missing_name():
    assert name_similarity("Grand Plaza", "") == 0.0
    assert name_similarity(None, "Grand Plaza") == 0.0


def test_name_similarity_only_stop_words_uses_sequence():
    # "Hotel" normalizes to "" so there are no tokens on one side
    score = name_similarity("Hotel", "Grand Plaza")
    assert score == pytest.approx(string_similarity("", "grand plaza"))


def test_name_similarity_blend():
    score = name_similarity("Grand Plaza", "Grand Plaza Central")
    seq = string_similarity("grand plaza", "grand plaza central")
    expected = 0.6 * seq + 0.4 * (2 / 3)
    assert score == pytest.approx(expected)


def test_name_similarity_symmetric_and_bounded():
    pairs = [
        ("Grand Plaza", "Plaza Grand"),
        ("Savoy London", "The Savoy"),
        ("Ibis Budget", "Mercure Centre"),
    ]
    for a, b in pairs:
        s = name_similarity(a, b)
        assert 0.0 <= s <= 1.0
        assert s == pytest.approx(name_similarity(b, a))


def test_address_similarity():
    assert address_similarity("1 Strand", "1, strand") == 1.0
    assert address_similarity(None, "1 Strand") == 0.0
    assert 0.0 < address_similarity("1 Strand", "10 Strand") < 1.0
