"""Text similarity primitives built on Levenshtein edit distance."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from hotelmatch.normalize import name_tokens, normalize_address, normalize_name

SEQUENCE_WEIGHT = 0.6
TOKEN_WEIGHT = 0.4


def string_similarity(a: str, b: str) -> float:
    """Edit-distance similarity normalized by the longer string's length.

    ``(len(longer) - lev(longer, shorter)) / len(longer)``. Two empty strings
    are a vacuous match and score 1.0; callers comparing optional fields must
    check for presence first.
    """
    if a == b:
        return 1.0
    longer = max(len(a), len(b))
    distance = Levenshtein.distance(a, b)
    return (longer - distance) / longer


def jaccard(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def name_similarity(name_a: str | None, name_b: str | None) -> float:
    """Blend whole-string and token-set similarity of two raw hotel names."""
    if not name_a or not name_b:
        return 0.0

    norm_a = normalize_name(name_a)
    norm_b = normalize_name(name_b)

    # Names made only of stop words carry no identity
    if not norm_a and not norm_b:
        return 0.0
    if norm_a == norm_b:
        return 1.0

    sequence = string_similarity(norm_a, norm_b)

    tokens_a = name_tokens(norm_a)
    tokens_b = name_tokens(norm_b)
    if not tokens_a or not tokens_b:
        return sequence

    return sequence * SEQUENCE_WEIGHT + jaccard(tokens_a, tokens_b) * TOKEN_WEIGHT


def address_similarity(addr_a: str | None, addr_b: str | None) -> float:
    if not addr_a or not addr_b:
        return 0.0
    return string_similarity(normalize_address(addr_a), normalize_address(addr_b))
