"""Hotel identity normalization: names, addresses, postal codes, phones."""

from __future__ import annotations

import re

# Hospitality words that carry no identity signal
STOP_WORDS: frozenset[str] = frozenset({
    "the", "hotel", "inn", "resort", "suite", "suites",
    "lodge", "motel", "hostel", "by", "and",
})

ABBREVIATIONS: dict[str, str] = {
    "st": "street",
    "rd": "road",
    "ave": "avenue",
    "blvd": "boulevard",
    "intl": "international",
    "ctr": "center",
    "ctre": "centre",
    "apt": "apartment",
}

_STOP_WORD_RE = re.compile(r"\b(?:" + "|".join(sorted(STOP_WORDS)) + r")\b")
# Anything that is not a letter, digit or whitespace (underscore included)
_PUNCT_RE = re.compile(r"[^\w\s]|_")
_NON_DIGIT_RE = re.compile(r"\D")
_WHITESPACE_RE = re.compile(r"\s+")

PHONE_SUFFIX_LENGTH = 7


def normalize_name(name: str | None) -> str:
    """Canonicalize a raw hotel name for comparison.

    Idempotent: ``normalize_name(normalize_name(x)) == normalize_name(x)``.
    Stop words are removed before punctuation stripping, so ``"Grand-Hotel"``
    loses ``hotel`` instead of gluing it into ``"grandhotel"``. Abbreviations
    are expanded last so that ``"St."`` becomes ``"street"``.
    """
    if not name:
        return ""

    # 1. Lower-case
    s = name.lower()

    # 2. Drop hospitality stop words on word boundaries
    s = _STOP_WORD_RE.sub(" ", s)

    # 3. Strip punctuation, keeping letters, digits and spaces
    s = _PUNCT_RE.sub("", s)

    # 4. Tokenize (collapses whitespace runs); stripping can still form a stop
    # word such as "ho.tel", so filter tokens again
    tokens = [t for t in s.split() if t not in STOP_WORDS]

    # 5. Expand abbreviations as whole tokens
    tokens = [ABBREVIATIONS.get(t, t) for t in tokens]

    return " ".join(tokens)


def name_tokens(normalized: str) -> set[str]:
    """Whitespace token set of an already-normalized name."""
    return {t for t in normalized.split(" ") if t}


def normalize_address(address: str | None) -> str:
    """Case-fold and strip punctuation from a street address."""
    if not address:
        return ""
    s = _PUNCT_RE.sub("", address.casefold())
    return _WHITESPACE_RE.sub(" ", s).strip()


def normalize_postal_code(postal_code: str | None) -> str:
    """Remove all whitespace and lower-case a postal code."""
    if not postal_code:
        return ""
    return _WHITESPACE_RE.sub("", postal_code).lower()


def normalize_country_code(country_code: str | None) -> str | None:
    if country_code is None:
        return None
    code = country_code.strip().upper()
    return code or None


def phone_suffix(phone: str | None) -> str | None:
    """Return the last seven digits of a phone number, or None if too short."""
    if not phone:
        return None
    digits = _NON_DIGIT_RE.sub("", phone)
    if len(digits) < PHONE_SUFFIX_LENGTH:
        return None
    return digits[-PHONE_SUFFIX_LENGTH:]
