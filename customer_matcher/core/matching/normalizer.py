"""
Customer name normalization.

Turns a raw customer name as it appears in sales and budget rows into a
comparable form:

1. Unicode normalization (NFKD) and removal of combining marks
2. Case folding and trimming
3. Punctuation replaced by spaces (apostrophes deleted)
4. Whitespace collapsed
5. Address noise and legal-form words removed (unless permissive)
6. Long numeric tokens (phone numbers, IDs) dropped
7. Final whitespace collapse

Examples:
    "Müller GmbH & Co."                  → "muller gmbh"
    "Ajmal Perfumes, Shop No. 3"         → "ajmal perfumes"
    "ACME Trading L.L.C. 0501234567"     → "acme trading"
    "3M Gulf Ltd"                        → "3m gulf"
    "Office Depot"                       → "office depot"

All functions are pure and have no I/O dependencies.
"""

from __future__ import annotations

import re
import unicodedata

APOSTROPHES = "'’‘`"

PUNCTUATION = ".,/\\#!$%^&*;:{}=_~()@+[]?<>|\"-–—"

_PUNCT_TABLE = str.maketrans(
    {**{ch: " " for ch in PUNCTUATION}, **{ch: None for ch in APOSTROPHES}}
)

ADDRESS_NOISE = (
    "p o box",
    "po box",
    "pobox",
    "box no",
    "unit",
    "fl",
    "floor",
    "bldg",
    "building",
)

# Common words in real business names ("Office Depot", "H&R Block"); only
# dropped with a unit number after them, and never as the first word.
NUMBERED_ADDRESS_NOISE = (
    "shop",
    "office",
    "room",
    "suite",
    "level",
    "block",
)

LEGAL_FORMS = (
    "l l c",
    "llc",
    "ltd",
    "limited",
    "inc",
    "incorporated",
    "corp",
    "corporation",
    "co",
    "company",
    "est",
    "establishment",
    "fze",
    "fzc",
    "fzco",
    "plc",
    "pllc",
)

# Whole-token matches only: tokens are single-space separated at this point.
_ADDRESS_NOISE_RE = re.compile(
    r"(?<!\S)(?:%s)(?: (?:no|number))?(?: \d+[a-z]?)?(?!\S)"
    % "|".join(re.escape(word) for word in ADDRESS_NOISE)
)
# Needs a preceding token, so a name starting with "Level 3" keeps it.
_NUMBERED_ADDRESS_RE = re.compile(
    r"(?<=\S )(?:%s)(?: (?:no|number))? \d+[a-z]?(?!\S)"
    % "|".join(re.escape(word) for word in NUMBERED_ADDRESS_NOISE)
)
_LEGAL_FORM_RE = re.compile(
    r"(?<!\S)(?:%s)(?!\S)" % "|".join(re.escape(word) for word in LEGAL_FORMS)
)

MAX_NUMERIC_TOKEN_LENGTH = 6


def _strip_marks(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _collapse(value: str) -> str:
    return " ".join(value.split())


def _drop_long_numbers(value: str) -> str:
    return " ".join(
        token
        for token in value.split()
        if not (token.isdigit() and len(token) > MAX_NUMERIC_TOKEN_LENGTH)
    )


def _remove_noise(value: str) -> str:
    value = _ADDRESS_NOISE_RE.sub(" ", value)
    value = _NUMBERED_ADDRESS_RE.sub(" ", _collapse(value))
    value = _LEGAL_FORM_RE.sub(" ", value)
    return _collapse(value)


def normalize(raw: str | None, permissive: bool = False) -> str:
    """
    Normalize a raw customer name for comparison.

    Never raises. Empty or missing input yields an empty string, and the
    result is stable under re-normalization.

    Args:
        raw: The name as found in the source data
        permissive: Keep address noise and legal-form words

    Returns:
        Lowercase, space-separated comparable name (possibly empty)
    """
    if not raw:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)

    value = _strip_marks(raw)
    # Case folding can reintroduce combining marks (e.g. dotted capital I).
    value = _strip_marks(value.casefold()).strip()
    value = _collapse(value.translate(_PUNCT_TABLE))

    if permissive:
        return _drop_long_numbers(value)

    # Removing one token can bring two others together ("po 12345678 box"),
    # so repeat until nothing changes.
    while True:
        cleaned = _drop_long_numbers(_remove_noise(value))
        if cleaned == value:
            break
        value = cleaned
    return _collapse(value)


def tokenize(normalized: str) -> list[str]:
    """Split an already normalized name into tokens."""
    return normalized.split()
