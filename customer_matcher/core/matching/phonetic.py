"""
Phonetic encoding for customer names.

The similarity engine and the blocking index only depend on the
PhoneticEncoder protocol, so the algorithm can be swapped or stubbed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from metaphone import doublemetaphone

logger = logging.getLogger(__name__)


class PhoneticEncoder(Protocol):
    """Protocol for a Double Metaphone style encoder."""

    def encode(self, token: str) -> tuple[str, str]:
        """Return (primary, alternate) codes; either may be empty."""
        ...


class DoubleMetaphoneEncoder:
    """Double Metaphone via the `metaphone` package."""

    def encode(self, token: str) -> tuple[str, str]:
        primary, alternate = doublemetaphone(token)
        return primary or "", alternate or ""


def token_codes(encoder: PhoneticEncoder, token: str) -> list[str]:
    """
    Distinct non-empty codes for one token, primary first.

    Encoding failures are swallowed: a token that cannot be encoded simply
    contributes no codes.
    """
    try:
        primary, alternate = encoder.encode(token)
    except Exception as exc:
        logger.debug("Phonetic encoding failed for %r: %s", token, exc)
        return []
    codes = []
    for code in (primary, alternate):
        if code and code not in codes:
            codes.append(code)
    return codes


def code_set(encoder: PhoneticEncoder, tokens: Iterable[str]) -> frozenset[str]:
    """Union of the phonetic codes of every token."""
    codes: set[str] = set()
    for token in tokens:
        codes.update(token_codes(encoder, token))
    return frozenset(codes)
