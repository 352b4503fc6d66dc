"""
Blocking index for candidate reduction.

Each name is filed under several cheap keys so that the similarity engine
only compares names sharing at least one key:

- PFX:<first n tokens>             prefix block
- HASH:<first 6 chars>:<sha1[:6]>  splits very common first tokens
- TOK:<token>                      one block per each of the first 3 tokens
- PHON:<code>                      Double Metaphone codes of the first token
- EMPTY                            names with no tokens left after normalization

Two genuinely similar names are only missed when they differ in all of
their first three tokens, in the phonetic code of the first token and in
the hash bucket.
"""

from __future__ import annotations

import hashlib
from typing import Iterable, Mapping, Optional

from .models import BlockingIndex
from .normalizer import normalize, tokenize
from .phonetic import DoubleMetaphoneEncoder, PhoneticEncoder, token_codes

EMPTY_BLOCK = "EMPTY"
TOKEN_BLOCK_LIMIT = 3
HASH_PREFIX_LENGTH = 6
HASH_DIGEST_LENGTH = 6


def _hash_block(first_token: str) -> str:
    digest = hashlib.sha1(first_token.encode("utf-8")).hexdigest()[:HASH_DIGEST_LENGTH]
    return f"HASH:{first_token[:HASH_PREFIX_LENGTH]}:{digest}"


def block_keys(tokens: list[str] | tuple[str, ...], n_tokens: int, encoder: PhoneticEncoder) -> list[str]:
    """
    Block keys for one tokenized name, without duplicates.

    Examples:
        ["acme", "trading"], n_tokens=2 →
            ["PFX:acme trading", "HASH:acme:<sha1>", "TOK:acme",
             "TOK:trading", "PHON:AKM"]
        [] → ["EMPTY"]
    """
    if not tokens:
        return [EMPTY_BLOCK]

    keys = [f"PFX:{' '.join(tokens[:n_tokens])}", _hash_block(tokens[0])]
    keys.extend(f"TOK:{token}" for token in tokens[:TOKEN_BLOCK_LIMIT])
    keys.extend(f"PHON:{code}" for code in token_codes(encoder, tokens[0]))
    return list(dict.fromkeys(keys))


def build_index(
    names: Iterable[str],
    n_tokens: int,
    *,
    encoder: Optional[PhoneticEncoder] = None,
    tokens_by_name: Optional[Mapping[str, tuple[str, ...]]] = None,
) -> BlockingIndex:
    """
    Build the blocking index over raw names.

    Args:
        names: Raw names; repeated names are indexed once
        n_tokens: Number of leading tokens forming the prefix block
        encoder: Phonetic encoder (Double Metaphone by default)
        tokens_by_name: Precomputed normalized tokens keyed by raw name

    Returns:
        BlockingIndex where every name belongs to at least one block
    """
    encoder = encoder or DoubleMetaphoneEncoder()
    result = BlockingIndex()

    for raw in names:
        if raw in result.name_to_blocks:
            continue
        if tokens_by_name is not None and raw in tokens_by_name:
            tokens = tokens_by_name[raw]
        else:
            tokens = tuple(tokenize(normalize(raw)))

        keys = block_keys(tokens, n_tokens, encoder)
        result.name_to_blocks[raw] = keys
        for key in keys:
            result.index.setdefault(key, []).append(raw)

    return result
