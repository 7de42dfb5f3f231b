"""
scorer.py

Relevance scoring of one normalized field value against a normalized query.
Deterministic + explainable: every score is attributed to the cascade stage
that produced it.

Cascade (first applicable stage wins, no blending):
  1. exact substring          1.0 at a word boundary, 0.95 mid-word
  2. all query tokens covered 0.7 .. 0.9
  3. some query tokens        0.4 .. 0.7
  4. edit-distance fallback   similarity * 0.5, only above 0.6 similarity
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from matcher import similarity, token_contained, token_covered
from text_normalizer import tokenize


EXACT = "exact"
SUBSTRING = "substring"
ALL_TOKENS = "all_tokens"
PARTIAL_TOKENS = "partial_tokens"
FUZZY = "fuzzy"
NONE = "none"

MID_WORD_SCORE = 0.95
FUZZY_SIMILARITY_FLOOR = 0.6
FUZZY_SCALE = 0.5


@dataclass(frozen=True)
class FieldScore:
    score: float
    strategy: str = NONE


_NO_MATCH = FieldScore(score=0.0, strategy=NONE)


def _starts_at_word_boundary(query: str, field: str) -> bool:
    # Some occurrence is at start-of-string or follows a non-word character.
    return re.search(r"(?<!\w)" + re.escape(query), field) is not None


def assess_field(normalized_query: str, query_tokens: list[str], normalized_field: str) -> FieldScore:
    """
    Score `normalized_field` against the query and name the stage that fired.
    """

    if not normalized_field:
        return _NO_MATCH

    if normalized_query in normalized_field:
        if _starts_at_word_boundary(normalized_query, normalized_field):
            return FieldScore(score=1.0, strategy=EXACT)
        return FieldScore(score=MID_WORD_SCORE, strategy=SUBSTRING)

    # Guards the divisions below.
    if not query_tokens:
        return _NO_MATCH

    field_tokens = tokenize(normalized_field)
    covered = [t for t in query_tokens if token_covered(t, field_tokens)]

    if len(covered) == len(query_tokens):
        contained = sum(1 for t in query_tokens if token_contained(t, field_tokens))
        return FieldScore(score=0.7 + 0.2 * contained / len(query_tokens), strategy=ALL_TOKENS)

    if covered:
        return FieldScore(score=0.4 + 0.3 * len(covered) / len(query_tokens), strategy=PARTIAL_TOKENS)

    best = 0.0
    for qt in query_tokens:
        for ft in field_tokens:
            sim = similarity(qt, ft)
            if sim > FUZZY_SIMILARITY_FLOOR and sim > best:
                best = sim
    if best == 0.0:
        return _NO_MATCH
    return FieldScore(score=best * FUZZY_SCALE, strategy=FUZZY)


def score_field(normalized_query: str, query_tokens: list[str], normalized_field: str) -> float:
    return assess_field(normalized_query, query_tokens, normalized_field).score
