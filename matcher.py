"""
matcher.py

Token-level matching helpers used by the scorer.

- Levenshtein edit distance (insert / delete / substitute, cost 1 each)
- Substring coverage predicates between query and field tokens
- Similarity ratio derived from edit distance
"""

from __future__ import annotations


def levenshtein(a: str, b: str) -> int:
    """
    Minimum number of single-character edits turning `a` into `b`.

    Iterative DP keeping one row at a time; the result equals the full
    (len(b)+1) x (len(a)+1) table's last cell.
    """

    if not a:
        return len(b)
    if not b:
        return len(a)

    prev = list(range(len(a) + 1))
    for i in range(1, len(b) + 1):
        cur = [i] + [0] * len(a)
        bi = b[i - 1]
        for j in range(1, len(a) + 1):
            cost = 0 if a[j - 1] == bi else 1
            cur[j] = min(
                prev[j] + 1,  # delete
                cur[j - 1] + 1,  # insert
                prev[j - 1] + cost,  # substitute
            )
        prev = cur
    return prev[len(a)]


def similarity(a: str, b: str) -> float:
    """
    1.0 for identical tokens, approaching 0.0 as they diverge.
    """

    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def token_covered(query_token: str, field_tokens: list[str]) -> bool:
    """
    True if some field token contains the query token or is contained in it.
    """

    return any(query_token in ft or ft in query_token for ft in field_tokens)


def token_contained(query_token: str, field_tokens: list[str]) -> bool:
    """
    True if some field token contains the query token (one direction only).
    """

    return any(query_token in ft for ft in field_tokens)
