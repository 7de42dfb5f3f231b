"""
text_normalizer.py

Text normalization and tokenization for fuzzy record search.
Both the query and every field value go through the same normalizer so
that the scorer compares like with like.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from engine import SearchOptions


_WHITESPACE_RE = re.compile(r"\s+")
# Token separators: whitespace plus - _ . , ; : ! ?
_TOKEN_SPLIT_RE = re.compile(r"[\s\-_.,;:!?]+")


def normalize_text(text: str, options: SearchOptions) -> str:
    """
    Normalize text for comparison.

    Trims (if enabled), lowercases (if enabled), then collapses any run of
    whitespace into a single space.
    """

    normalized = text
    if options.trim_whitespace:
        normalized = normalized.strip()
    if options.ignore_case:
        normalized = normalized.lower()
    return _WHITESPACE_RE.sub(" ", normalized)


def tokenize(text: str) -> list[str]:
    """
    Split already-normalized text into word tokens.
    Order is preserved and repeated words are kept.
    """

    return [t for t in _TOKEN_SPLIT_RE.split(text) if t]
