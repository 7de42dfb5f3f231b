"""
engine.py

Fuzzy record search: rank an in-memory collection of records against a
free-text query.

Design goals:
- Shape-agnostic: records are opaque; a caller-supplied extractor exposes
  named text fields
- Stateless: nothing is cached between calls, so concurrent calls on
  disjoint inputs are safe
- Total: empty queries, empty collections and missing fields all have a
  well-defined result
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar, Union

from scorer import score_field
from text_normalizer import normalize_text, tokenize

logger = logging.getLogger(__name__)

T = TypeVar("T")

FieldMap = Mapping[str, Optional[str]]
FieldExtractor = Callable[[T], FieldMap]


@dataclass(frozen=True)
class SearchOptions:
    # Minimum relevance (0-1) a record needs to be returned. Not validated.
    threshold: float = 0.3
    ignore_case: bool = True
    trim_whitespace: bool = True


DEFAULT_OPTIONS = SearchOptions()

OptionsLike = Union[SearchOptions, Mapping[str, Any], None]


@dataclass
class MatchResult(Generic[T]):
    item: T
    score: float
    matched_fields: list[str] = field(default_factory=list)


def merge_options(options: OptionsLike = None, base: SearchOptions = DEFAULT_OPTIONS, **overrides: Any) -> SearchOptions:
    """
    Layer caller overrides over `base`, field by field.

    `options` may be a full SearchOptions (used as-is), a mapping holding any
    subset of the option names, or None. Keyword overrides are applied last.
    Unknown names are ignored.
    """

    known = {f.name for f in fields(SearchOptions)}
    if isinstance(options, SearchOptions):
        merged = options
    else:
        merged = replace(base, **{k: v for k, v in (options or {}).items() if k in known and v is not None})
    picked = {k: v for k, v in overrides.items() if k in known and v is not None}
    if picked:
        merged = replace(merged, **picked)
    return merged


def _is_blank_query(query: str, options: SearchOptions) -> bool:
    if not query:
        return True
    return options.trim_whitespace and not query.strip()


def search(
    records: Iterable[T],
    query: str,
    extract_fields: FieldExtractor,
    options: OptionsLike = None,
    **overrides: Any,
) -> list[MatchResult[T]]:
    """
    Return the records matching `query`, best first.

    Each record's score is the maximum of its field scores; `matched_fields`
    lists the fields that individually reached the threshold. Ties keep
    input order.
    """

    opts = merge_options(options, **overrides)

    if _is_blank_query(query, opts):
        return [MatchResult(item=item, score=1.0, matched_fields=[]) for item in records]

    normalized_query = normalize_text(query, opts)
    query_tokens = tokenize(normalized_query)
    logger.debug("Searching for %r (tokens=%s, threshold=%s)", normalized_query, query_tokens, opts.threshold)

    results: list[MatchResult[T]] = []
    scanned = 0
    for item in records:
        scanned += 1
        best = 0.0
        matched: list[str] = []
        for name, value in extract_fields(item).items():
            # Absent values are skipped, never scored as zero.
            if value is None:
                continue
            score = score_field(normalized_query, query_tokens, normalize_text(value, opts))
            if score > best:
                best = score
            if score >= opts.threshold:
                matched.append(name)
        if best >= opts.threshold:
            results.append(MatchResult(item=item, score=best, matched_fields=matched))

    logger.debug("Kept %d of %d records", len(results), scanned)
    return sorted(results, key=lambda r: r.score, reverse=True)


def filter(
    records: Iterable[T],
    query: str,
    extract_fields: FieldExtractor,
    options: OptionsLike = None,
    **overrides: Any,
) -> list[T]:
    """
    Same as `search`, but returns just the items.
    """

    return [r.item for r in search(records, query, extract_fields, options, **overrides)]


class FuzzySearch:
    """
    Search entry point with its own default options.
    Create one per view/list; it keeps no state between calls.
    """

    def __init__(self, options: OptionsLike = None, **overrides: Any) -> None:
        self.options = merge_options(options, **overrides)

    def search(
        self,
        records: Iterable[T],
        query: str,
        extract_fields: FieldExtractor,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> list[MatchResult[T]]:
        opts = merge_options(options, base=self.options, **overrides)
        return search(records, query, extract_fields, opts)

    def filter(
        self,
        records: Iterable[T],
        query: str,
        extract_fields: FieldExtractor,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> list[T]:
        return [r.item for r in self.search(records, query, extract_fields, options, **overrides)]
