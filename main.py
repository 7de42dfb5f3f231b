"""
Entry point for fuzzy record search.

Run:
  python main.py "gpu server" --records items.json --field name --field vendor
  python main.py --request request.json --json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any

from pydantic import ValidationError

from engine import MatchResult, SearchOptions, merge_options, search
from extractors import key_extractor
from schemas import SearchRequest
from scorer import assess_field
from text_normalizer import normalize_text, tokenize


class InputError(Exception):
    """Unreadable or malformed command-line input."""


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Fuzzy search over a JSON array of records.")
    p.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search text. An empty query returns every record.",
    )
    p.add_argument(
        "--records",
        default="-",
        help="JSON file holding an array of objects. Use '-' (default) for STDIN.",
    )
    p.add_argument(
        "--field",
        action="append",
        dest="fields",
        default=None,
        help="Record key to search (repeatable). Defaults to every key.",
    )
    p.add_argument(
        "--request",
        default=None,
        help="JSON request document (query, records, keys, options). Overrides --records.",
    )
    p.add_argument("--threshold", type=float, default=None, help="Minimum score (default 0.3).")
    p.add_argument("--case-sensitive", action="store_true", help="Do not ignore case.")
    p.add_argument("--no-trim", action="store_true", help="Do not trim surrounding whitespace.")
    p.add_argument("--limit", type=int, default=None, help="Print at most N results.")
    p.add_argument("--json", action="store_true", help="Print output as JSON.")
    p.add_argument(
        "--explain",
        action="store_true",
        help="Show every field's score and the matching strategy that produced it.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return p


def _env_options() -> dict[str, Any]:
    """
    Defaults from FUZZY_SEARCH_THRESHOLD / FUZZY_SEARCH_IGNORE_CASE.
    Unparseable values are ignored.
    """

    env: dict[str, Any] = {}
    raw_threshold = os.environ.get("FUZZY_SEARCH_THRESHOLD", "").strip()
    if raw_threshold:
        try:
            env["threshold"] = float(raw_threshold)
        except ValueError:
            pass
    raw_case = os.environ.get("FUZZY_SEARCH_IGNORE_CASE", "").strip().lower()
    if raw_case:
        env["ignore_case"] = raw_case not in ("0", "false", "no")
    return env


def _read_json(path: str) -> Any:
    try:
        if path == "-":
            return json.load(sys.stdin)
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise InputError(f"cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"invalid JSON in {path}: {e}") from e


def _load_request(args: argparse.Namespace) -> SearchRequest:
    if args.request:
        data = _read_json(args.request)
        if not isinstance(data, dict):
            raise InputError("request document must be a JSON object")
        if args.query is not None:
            data["query"] = args.query
        if args.fields:
            data["keys"] = args.fields
    else:
        if args.query is None:
            raise InputError("a query is required unless --request is given")
        data = {"query": args.query, "records": _read_json(args.records), "keys": args.fields}
    try:
        return SearchRequest(**data)
    except ValidationError as e:
        raise InputError(f"invalid request: {e}") from e


def _resolve_options(args: argparse.Namespace, req: SearchRequest) -> SearchOptions:
    overrides = req.option_overrides()
    if args.threshold is not None:
        overrides["threshold"] = args.threshold
    if args.case_sensitive:
        overrides["ignore_case"] = False
    if args.no_trim:
        overrides["trim_whitespace"] = False
    return merge_options(_env_options(), **overrides)


def _explain(query: str, fields: dict, options: SearchOptions) -> list[tuple[str, float, str]]:
    normalized_query = normalize_text(query, options)
    query_tokens = tokenize(normalized_query)
    rows: list[tuple[str, float, str]] = []
    for name, value in fields.items():
        if value is None:
            continue
        fs = assess_field(normalized_query, query_tokens, normalize_text(value, options))
        rows.append((name, fs.score, fs.strategy))
    return rows


def _print_results_yaml(results: list[MatchResult], explain_rows: list | None) -> None:
    if not results:
        print("results: []")
        return
    print("results:")
    for i, r in enumerate(results):
        print(f"  - score: {round(r.score, 4)}")
        print(f"    matched_fields: [{', '.join(r.matched_fields)}]")
        print(f"    item: {json.dumps(r.item, ensure_ascii=False)}")
        if explain_rows is not None:
            print("    fields:")
            for name, score, strategy in explain_rows[i]:
                print(f"      {name}: {round(score, 4)} ({strategy})")


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        req = _load_request(args)
    except InputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    options = _resolve_options(args, req)
    extract = key_extractor(*(req.keys or ()))
    results = search(req.records, req.query, extract, options)

    limit = args.limit if args.limit is not None else req.limit
    if limit is not None:
        results = results[: max(0, limit)]

    explain_rows = None
    # Blank queries bypass scoring, so there is nothing to explain.
    if args.explain and req.query.strip():
        explain_rows = [_explain(req.query, extract(r.item), options) for r in results]

    if args.json:
        payload = [asdict(r) for r in results]
        if explain_rows is not None:
            for entry, rows in zip(payload, explain_rows):
                entry["fields"] = [{"field": n, "score": s, "strategy": st} for n, s, st in rows]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        _print_results_yaml(results, explain_rows)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
