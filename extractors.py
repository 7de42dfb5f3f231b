"""
extractors.py

Ready-made field extractors for the common record shapes: dict-like rows
(JSON, database rows) and plain objects (dataclasses, ORM entities).
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def key_extractor(*names: str) -> Callable[[Mapping[str, Any]], dict[str, Optional[str]]]:
    """
    Extract the given keys from a mapping record.
    With no names, every key of the record is searched.
    """

    def extract(record: Mapping[str, Any]) -> dict[str, Optional[str]]:
        keys = names or tuple(record.keys())
        return {k: _as_text(record.get(k)) for k in keys}

    return extract


def attribute_extractor(*names: str) -> Callable[[Any], dict[str, Optional[str]]]:
    def extract(record: Any) -> dict[str, Optional[str]]:
        return {n: _as_text(getattr(record, n, None)) for n in names}

    return extract
