"""
schemas.py

Request document accepted by the command line (`main.py --request FILE`).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class SearchRequest(BaseModel):
    query: str = ""
    records: List[Dict[str, Any]]
    # Keys to search; all keys of each record when omitted.
    keys: Optional[List[str]] = None
    threshold: Optional[float] = None
    ignore_case: Optional[bool] = None
    trim_whitespace: Optional[bool] = None
    limit: Optional[int] = None

    def option_overrides(self) -> dict:
        return {
            "threshold": self.threshold,
            "ignore_case": self.ignore_case,
            "trim_whitespace": self.trim_whitespace,
        }
