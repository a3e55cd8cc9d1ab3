"""
Cleaning — Cell-level cleaning rules for the traffic report export.

The export writes item IDs as spreadsheet formulas (="358228910357"),
percentages with thousands separators ("1,150.0%") and "-" for no data.
"No data" always becomes None, never 0 or NaN.
"""

from __future__ import annotations

import re

import pandas as pd

# Tokens the export uses for "no data"
NULL_TOKENS = ("", "-")

_FORMULA_ID = re.compile(r'^="(.*)"$')
_BARE_FORMULA_ID = re.compile(r"^=(\d+)$")


def clean_value(raw) -> str | None:
    """
    Strip a raw cell and unwrap formula-escaped identifiers.

    Returns None for missing cells and the "-" / empty sentinels.
    """
    if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
        return None
    s = str(raw).strip()
    if s in NULL_TOKENS:
        return None

    # ="123" as exported, or =123 once a CSV reader has eaten the quotes
    match = _FORMULA_ID.match(s) or _BARE_FORMULA_ID.match(s)
    if match:
        return match.group(1)
    return s


def parse_percent(raw) -> float | None:
    """"1,150.0%" -> 1150.0. None for sentinels and unparseable text."""
    s = clean_value(raw)
    if s is None:
        return None
    try:
        return float(s.replace(",", "").replace("%", ""))
    except ValueError:
        return None


def parse_integer(raw) -> int | None:
    """"1,234" -> 1234. Decimal strings truncate toward zero."""
    s = clean_value(raw)
    if s is None:
        return None
    s = s.replace(",", "")
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return int(float(s))
    except (ValueError, OverflowError):
        return None

