"""
Dataset Aggregates — KPI totals, promoted/organic split, sport breakdown,
priority queue and short-horizon trending movers.

Pure reducers over a listing collection. Each returns plain dictionaries
and handles the empty collection with zero/empty results.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from Listing_Engine.config import settings
from Listing_Engine.schemas import Listing

from ..core.sports import SPORT_CATEGORIES, detect_sport
from .health import PRIORITY_RANK, get_recommendation

# Columns whose average is the short-horizon organic change signal
ORGANIC_CHANGE_COLUMNS = ["non_search_organic_change_pct", "top20_organic_change_pct"]

_FRAME_COLUMNS = list(Listing.model_fields)


def listings_frame(listings: Sequence[Listing]) -> pd.DataFrame:
    """One row per listing, Listing fields as columns, None -> NaN in numeric columns."""
    if not listings:
        return pd.DataFrame(columns=_FRAME_COLUMNS)
    return pd.DataFrame(
        [l.model_dump(include=set(_FRAME_COLUMNS)) for l in listings],
        columns=_FRAME_COLUMNS,
    )


def _numeric(frame: pd.DataFrame, column: str) -> pd.Series:
    return pd.to_numeric(frame[column], errors="coerce")


def _total(frame: pd.DataFrame, column: str) -> int:
    return int(_numeric(frame, column).fillna(0).sum())


def _mean_ignoring_nulls(frame: pd.DataFrame, column: str) -> float:
    values = _numeric(frame, column).dropna()
    return float(values.mean()) if len(values) > 0 else 0.0


# ------------------------------------------------------------------
# KPIs
# ------------------------------------------------------------------

def compute_kpis(listings: Sequence[Listing]) -> dict:
    """
    Returns:
        {
          "total": 412,
          "total_impressions": 18233,
          "total_sold": 17,
          "total_page_views": 601,
          "avg_ctr": 0.84,          # mean of non-null CTRs
          "dead_listings": 233,     # zero (or no) page views
        }
    """
    frame = listings_frame(listings)
    page_views = _numeric(frame, "total_page_views").fillna(0)
    return {
        "total": len(frame),
        "total_impressions": _total(frame, "total_impressions"),
        "total_sold": _total(frame, "quantity_sold"),
        "total_page_views": _total(frame, "total_page_views"),
        "avg_ctr": _mean_ignoring_nulls(frame, "ctr"),
        "dead_listings": int((page_views == 0).sum()),
    }


def compute_promoted_vs_organic(listings: Sequence[Listing]) -> dict:
    """Impressions, CTR and page views split by the promoted flag."""
    frame = listings_frame(listings)
    promoted_mask = frame["is_promoted"].astype(bool)
    promoted = frame[promoted_mask]
    organic = frame[~promoted_mask]

    return {
        "promoted_count": len(promoted),
        "organic_count": len(organic),
        "promoted_impressions": _total(promoted, "total_impressions"),
        "organic_impressions": _total(organic, "total_impressions"),
        "promoted_ctr": _mean_ignoring_nulls(promoted, "ctr"),
        "organic_ctr": _mean_ignoring_nulls(organic, "ctr"),
        "promoted_page_views": _total(promoted, "total_page_views"),
        "organic_page_views": _total(organic, "total_page_views"),
    }


def compute_sport_breakdown(listings: Sequence[Listing]) -> dict[str, dict]:
    """
    Count / impressions / sold per classified sport, in rule-table order.

    Returns:
        {"Football": {"count": 12, "total_impressions": 900, "total_sold": 3}, ...}
    """
    frame = listings_frame(listings)
    if frame.empty:
        return {}

    frame = frame.assign(
        sport=frame["title"].map(detect_sport),
        total_impressions=_numeric(frame, "total_impressions").fillna(0),
        quantity_sold=_numeric(frame, "quantity_sold").fillna(0),
    )
    grouped = frame.groupby("sport").agg(
        count=("title", "size"),
        total_impressions=("total_impressions", "sum"),
        total_sold=("quantity_sold", "sum"),
    )

    return {
        sport: {
            "count": int(grouped.at[sport, "count"]),
            "total_impressions": int(grouped.at[sport, "total_impressions"]),
            "total_sold": int(grouped.at[sport, "total_sold"]),
        }
        for sport in SPORT_CATEGORIES
        if sport in grouped.index
    }


# ------------------------------------------------------------------
# Priority queue
# ------------------------------------------------------------------

def compute_priority_list(listings: Sequence[Listing]) -> list[dict]:
    """
    Listings paired with their recommendation, ordered high -> medium -> low -> good,
    ties broken by impressions descending. Stable for equal keys.

    Returns:
        [{"listing": Listing, "recommendation": Recommendation}, ...]
    """
    paired = [{"listing": l, "recommendation": get_recommendation(l)} for l in listings]
    return sorted(
        paired,
        key=lambda p: (
            PRIORITY_RANK.get(p["recommendation"].priority, len(PRIORITY_RANK)),
            -(p["listing"].total_impressions or 0),
        ),
    )


# ------------------------------------------------------------------
# Trending
# ------------------------------------------------------------------

def organic_change(listing: Listing) -> float | None:
    """Mean of the organic change columns that have data; None if neither does."""
    values = [getattr(listing, col) for col in ORGANIC_CHANGE_COLUMNS]
    values = [v for v in values if v is not None]
    return sum(values) / len(values) if values else None


def compute_trending(listings: Sequence[Listing], limit: int | None = None) -> dict:
    """
    Top positive and negative organic movers.

    Returns:
        {
          "trending_up":   [{"listing": Listing, "change": 140.0}, ...],  # largest gain first
          "trending_down": [{"listing": Listing, "change": -80.0}, ...],  # largest drop first
        }
    """
    limit = limit if limit is not None else settings.TRENDING_LIMIT
    frame = listings_frame(listings)
    if frame.empty:
        return {"trending_up": [], "trending_down": []}

    changes = frame[ORGANIC_CHANGE_COLUMNS].apply(pd.to_numeric, errors="coerce").mean(axis=1, skipna=True)
    ranked = changes.dropna().sort_values(ascending=False, kind="stable")

    head = ranked.head(limit)
    tail = ranked.tail(limit)

    return {
        "trending_up": [
            {"listing": listings[pos], "change": float(val)}
            for pos, val in head.items() if val > 0
        ],
        "trending_down": [
            {"listing": listings[pos], "change": float(val)}
            for pos, val in reversed(list(tail.items())) if val < 0
        ],
    }
