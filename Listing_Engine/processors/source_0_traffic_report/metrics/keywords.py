"""
Keyword Analytics — Title tokens aggregated across the catalog.

Each listing contributes a token at most once, however often the token is
repeated in its title. CTR is impression-weighted: sum(ctr * impr) / sum(impr)
over listings that report a CTR.

Note on "trends": there is no per-keyword time series in a traffic report.
get_keyword_trends() ranks each keyword's average impressions against the
report's median keyword. That is a cross-sectional standing, not a
period-over-period change; use source_1_history for real trends.
"""

from __future__ import annotations

import re
from typing import Sequence

import numpy as np
import pandas as pd

from Listing_Engine.config import settings
from Listing_Engine.schemas import KeywordAggregate, KeywordTrend, Listing

from .aggregates import listings_frame

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "from", "card", "cards", "nfl", "mlb", "nba", "panini",
    "topps", "prizm", "mosaic", "rookie", "rc",
})

# Whitespace plus , - ( ) / |
_DELIMITERS = re.compile(r"[\s,\-()/|]+")
_HAS_ALNUM = re.compile(r"[a-z0-9]")
_EDGE_PUNCT = re.compile(r"^[^a-z0-9]+|[^a-z0-9]+$")


def extract_keywords(title: str | None) -> list[str]:
    """
    Split a title into normalized keyword tokens, in title order.

    "2023 Prizm #252 (PSA 10)" -> ["2023", "252", "psa", "10"]
    """
    if not title:
        return []

    keywords: list[str] = []
    for token in _DELIMITERS.split(title):
        token = token.lower().strip()
        if not token or not _HAS_ALNUM.search(token):
            continue
        token = _EDGE_PUNCT.sub("", token)
        if token and token not in STOP_WORDS:
            keywords.append(token)
    return keywords


def analyze_keywords(listings: Sequence[Listing]) -> list[KeywordAggregate]:
    """
    Aggregate metrics per keyword across *listings* (scored or not).

    Returns:
        KeywordAggregate list sorted by total impressions, highest first.
    """
    if not listings:
        return []

    frame = listings_frame(listings)
    impressions = pd.to_numeric(frame["total_impressions"], errors="coerce").fillna(0)
    ctr = pd.to_numeric(frame["ctr"], errors="coerce")
    has_ctr = ctr.notna()

    frame = pd.DataFrame({
        "keyword": frame["title"].map(lambda t: list(dict.fromkeys(extract_keywords(t)))),
        "impressions": impressions,
        "page_views": pd.to_numeric(frame["total_page_views"], errors="coerce").fillna(0),
        "sold": pd.to_numeric(frame["quantity_sold"], errors="coerce").fillna(0),
        "health_score": [getattr(l, "health_score", None) or 0 for l in listings],
        "ctr_weighted": np.where(has_ctr, ctr.fillna(0) * impressions, 0.0),
        "ctr_impressions": np.where(has_ctr, impressions, 0.0),
    })

    exploded = frame.explode("keyword").dropna(subset=["keyword"])
    if exploded.empty:
        return []

    grouped = exploded.groupby("keyword", sort=False).agg(
        appearances=("keyword", "size"),
        total_impressions=("impressions", "sum"),
        total_page_views=("page_views", "sum"),
        total_sold=("sold", "sum"),
        total_health_score=("health_score", "sum"),
        ctr_weighted=("ctr_weighted", "sum"),
        ctr_impressions=("ctr_impressions", "sum"),
    )
    grouped = grouped.sort_values("total_impressions", ascending=False, kind="stable")

    results: list[KeywordAggregate] = []
    for keyword, row in grouped.iterrows():
        appearances = int(row["appearances"])
        page_views = int(row["total_page_views"])
        sold = int(row["total_sold"])
        results.append(KeywordAggregate(
            keyword=keyword,
            appearances=appearances,
            total_impressions=int(row["total_impressions"]),
            avg_impressions=float(row["total_impressions"]) / appearances,
            total_page_views=page_views,
            avg_ctr=(
                float(row["ctr_weighted"]) / float(row["ctr_impressions"])
                if row["ctr_impressions"] > 0 else 0.0
            ),
            total_sold=sold,
            conversion_rate=sold / page_views * 100 if page_views > 0 else None,
            avg_health_score=float(row["total_health_score"]) / appearances,
        ))
    return results


def get_keyword_trends(
    keywords: Sequence[KeywordAggregate],
    band_pct: float | None = None,
) -> list[KeywordTrend]:
    """
    Label each keyword "up" / "down" / "stable" by its deviation from the median
    keyword's average impressions (a cross-sectional proxy, see module docstring).

    The median is the element at index n // 2 of avg_impressions sorted descending.
    Deviation beyond +/- band_pct (default 20%) is "up" / "down".

    Returns:
        KeywordTrend list sorted by deviation, highest first.
    """
    if not keywords:
        return []
    band = band_pct if band_pct is not None else settings.KEYWORD_TREND_BAND_PCT

    ordered = sorted(keywords, key=lambda k: k.avg_impressions, reverse=True)
    median = ordered[len(ordered) // 2].avg_impressions

    trends: list[KeywordTrend] = []
    for kw in keywords:
        deviation = (kw.avg_impressions - median) / median * 100 if median > 0 else 0.0
        if deviation > band:
            direction = "up"
        elif deviation < -band:
            direction = "down"
        else:
            direction = "stable"
        trends.append(KeywordTrend(
            **kw.model_dump(),
            deviation_pct=deviation,
            trend_direction=direction,
        ))

    return sorted(trends, key=lambda t: t.deviation_pct, reverse=True)


def get_keyword_suggestions(
    keyword: str,
    all_keywords: Sequence[KeywordAggregate],
    limit: int | None = None,
) -> list[KeywordAggregate]:
    """The highest-impression keywords other than *keyword* (5 by default)."""
    if not keyword or not all_keywords:
        return []
    limit = limit if limit is not None else settings.KEYWORD_SUGGESTION_LIMIT

    others = [kw for kw in all_keywords if kw.keyword != keyword]
    return sorted(others, key=lambda k: k.total_impressions, reverse=True)[:limit]
