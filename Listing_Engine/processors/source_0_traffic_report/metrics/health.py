"""
Listing Health — Composite 0-100 score, badge and rule-based recommendation.

Score = sum of four independently weighted parts, clamped to [0, 100] and
rounded half-up:
    Impressions  (0-40)  log(impr + 1) / log(max_impr + 1), max over the dataset
    CTR          (0-30)  a 2% CTR earns full marks
    Top-20 %     (0-15)  share of search impressions in the top 20 slots
    Trend        (0-15)  7.5 neutral, +/-7.5 with organic change, saturating at +/-200%

Badges: green >= 60, yellow >= 30, red below.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from Listing_Engine.schemas import Listing, Recommendation, ScoredListing

from ..core.sports import detect_sport

IMPRESSION_WEIGHT = 40.0
CTR_WEIGHT = 30.0
TOP20_WEIGHT = 15.0
TREND_WEIGHT = 15.0

CTR_FULL_MARKS = 2.0          # percent
TREND_SATURATION_PCT = 200.0

GREEN_THRESHOLD = 60
YELLOW_THRESHOLD = 30

# Sort rank for recommendation priorities; unknown priorities sort last
PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2, "good": 3}


# ------------------------------------------------------------------
# Scoring
# ------------------------------------------------------------------

def _as_array(listings: Sequence[Listing], attr: str, null: float = np.nan) -> np.ndarray:
    return np.array(
        [getattr(l, attr) if getattr(l, attr) is not None else null for l in listings],
        dtype=float,
    )


def max_impressions(listings: Sequence[Listing]) -> int:
    """Largest impression count in the dataset (nulls count as 0)."""
    return max((l.total_impressions or 0 for l in listings), default=0)


def score_components(listings: Sequence[Listing], dataset_max: float) -> dict[str, np.ndarray]:
    """
    Vectorized sub-scores for *listings* against a fixed dataset maximum.

    Returns arrays keyed impression / ctr / top20 / trend / total, where
    total is already clamped and rounded.
    """
    impressions = _as_array(listings, "total_impressions", 0.0)
    ctr = _as_array(listings, "ctr", 0.0)
    top20 = _as_array(listings, "top20_pct", 0.0)
    organic_change = _as_array(listings, "non_search_organic_change_pct")

    if dataset_max > 0:
        impression = np.where(
            impressions > 0,
            np.minimum(np.log(impressions + 1) / np.log(dataset_max + 1), 1.0) * IMPRESSION_WEIGHT,
            0.0,
        )
    else:
        impression = np.zeros(len(listings))

    ctr_score = np.minimum(ctr / CTR_FULL_MARKS, 1.0) * CTR_WEIGHT
    top20_score = np.minimum(top20 / 100.0, 1.0) * TOP20_WEIGHT

    half = TREND_WEIGHT / 2
    shift = np.clip(np.nan_to_num(organic_change, nan=0.0) / TREND_SATURATION_PCT, -1.0, 1.0)
    trend = half + shift * half

    raw = impression + ctr_score + top20_score + trend
    total = np.floor(np.clip(raw, 0.0, 100.0) + 0.5)

    return {
        "impression": impression,
        "ctr": ctr_score,
        "top20": top20_score,
        "trend": trend,
        "total": total,
    }


def calc_health_score(listing: Listing, all_listings: Sequence[Listing]) -> int:
    """Composite 0-100 score of *listing* relative to *all_listings*."""
    return int(score_components([listing], max_impressions(all_listings))["total"][0])


def health_badge(score: float) -> str:
    if score >= GREEN_THRESHOLD:
        return "green"
    if score >= YELLOW_THRESHOLD:
        return "yellow"
    return "red"


def health_badges(scores: np.ndarray) -> np.ndarray:
    """Vectorized health_badge."""
    scores = np.asarray(scores, dtype=float)
    return np.select(
        [scores >= GREEN_THRESHOLD, scores >= YELLOW_THRESHOLD],
        ["green", "yellow"],
        default="red",
    )


# ------------------------------------------------------------------
# Recommendation ladder (first match wins)
# ------------------------------------------------------------------

def get_recommendation(listing: Listing) -> Recommendation:
    imp = listing.total_impressions or 0
    ctr = listing.ctr or 0
    views = listing.total_page_views or 0
    sold = listing.quantity_sold or 0

    if imp == 0:
        return Recommendation(text="No impressions — check listing visibility & categories", priority="low")
    if imp > 50 and ctr == 0:
        return Recommendation(text="High visibility but no clicks — review photos & title", priority="high")
    if imp > 20 and ctr == 0:
        return Recommendation(text="Getting seen but no clicks — improve title keywords & photos", priority="high")
    if views > 0 and sold == 0 and ctr > 0:
        return Recommendation(text="Getting clicks but no sales — review pricing & description", priority="medium")
    if sold > 0:
        return Recommendation(text="Selling well — maintain strategy", priority="good")
    if ctr == 0:
        return Recommendation(text="Low visibility — consider promoted listings or better keywords", priority="medium")
    return Recommendation(text="Monitor performance — not enough data yet", priority="low")


# ------------------------------------------------------------------
# Enrichment
# ------------------------------------------------------------------

def enrich_with_scores(listings: Sequence[Listing]) -> list[ScoredListing]:
    """
    Return new ScoredListing records with score, badge, sport and recommendation.

    The dataset maximum is computed once for the whole batch. Inputs are not modified.
    """
    if not listings:
        return []

    totals = score_components(listings, max_impressions(listings))["total"]
    badges = health_badges(totals)

    scored: list[ScoredListing] = []
    for listing, score, badge in zip(listings, totals, badges):
        base = listing.model_dump(include=set(Listing.model_fields))
        scored.append(ScoredListing(
            **base,
            health_score=int(score),
            health_badge=str(badge),
            sport=detect_sport(listing.title),
            recommendation=get_recommendation(listing),
        ))
    return scored
