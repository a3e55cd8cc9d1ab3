"""
Listing Analyzer — The single entry point for single-report intelligence.

Orchestrates the metric modules and returns a consolidated "Listing Snapshot"
dictionary of plain data that any downstream consumer (CLI, API, dashboard)
can use directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from Listing_Engine.schemas import Listing, Snapshot, snapshot_id_for

from .metrics.aggregates import (
    compute_kpis,
    compute_priority_list,
    compute_promoted_vs_organic,
    compute_sport_breakdown,
    compute_trending,
)
from .metrics.health import enrich_with_scores
from .metrics.keywords import analyze_keywords, get_keyword_trends
from .report_ingestor import TrafficReportIngestor


def _listing_ref(listing: Listing) -> dict:
    return {
        "item_id": listing.item_id,
        "title": listing.title,
        "total_impressions": listing.total_impressions,
    }


class ListingAnalyzer:
    """
    Takes parsed listings and produces structured listing intelligence.

    Usage:
        analyzer = ListingAnalyzer()
        result = analyzer.analyze(listings)
    """

    def analyze(self, listings: Sequence[Listing], priority_limit: int = 15) -> dict:
        """
        Score the listings and run every single-report metric.

        Returns:
            {
              "meta":                 {"total_rows": 412},
              "kpis":                 { ... },  # metrics.aggregates
              "promoted_vs_organic":  { ... },
              "sports":               { ... },
              "priority":             [ ... ],  # first *priority_limit* entries
              "trending":             {"trending_up": [...], "trending_down": [...]},
              "health_zones":         {"green": 40, "yellow": 150, "red": 222},
              "keywords":             [ ... ],  # KeywordTrend dicts
            }
        """
        scored = enrich_with_scores(listings)

        zones = {"green": 0, "yellow": 0, "red": 0}
        for listing in scored:
            zones[listing.health_badge] += 1

        trending = compute_trending(scored)
        priority = compute_priority_list(scored)[:priority_limit]

        return {
            "meta": {"total_rows": len(scored)},
            "kpis": compute_kpis(scored),
            "promoted_vs_organic": compute_promoted_vs_organic(scored),
            "sports": compute_sport_breakdown(scored),
            "priority": [
                {**_listing_ref(p["listing"]), "recommendation": p["recommendation"].model_dump()}
                for p in priority
            ],
            "trending": {
                key: [{**_listing_ref(t["listing"]), "change": t["change"]} for t in movers]
                for key, movers in trending.items()
            },
            "health_zones": zones,
            "keywords": [kw.model_dump() for kw in get_keyword_trends(analyze_keywords(scored))],
        }


def build_snapshot(
    text: str,
    filename: str,
    uploaded_at: datetime,
    snapshot_id: str | None = None,
) -> Snapshot:
    """
    Parse and score one report into an immutable Snapshot.

    The id defaults to a digest of filename + upload time, so rebuilding the
    same upload yields the same snapshot.
    """
    ingestor = TrafficReportIngestor()
    listings = ingestor.ingest(text)

    return Snapshot(
        id=snapshot_id or snapshot_id_for(filename, uploaded_at),
        uploaded_at=uploaded_at,
        filename=filename,
        report_period=ingestor.report_period,
        listings=tuple(enrich_with_scores(listings)),
    )
