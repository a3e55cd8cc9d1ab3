"""
Source 1 — History: trends across many traffic-report snapshots.

Public API:
    pct_change(a, b)
    build_listing_timeline(snapshots)   -> {item_id: TimelineEntry}
    compute_listing_change(entry)       -> ListingChange | None
    compute_aggregate_trend(snapshots)  -> list[TrendPoint]
    compute_kpi_comparison(series)      -> KPIComparison | None
    build_comparison(a, b)              -> list[ComparisonRow]
    get_declined_listings(timeline)     -> list[DeclinedListing]
    get_top_listing_timelines(timeline) -> list[TimelineEntry]
"""

from .timeline import (
    build_comparison,
    build_listing_timeline,
    compute_aggregate_trend,
    compute_kpi_comparison,
    compute_listing_change,
    get_declined_listings,
    get_top_listing_timelines,
    pct_change,
)
