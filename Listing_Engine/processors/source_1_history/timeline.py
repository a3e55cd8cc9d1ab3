"""
Listing History — Cross-report timeline matching and trend engine.

Snapshots are joined on item ID. Each item gets its own chronological list of
points, one per snapshot that contains it; a snapshot without the item adds
no point (no interpolation, no forward-fill).

Every percentage change in this module goes through pct_change():
    either side None          -> None
    0 -> 0                    -> 0
    0 -> anything else        -> None   (undefined from a zero baseline, not infinite)
    otherwise                 -> (b - a) / |a| * 100
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Sequence

from Listing_Engine.config import settings
from Listing_Engine.schemas import (
    ComparisonRow,
    ComparisonSide,
    DeclinedListing,
    KPIComparison,
    Listing,
    ListingChange,
    MetricDelta,
    Snapshot,
    TimelineEntry,
    TimelinePoint,
    TrendPoint,
)

from ..source_0_traffic_report.core.sports import detect_sport
from ..source_0_traffic_report.metrics.aggregates import compute_kpis, compute_promoted_vs_organic

logger = logging.getLogger(__name__)

HEALTH_ZONES = ("green", "yellow", "red")


def pct_change(a: float | None, b: float | None) -> float | None:
    """Null-safe percent change from *a* to *b* (see module docstring)."""
    if a is None or b is None:
        return None
    if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
        return None
    if a == 0 and b == 0:
        return 0.0
    if a == 0:
        return None
    return (b - a) / abs(a) * 100


def _chronological(snapshots: Sequence[Snapshot]) -> list[Snapshot]:
    return sorted(snapshots, key=lambda s: s.uploaded_at)


def _badge(listing: Listing) -> str:
    return getattr(listing, "health_badge", None) or "red"


# ------------------------------------------------------------------
# Timeline
# ------------------------------------------------------------------

def _point(snapshot: Snapshot, listing: Listing) -> TimelinePoint:
    return TimelinePoint(
        snapshot_id=snapshot.id,
        uploaded_at=snapshot.uploaded_at,
        filename=snapshot.filename,
        report_period=snapshot.report_period,
        total_impressions=listing.total_impressions,
        ctr=listing.ctr,
        total_page_views=listing.total_page_views,
        quantity_sold=listing.quantity_sold,
        health_score=getattr(listing, "health_score", None),
        health_badge=_badge(listing),
        is_promoted=listing.is_promoted,
        sport=getattr(listing, "sport", None) or detect_sport(listing.title),
    )


def build_listing_timeline(snapshots: Sequence[Snapshot]) -> dict[str, TimelineEntry]:
    """
    Full join of every snapshot's listings by item ID.

    Returns:
        {item_id: TimelineEntry}, items in order of first appearance. Each entry's
        points are sorted by upload time and its title is the most recent one.
        Listings without an item ID are skipped.
    """
    titles: dict[str, str] = {}
    points: dict[str, list[TimelinePoint]] = {}

    for snapshot in _chronological(snapshots):
        for listing in snapshot.listings:
            if not listing.item_id:
                continue
            titles[listing.item_id] = listing.title
            points.setdefault(listing.item_id, []).append(_point(snapshot, listing))

    return {
        item_id: TimelineEntry(item_id=item_id, title=titles[item_id], points=item_points)
        for item_id, item_points in points.items()
    }


def compute_listing_change(entry: TimelineEntry) -> ListingChange | None:
    """
    Change between the two most recent points only. None with fewer than 2 points.

    is_new_issue: badge moved into red from green or yellow.
    is_declined:  green -> yellow/red, or yellow -> red.
    """
    if len(entry.points) < 2:
        return None
    prev, curr = entry.points[-2], entry.points[-1]

    if prev.health_score is not None and curr.health_score is not None:
        score_change = curr.health_score - prev.health_score
    else:
        score_change = None

    return ListingChange(
        impressions_change=pct_change(prev.total_impressions, curr.total_impressions),
        ctr_change=pct_change(prev.ctr, curr.ctr),
        page_views_change=pct_change(prev.total_page_views, curr.total_page_views),
        sold_change=pct_change(prev.quantity_sold, curr.quantity_sold),
        health_score_change=score_change,
        prev_health_badge=prev.health_badge,
        curr_health_badge=curr.health_badge,
        is_new_issue=prev.health_badge != "red" and curr.health_badge == "red",
        is_declined=(
            (prev.health_badge == "green" and curr.health_badge != "green")
            or (prev.health_badge == "yellow" and curr.health_badge == "red")
        ),
        prev_point=prev,
        curr_point=curr,
    )


def _latest_impressions(entry: TimelineEntry) -> int:
    latest = entry.latest
    return (latest.total_impressions or 0) if latest else 0


def get_top_listing_timelines(
    timeline: Mapping[str, TimelineEntry],
    n: int | None = None,
) -> list[TimelineEntry]:
    """The *n* entries with the most impressions in their latest point."""
    n = n if n is not None else settings.TOP_TIMELINE_LIMIT
    entries = [e for e in timeline.values() if e.points]
    return sorted(entries, key=_latest_impressions, reverse=True)[:n]


def get_declined_listings(timeline: Mapping[str, TimelineEntry]) -> list[DeclinedListing]:
    """
    Regression triage queue: entries whose latest change is a decline or a new issue.

    New issues come first, then by latest impressions descending.
    """
    queue: list[DeclinedListing] = []
    for entry in timeline.values():
        change = compute_listing_change(entry)
        if change is None or not (change.is_declined or change.is_new_issue):
            continue
        queue.append(DeclinedListing(entry=entry, change=change))

    return sorted(
        queue,
        key=lambda d: (not d.change.is_new_issue, -_latest_impressions(d.entry)),
    )


# ------------------------------------------------------------------
# Aggregate trend
# ------------------------------------------------------------------

def _label(snapshot: Snapshot) -> str:
    name = snapshot.filename
    if name.lower().endswith(".csv"):
        name = name[:-4]
    return name[:20] or snapshot.uploaded_at.date().isoformat()


def compute_aggregate_trend(snapshots: Sequence[Snapshot]) -> list[TrendPoint]:
    """One rollup per snapshot, oldest first, for time-series charting."""
    series: list[TrendPoint] = []

    for snapshot in _chronological(snapshots):
        listings = list(snapshot.listings)
        kpis = compute_kpis(listings)
        split = compute_promoted_vs_organic(listings)

        zones = {zone: 0 for zone in HEALTH_ZONES}
        for listing in listings:
            zones[_badge(listing)] += 1

        series.append(TrendPoint(
            label=_label(snapshot),
            uploaded_at=snapshot.uploaded_at,
            snapshot_id=snapshot.id,
            filename=snapshot.filename,
            total_impressions=kpis["total_impressions"],
            promoted_impressions=split["promoted_impressions"],
            organic_impressions=kpis["total_impressions"] - split["promoted_impressions"],
            avg_ctr=round(kpis["avg_ctr"], 2),
            total_sold=kpis["total_sold"],
            listing_count=kpis["total"],
            health_zones=zones,
        ))

    return series


def _delta(prev: float, curr: float) -> MetricDelta:
    return MetricDelta(prev=prev, curr=curr, change=curr - prev, pct_change=pct_change(prev, curr))


def compute_kpi_comparison(series: Sequence[TrendPoint]) -> KPIComparison | None:
    """Deltas between the two most recent rollups; None with fewer than two."""
    if len(series) < 2:
        return None
    prev, curr = series[-2], series[-1]

    return KPIComparison(
        total_impressions=_delta(prev.total_impressions, curr.total_impressions),
        avg_ctr=_delta(prev.avg_ctr, curr.avg_ctr),
        total_sold=_delta(prev.total_sold, curr.total_sold),
        listing_count=_delta(prev.listing_count, curr.listing_count),
    )


# ------------------------------------------------------------------
# Two-report comparison
# ------------------------------------------------------------------

def _side(listing: Listing) -> ComparisonSide:
    return ComparisonSide(
        total_impressions=listing.total_impressions,
        ctr=listing.ctr,
        total_page_views=listing.total_page_views,
        quantity_sold=listing.quantity_sold,
        health_score=getattr(listing, "health_score", None),
        health_badge=_badge(listing),
    )


_STATUS_ORDER = {"continuing": 0, "new": 1, "delisted": 2}


def build_comparison(snapshot_a: Snapshot, snapshot_b: Snapshot) -> list[ComparisonRow]:
    """
    Full outer join of two snapshots on item ID.

    Every item in A or B yields exactly one row with status "new" (only in B),
    "delisted" (only in A) or "continuing". Continuing rows come first by
    |impressions % change| descending (no change data sorts as 0), then new
    rows, then delisted rows.
    CTR, page-view and sold changes are None unless the item is in both.
    """
    before = {l.item_id: l for l in snapshot_a.listings if l.item_id}
    after = {l.item_id: l for l in snapshot_b.listings if l.item_id}

    rows: list[ComparisonRow] = []
    for item_id in dict.fromkeys([*before, *after]):
        l1 = before.get(item_id)
        l2 = after.get(item_id)

        if l1 is None:
            status = "new"
        elif l2 is None:
            status = "delisted"
        else:
            status = "continuing"

        def _change(attr: str) -> float | None:
            if l1 is None or l2 is None:
                return None
            return pct_change(getattr(l1, attr), getattr(l2, attr))

        rows.append(ComparisonRow(
            item_id=item_id,
            title=(l2 or l1).title,
            before=_side(l1) if l1 is not None else None,
            after=_side(l2) if l2 is not None else None,
            impressions_change=pct_change(
                (l1.total_impressions or 0) if l1 is not None else None,
                (l2.total_impressions or 0) if l2 is not None else None,
            ),
            ctr_change=_change("ctr"),
            page_views_change=_change("total_page_views"),
            sold_change=_change("quantity_sold"),
            status=status,
        ))

    logger.debug(
        "Compared %s -> %s: %d rows", snapshot_a.id, snapshot_b.id, len(rows),
    )
    return sorted(
        rows,
        key=lambda r: (_STATUS_ORDER[r.status], -abs(r.impressions_change or 0)),
    )
