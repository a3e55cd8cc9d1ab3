"""
Pydantic schemas for the cross-report timeline and trend engine
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .base import ComparisonStatus, EngineModel, HealthBadge
from .listing import ReportPeriod


class TimelinePoint(EngineModel):
    """One listing's metrics as recorded in one snapshot"""

    snapshot_id: str
    uploaded_at: datetime
    filename: str
    report_period: Optional[ReportPeriod] = None
    total_impressions: Optional[int] = None
    ctr: Optional[float] = None
    total_page_views: Optional[int] = None
    quantity_sold: Optional[int] = None
    health_score: Optional[int] = None
    health_badge: HealthBadge = "red"
    is_promoted: bool = False
    sport: str = "Other"


class TimelineEntry(EngineModel):
    """Chronological points for one item ID. Snapshots without the item have no point."""

    item_id: str
    title: str
    points: List[TimelinePoint] = Field(default_factory=list)

    @property
    def latest(self) -> Optional[TimelinePoint]:
        return self.points[-1] if self.points else None


class ListingChange(EngineModel):
    """Change between the two most recent points of a timeline entry"""

    impressions_change: Optional[float] = None
    ctr_change: Optional[float] = None
    page_views_change: Optional[float] = None
    sold_change: Optional[float] = None
    health_score_change: Optional[int] = None
    prev_health_badge: HealthBadge
    curr_health_badge: HealthBadge
    is_new_issue: bool
    is_declined: bool
    prev_point: TimelinePoint
    curr_point: TimelinePoint


class DeclinedListing(EngineModel):
    """Entry in the regression triage queue"""

    entry: TimelineEntry
    change: ListingChange


class TrendPoint(EngineModel):
    """Per-snapshot rollup for time-series charting"""

    label: str
    uploaded_at: datetime
    snapshot_id: str
    filename: str
    total_impressions: int = 0
    promoted_impressions: int = 0
    organic_impressions: int = 0
    avg_ctr: float = 0.0
    total_sold: int = 0
    listing_count: int = 0
    health_zones: Dict[str, int] = Field(default_factory=dict)


class MetricDelta(EngineModel):
    """Previous vs current value of one rollup metric"""

    prev: float
    curr: float
    change: float
    pct_change: Optional[float] = None


class KPIComparison(EngineModel):
    """Deltas between the two most recent rollups"""

    total_impressions: MetricDelta
    avg_ctr: MetricDelta
    total_sold: MetricDelta
    listing_count: MetricDelta


class ComparisonSide(EngineModel):
    """One snapshot's view of a listing in a two-report comparison"""

    total_impressions: Optional[int] = None
    ctr: Optional[float] = None
    total_page_views: Optional[int] = None
    quantity_sold: Optional[int] = None
    health_score: Optional[int] = None
    health_badge: HealthBadge = "red"


class ComparisonRow(EngineModel):
    """Full-outer-join row between two snapshots"""

    item_id: str
    title: str
    before: Optional[ComparisonSide] = None
    after: Optional[ComparisonSide] = None
    impressions_change: Optional[float] = None
    ctr_change: Optional[float] = None
    page_views_change: Optional[float] = None
    sold_change: Optional[float] = None
    status: ComparisonStatus
