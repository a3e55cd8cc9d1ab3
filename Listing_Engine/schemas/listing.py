"""
Pydantic schemas for traffic-report listings and snapshots
"""

import hashlib
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from pydantic import Field, field_validator

from .base import EngineModel, HealthBadge, Priority


class Listing(EngineModel):
    """One row of a traffic report. Every metric is nullable: None means "no data", not 0."""

    title: str = Field(..., min_length=1, description="Listing title")
    item_id: str = Field("", description="Stable marketplace item ID (join key across reports)")
    start_date: str = Field("", description="Item start date as exported")
    category: str = Field("", description="Marketplace category path")
    promoted_status: str = Field("", description="Current promoted listings status")
    is_promoted: bool = Field(False, description="Whether the listing is currently promoted")
    quantity_available: Optional[int] = None

    total_impressions: Optional[int] = Field(None, description="Total impressions")
    ctr: Optional[float] = Field(None, description="Click-through rate, in percent")
    quantity_sold: Optional[int] = None
    top20_pct: Optional[float] = Field(None, description="% of search impressions in the top 20 slots")
    conversion_rate: Optional[float] = Field(None, description="Quantity sold / page views, in percent")

    top20_promoted_impressions: Optional[int] = None
    top20_promoted_change_pct: Optional[float] = None
    top20_organic_impressions: Optional[int] = None
    top20_organic_change_pct: Optional[float] = None
    rest_search_impressions: Optional[int] = None
    total_search_impressions: Optional[int] = None

    non_search_promoted_impressions: Optional[int] = None
    non_search_promoted_change_pct: Optional[float] = None
    non_search_organic_impressions: Optional[int] = None
    non_search_organic_change_pct: Optional[float] = None

    total_promoted_impressions: Optional[int] = None
    total_offsite_impressions: Optional[int] = None
    total_organic_impressions: Optional[int] = None

    total_page_views: Optional[int] = None
    page_views_promoted: Optional[int] = None
    page_views_promoted_offsite: Optional[int] = None
    page_views_organic: Optional[int] = None
    page_views_organic_offsite: Optional[int] = None


class Recommendation(EngineModel):
    """Rule-based action for a listing"""

    text: str
    priority: Priority


class ScoredListing(Listing):
    """A listing with the derived fields added by the health scorer"""

    health_score: int = Field(..., ge=0, le=100, description="Composite 0-100 quality score")
    health_badge: HealthBadge
    sport: str = Field("Other", description="Classified sport category")
    recommendation: Recommendation


class ReportPeriod(EngineModel):
    """Date range a report covers, as printed in its preamble"""

    start: str
    end: str


class Snapshot(EngineModel):
    """One full catalog export at a point in time. Never mutated by the engine."""

    id: str
    uploaded_at: datetime
    filename: str = "report.csv"
    report_period: Optional[ReportPeriod] = None
    listings: Tuple[Union[ScoredListing, Listing], ...] = ()

    @field_validator("uploaded_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive upload times are UTC so snapshots always order against each other"""
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v

    @property
    def listing_count(self) -> int:
        return len(self.listings)


def snapshot_id_for(filename: str, uploaded_at: datetime) -> str:
    """Deterministic snapshot id: same file + upload time -> same id."""
    digest = hashlib.sha1(f"{filename}|{uploaded_at.isoformat()}".encode("utf-8"))
    return digest.hexdigest()[:12]
