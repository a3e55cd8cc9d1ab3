"""
Pydantic schemas for title keyword aggregates
"""

from typing import Optional

from pydantic import Field

from .base import EngineModel, TrendDirection


class KeywordAggregate(EngineModel):
    """Catalog-wide metrics for one normalized title token"""

    keyword: str = Field(..., min_length=1)
    appearances: int = Field(..., ge=1, description="Listings containing the token (once per listing)")
    total_impressions: int = 0
    avg_impressions: float = 0.0
    total_page_views: int = 0
    avg_ctr: float = Field(0.0, description="Impression-weighted CTR")
    total_sold: int = 0
    conversion_rate: Optional[float] = Field(None, description="Sold / page views * 100; None without page views")
    avg_health_score: float = 0.0


class KeywordTrend(KeywordAggregate):
    """
    Cross-sectional standing of a keyword against the current report.

    `deviation_pct` is the distance of `avg_impressions` from the report's
    median keyword; it is NOT a period-over-period change.
    """

    deviation_pct: float
    trend_direction: TrendDirection
