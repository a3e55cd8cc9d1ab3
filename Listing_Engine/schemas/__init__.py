"""
Pydantic schemas for engine inputs and outputs
"""

from .base import ComparisonStatus, EngineModel, HealthBadge, Priority, TrendDirection
from .listing import Listing, Recommendation, ReportPeriod, ScoredListing, Snapshot, snapshot_id_for
from .keyword import KeywordAggregate, KeywordTrend
from .history import (
    ComparisonRow, ComparisonSide, DeclinedListing, KPIComparison, ListingChange,
    MetricDelta, TimelineEntry, TimelinePoint, TrendPoint
)
from .cogs import (
    CogsSettings, ListingProfit, Material, PortfolioProfit, PricedListing,
    ShippingMethod, ShippingRules
)

__all__ = [
    # Shared
    "EngineModel", "HealthBadge", "Priority", "TrendDirection", "ComparisonStatus",
    # Listing schemas
    "Listing", "ScoredListing", "Recommendation", "ReportPeriod", "Snapshot", "snapshot_id_for",
    # Keyword schemas
    "KeywordAggregate", "KeywordTrend",
    # History schemas
    "TimelinePoint", "TimelineEntry", "ListingChange", "DeclinedListing",
    "TrendPoint", "MetricDelta", "KPIComparison", "ComparisonSide", "ComparisonRow",
    # COGS schemas
    "ShippingMethod", "ShippingRules", "Material", "CogsSettings",
    "PricedListing", "ListingProfit", "PortfolioProfit",
]
