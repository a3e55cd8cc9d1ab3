"""
Shared pydantic base for every engine record.

Python attributes are snake_case; serialized keys are camelCase
(`itemId`, `healthScore`, ...) so `model_dump(by_alias=True)` produces the
plain records the presentation layer consumes.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

HealthBadge = Literal["green", "yellow", "red"]
Priority = Literal["high", "medium", "low", "good"]
TrendDirection = Literal["up", "down", "stable"]
ComparisonStatus = Literal["new", "delisted", "continuing"]


class EngineModel(BaseModel):
    """Immutable record with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
