"""
pitcount_shared.models — Pydantic models matching each pipeline stage's rows.

All models provide:
  .model_validate(row: dict) -> Model
"""

from pitcount_shared.models.records import (
    EnrichedRecord,
    LongitudinalRecord,
    RegionRate,
)

__all__ = [
    "LongitudinalRecord",
    "EnrichedRecord",
    "RegionRate",
]
