"""
DTO pricing: PricingTier (one row of the tier table), TierPreview, TierResolution.
Wire names are camelCase (frontend contract); Python attributes stay snake_case.
"""
from __future__ import annotations

from pydantic import ConfigDict, Field

from app.schemas.base import CamelModel


class _CamelModel(CamelModel):
    model_config = ConfigDict(frozen=True)


class PricingTier(_CamelModel):
    """Named range of cumulative verified sales with its prices."""

    name: str
    discount: int = Field(..., ge=0, le=100, description="Discount in percent vs full price")
    min_sales: int = Field(..., ge=0)
    max_sales: int = Field(..., ge=0, description="Inclusive upper bound")
    prices: dict[str, int] = Field(..., description="Package level -> price in baht")
    label: str
    urgency: str  # EXTREME | HIGH | MEDIUM | LOW | NONE

    def contains(self, count: int) -> bool:
        return self.min_sales <= count <= self.max_sales


class TierPreview(_CamelModel):
    """What the frontend shows about the tier that comes after the current one."""

    name: str
    prices: dict[str, int]
    discount: int
    min_sales: int


class CurrentTier(PricingTier):
    spots_remaining: int
    tier_capacity: int
    tier_progress: int


class TierResolution(_CamelModel):
    total_sales: int
    current_tier: CurrentTier
    next_tier: TierPreview | None = None
    all_tiers: list[PricingTier]
