"""
Dynamic pricing: tier table and tier resolution from the verified-sales count.
"""
from app.pricing.models import CurrentTier, PricingTier, TierPreview, TierResolution
from app.pricing.tiers import DEFAULT_TIERS, find_tier_index, resolve_tier, validate_tiers

__all__ = [
    "CurrentTier",
    "DEFAULT_TIERS",
    "PricingTier",
    "TierPreview",
    "TierResolution",
    "find_tier_index",
    "resolve_tier",
    "validate_tiers",
]
