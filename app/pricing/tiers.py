"""
Tier table and resolve_tier(count) -> TierResolution.
Pure functions, no I/O: the caller fetches the verified-sales count.
"""
from __future__ import annotations

from typing import Sequence

from app.pricing.models import CurrentTier, PricingTier, TierPreview, TierResolution

# Full price: 99 / 199 / 399 baht
DEFAULT_TIERS: tuple[PricingTier, ...] = (
    PricingTier(
        name="Tier 1: LAUNCH SPECIAL",
        discount=80,
        min_sales=0,
        max_sales=29,
        prices={"basic": 20, "premium": 40, "ultimate": 80},
        label="🔥 LAUNCH WEEK - 80% OFF",
        urgency="EXTREME",
    ),
    PricingTier(
        name="Tier 2: EARLY BIRD",
        discount=70,
        min_sales=30,
        max_sales=79,
        prices={"basic": 30, "premium": 60, "ultimate": 120},
        label="⚡ EARLY BIRD - 70% OFF",
        urgency="HIGH",
    ),
    PricingTier(
        name="Tier 3: HALF PRICE",
        discount=50,
        min_sales=80,
        max_sales=129,
        prices={"basic": 50, "premium": 100, "ultimate": 200},
        label="💎 HALF PRICE - 50% OFF",
        urgency="MEDIUM",
    ),
    PricingTier(
        name="Tier 4: SPECIAL OFFER",
        discount=30,
        min_sales=130,
        max_sales=199,
        prices={"basic": 70, "premium": 140, "ultimate": 280},
        label="🌟 SPECIAL - 30% OFF",
        urgency="LOW",
    ),
    PricingTier(
        name="Tier 5: FINAL DISCOUNT",
        discount=15,
        min_sales=200,
        max_sales=299,
        prices={"basic": 85, "premium": 170, "ultimate": 340},
        label="✨ FINAL DISCOUNT - 15% OFF",
        urgency="LOW",
    ),
    PricingTier(
        name="Tier 6: FULL PRICE",
        discount=0,
        min_sales=300,
        max_sales=999999,
        prices={"basic": 99, "premium": 199, "ultimate": 399},
        label="👑 PREMIUM SERVICE",
        urgency="NONE",
    ),
)


def validate_tiers(tiers: Sequence[PricingTier]) -> None:
    """
    Check that the table tiles [0, last.max_sales] in ascending order.

    Raises:
        ValueError: empty table, first tier not starting at 0, min > max,
            a gap or an overlap between neighbours.
    """
    if not tiers:
        raise ValueError("Tier table is empty")
    if tiers[0].min_sales != 0:
        raise ValueError(f"First tier must start at 0, got {tiers[0].min_sales}")
    for tier in tiers:
        if tier.min_sales > tier.max_sales:
            raise ValueError(f"{tier.name}: min_sales > max_sales")
    for prev, cur in zip(tiers, tiers[1:]):
        if cur.min_sales != prev.max_sales + 1:
            kind = "gap" if cur.min_sales > prev.max_sales + 1 else "overlap"
            raise ValueError(f"Tier {kind} between {prev.name!r} and {cur.name!r}")


def find_tier_index(count: int, tiers: Sequence[PricingTier]) -> int:
    """Index of the first tier containing count; last tier if none does."""
    for i, tier in enumerate(tiers):
        if tier.contains(count):
            return i
    return len(tiers) - 1


def resolve_tier(count: int, tiers: Sequence[PricingTier] = DEFAULT_TIERS) -> TierResolution:
    """
    Map a verified-sales count to its tier, progress inside it and the next tier.

    Derived fields are not clamped: a count that moved past the tier between
    the count query and this call yields negative spots_remaining.
    """
    index = find_tier_index(count, tiers)
    tier = tiers[index]
    current = CurrentTier(
        **tier.model_dump(),
        spots_remaining=tier.max_sales - count + 1,
        tier_capacity=tier.max_sales - tier.min_sales + 1,
        tier_progress=count - tier.min_sales,
    )

    next_tier = None
    if index < len(tiers) - 1:
        nxt = tiers[index + 1]
        next_tier = TierPreview(
            name=nxt.name,
            prices=nxt.prices,
            discount=nxt.discount,
            min_sales=nxt.min_sales,
        )

    return TierResolution(
        total_sales=count,
        current_tier=current,
        next_tier=next_tier,
        all_tiers=list(tiers),
    )


validate_tiers(DEFAULT_TIERS)
