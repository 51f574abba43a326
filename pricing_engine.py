# pricing_engine.py
import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, Iterable, List, Optional, Tuple

import pricing_config as cfg


@dataclass(frozen=True)
class PricingTier:
    id: str
    plan_id: str
    tier_label: str
    tier_min: int
    tier_max: Optional[int]
    currency: str
    price_per_location: Optional[float]
    is_custom: bool = False


@dataclass(frozen=True)
class BreakdownLine:
    tier: str
    locations: int
    price_per_location: float
    subtotal: float
    is_custom: bool = False


class PricingOutcome(str, Enum):
    PRICED = "priced"
    REQUIRES_QUOTE = "requires_quote"  # a custom ("contact us") tier was reached
    INCOMPLETE = "incomplete"          # tiers ran out before all locations were covered


@dataclass(frozen=True)
class PricingResult:
    total: float
    breakdown: Tuple[BreakdownLine, ...]
    outcome: PricingOutcome = PricingOutcome.PRICED
    uncovered_locations: int = 0

    @property
    def is_priced(self) -> bool:
        return self.outcome == PricingOutcome.PRICED

    @property
    def requires_quote(self) -> bool:
        return self.outcome != PricingOutcome.PRICED

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "breakdown": [asdict(line) for line in self.breakdown],
            "outcome": self.outcome.value,
            "uncovered_locations": self.uncovered_locations,
            "requires_quote": self.requires_quote,
        }


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValueError(msg)


def _is_custom(tier: PricingTier) -> bool:
    # a non-custom tier without a unit price can't be priced either
    return tier.is_custom or tier.price_per_location is None


def calculate_chain_price(
    base_price: float,
    location_count: int,
    tiers: Iterable[PricingTier],
) -> PricingResult:
    """
    Price a plan for `location_count` locations.

    The base price covers the first location. Every additional location has a
    rank (rank 1 == 2nd location) and is charged by the tier covering that rank,
    walking tiers in ascending `tier_min` order.

    A custom tier absorbs all remaining locations at zero and ends the walk
    (outcome REQUIRES_QUOTE). If tiers run out first, the leftover locations
    are left unpriced and reported in `uncovered_locations` (outcome INCOMPLETE).
    Counts below 2 return the base line only. Never raises.
    """
    total = base_price
    breakdown: List[BreakdownLine] = [
        BreakdownLine(
            tier=cfg.BASE_TIER_LABEL,
            locations=1,
            price_per_location=base_price,
            subtotal=base_price,
        )
    ]

    if location_count <= 1:
        return PricingResult(total=total, breakdown=tuple(breakdown))

    remaining = location_count - 1
    outcome = PricingOutcome.PRICED

    for tier in sorted(tiers, key=lambda t: t.tier_min):
        if remaining <= 0:
            break

        if _is_custom(tier):
            breakdown.append(
                BreakdownLine(
                    tier=tier.tier_label,
                    locations=remaining,
                    price_per_location=0,
                    subtotal=0,
                    is_custom=True,
                )
            )
            outcome = PricingOutcome.REQUIRES_QUOTE
            remaining = 0
            break

        tier_max = math.inf if tier.tier_max is None else tier.tier_max
        capacity = tier_max - tier.tier_min + 1
        locations_in_tier = int(min(remaining, capacity))
        if locations_in_tier <= 0:
            continue

        subtotal = locations_in_tier * tier.price_per_location
        total += subtotal
        breakdown.append(
            BreakdownLine(
                tier=tier.tier_label,
                locations=locations_in_tier,
                price_per_location=tier.price_per_location,
                subtotal=subtotal,
            )
        )
        remaining -= locations_in_tier

    if remaining > 0:
        outcome = PricingOutcome.INCOMPLETE

    return PricingResult(
        total=total,
        breakdown=tuple(breakdown),
        outcome=outcome,
        uncovered_locations=remaining,
    )


# ----------------------------
# Catalog helpers
# ----------------------------
def _plan_prices(plan_id: str, currency: str) -> Dict[str, float]:
    _require(plan_id in cfg.PRICING, f"unknown plan: {plan_id}")
    _require(
        currency in cfg.PRICING[plan_id],
        f"no price for currency {currency} on plan {plan_id}",
    )
    return cfg.PRICING[plan_id][currency]


def default_chain_tiers(currency: str, plan_id: str = cfg.CHAIN_PLAN_ID) -> List[PricingTier]:
    tiers = []
    for i, t in enumerate(cfg.CHAIN_ADDITIONAL_LOCATION_TIERS, start=1):
        prices = t["price"]
        price = None if prices is None else prices.get(currency)
        tiers.append(
            PricingTier(
                id=f"{plan_id}-{currency.lower()}-{i}",
                plan_id=plan_id,
                tier_label=t["label"],
                tier_min=t["tier_min"],
                tier_max=t["tier_max"],
                currency=currency,
                price_per_location=price,
                is_custom=prices is None,
            )
        )
    return tiers


def quote_chain_price(
    plan_id: str,
    currency: str,
    location_count: int,
    tiers: Optional[Iterable[PricingTier]] = None,
) -> PricingResult:
    base_price = _plan_prices(plan_id, currency)["monthly"]
    if tiers is None:
        tiers = default_chain_tiers(currency, plan_id) if plan_id == cfg.CHAIN_PLAN_ID else []
    return calculate_chain_price(base_price, location_count, tiers)


def format_plan_price(plan_id: str, currency: str, billing_cycle: str = "monthly") -> Dict[str, Any]:
    _require(billing_cycle in cfg.BILLING_CYCLES, f"unsupported billing cycle: {billing_cycle}")
    p = _plan_prices(plan_id, currency)

    if billing_cycle == "annual" and p["annual"] > 0:
        monthly_savings = p["monthly"] - p["effective_monthly"]
        savings_percent = round((monthly_savings / p["monthly"]) * 100)
        return {
            "price": p["effective_monthly"],
            "period": "/mo (billed annually)",
            "savings": f"Save {savings_percent}%",
        }

    return {"price": p["monthly"], "period": "/month"}


def get_currency_for_country(country_code: str) -> str:
    return cfg.COUNTRY_CURRENCY.get((country_code or "").upper(), cfg.DEFAULT_CURRENCY)


if __name__ == "__main__":
    result = quote_chain_price("chain", "USD", 12)
    for line in result.breakdown:
        print(f"{line.tier:<20} {line.locations:>3} x {line.price_per_location:>8} = {line.subtotal}")
    print("TOTAL:", result.total, result.outcome.value)
