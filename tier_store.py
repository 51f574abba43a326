# tier_store.py
"""
Additional-location tiers from the Supabase `additional_location_pricing` table.

Rows are validated before they reach the calculator. Any fetch or validation
failure degrades to an empty tier list, which prices as base-only.
"""
import logging
import os
from typing import List, Optional

import httpx
from postgrest.exceptions import APIError
from pydantic import BaseModel, Field, ValidationError, model_validator
from supabase import Client, create_client

import pricing_config as cfg
from pricing_engine import PricingTier, default_chain_tiers

logger = logging.getLogger(__name__)

TIER_TABLE = "additional_location_pricing"

SUPABASE_URL = (os.environ.get("SUPABASE_URL") or "").strip()
SUPABASE_ANON_KEY = (os.environ.get("SUPABASE_ANON_KEY") or "").strip()


class TierRow(BaseModel):
    id: str
    plan_id: str
    tier_label: str
    tier_min: int = Field(ge=1)
    tier_max: Optional[int] = None
    currency: str
    price_per_location: Optional[float] = Field(default=None, ge=0)
    is_custom: bool = False

    @model_validator(mode="after")
    def _check_range(self) -> "TierRow":
        if self.tier_max is not None and self.tier_max < self.tier_min:
            raise ValueError(f"tier_max ({self.tier_max}) is below tier_min ({self.tier_min})")
        return self

    def to_tier(self) -> PricingTier:
        return PricingTier(
            id=self.id,
            plan_id=self.plan_id,
            tier_label=self.tier_label,
            tier_min=self.tier_min,
            tier_max=self.tier_max,
            currency=self.currency,
            price_per_location=self.price_per_location,
            is_custom=self.is_custom,
        )


def supabase_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_ANON_KEY)


def sb() -> Client:
    if not supabase_configured():
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_ANON_KEY env vars.")
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)


def fetch_tiers(plan_id: str, currency: str = "USD", *, client: Optional[Client] = None) -> List[PricingTier]:
    if not plan_id:
        return []

    cur = (currency or cfg.DEFAULT_CURRENCY).upper()

    try:
        resp = (
            (client or sb())
            .table(TIER_TABLE)
            .select("*")
            .eq("plan_id", plan_id)
            .eq("currency", cur)
            .order("tier_min")
            .execute()
        )
        return [TierRow.model_validate(row).to_tier() for row in (resp.data or [])]
    except (APIError, httpx.HTTPError, RuntimeError) as e:
        logger.warning("Tier fetch failed for %s/%s: %s", plan_id, cur, e)
    except ValidationError as e:
        logger.warning("Invalid tier row for %s/%s: %s", plan_id, cur, e)

    return []


def load_tiers(plan_id: str, currency: str = "USD") -> List[PricingTier]:
    """
    Tiers for a plan/currency: live table when Supabase is configured,
    otherwise the catalog defaults (chain plan only).
    """
    if supabase_configured():
        return fetch_tiers(plan_id, currency)

    if plan_id == cfg.CHAIN_PLAN_ID:
        return default_chain_tiers((currency or cfg.DEFAULT_CURRENCY).upper(), plan_id)
    return []
