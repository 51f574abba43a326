"""
Tiered additional-location pricing tests.
"""

import pytest

from pricing_engine import (
    BreakdownLine,
    PricingOutcome,
    PricingTier,
    calculate_chain_price,
    default_chain_tiers,
    format_plan_price,
    get_currency_for_country,
    quote_chain_price,
)


def _tier(tier_min, tier_max, price=None, is_custom=False, label=None):
    return PricingTier(
        id=f"t{tier_min}",
        plan_id="chain",
        tier_label=label or f"{tier_min}-{tier_max if tier_max is not None else '+'}",
        tier_min=tier_min,
        tier_max=tier_max,
        currency="USD",
        price_per_location=price,
        is_custom=is_custom,
    )


@pytest.fixture
def two_paid_tiers():
    return [_tier(1, 3, 30), _tier(4, 10, 20)]


@pytest.fixture
def paid_then_custom():
    return [_tier(1, 3, 30), _tier(4, None, is_custom=True, label="Custom")]


class TestBaseOnly:
    """Single-location and degenerate counts."""

    def test_one_location_is_base_price(self, two_paid_tiers):
        result = calculate_chain_price(45, 1, two_paid_tiers)

        assert result.total == 45
        assert len(result.breakdown) == 1
        assert result.outcome == PricingOutcome.PRICED

    def test_base_line_shape(self):
        result = calculate_chain_price(45, 1, [])

        assert result.breakdown[0] == BreakdownLine(
            tier="Base (1 location)", locations=1, price_per_location=45, subtotal=45
        )

    @pytest.mark.parametrize("count", [0, -5])
    def test_zero_and_negative_counts_match_one(self, two_paid_tiers, count):
        assert calculate_chain_price(45, count, two_paid_tiers) == calculate_chain_price(45, 1, two_paid_tiers)

    def test_base_line_emitted_for_free_plan(self):
        result = calculate_chain_price(0, 1, [])

        assert result.total == 0
        assert result.breakdown[0].subtotal == 0


class TestTierWalk:
    """Distribution of additional locations across tiers."""

    def test_full_coverage_sums_correctly(self, two_paid_tiers):
        result = calculate_chain_price(45, 6, two_paid_tiers)

        assert result.total == 45 + 3 * 30 + 2 * 20 == 175
        assert [(l.tier, l.locations, l.subtotal) for l in result.breakdown[1:]] == [
            ("1-3", 3, 90),
            ("4-10", 2, 40),
        ]
        assert result.is_priced

    def test_fills_first_tier_partially(self, two_paid_tiers):
        result = calculate_chain_price(45, 3, two_paid_tiers)

        assert result.total == 105
        assert len(result.breakdown) == 2
        assert result.breakdown[1].locations == 2

    def test_unbounded_tier_takes_everything(self):
        result = calculate_chain_price(10, 101, [_tier(1, None, 2)])

        assert result.total == 10 + 100 * 2
        assert result.breakdown[1].locations == 100

    def test_input_order_does_not_matter(self, two_paid_tiers):
        shuffled = list(reversed(two_paid_tiers))

        assert calculate_chain_price(45, 9, shuffled) == calculate_chain_price(45, 9, two_paid_tiers)

    def test_accepts_generator(self, two_paid_tiers):
        result = calculate_chain_price(45, 6, (t for t in two_paid_tiers))

        assert result.total == 175

    def test_no_rounding_inside_calculator(self):
        result = calculate_chain_price(0.1, 3, [_tier(1, None, 0.1)])

        assert result.total == 0.1 + 2 * 0.1

    def test_monotonic_in_location_count(self, paid_then_custom, two_paid_tiers):
        for tiers in (paid_then_custom, two_paid_tiers, []):
            totals = [calculate_chain_price(45, n, tiers).total for n in range(-2, 20)]
            assert totals == sorted(totals)
            assert min(totals) >= 45


class TestCustomTier:
    """Custom ("contact us") bands."""

    def test_custom_tier_halts_distribution(self, paid_then_custom):
        result = calculate_chain_price(45, 10, paid_then_custom)

        assert result.total == 135
        last = result.breakdown[-1]
        assert (last.tier, last.locations, last.price_per_location, last.subtotal) == ("Custom", 6, 0, 0)
        assert last.is_custom
        assert result.outcome == PricingOutcome.REQUIRES_QUOTE
        assert result.uncovered_locations == 0

    def test_tiers_after_custom_are_never_reached(self):
        tiers = [_tier(1, 1, 30), _tier(2, 2, is_custom=True), _tier(3, None, 5)]

        result = calculate_chain_price(45, 10, tiers)

        assert result.total == 75
        assert len(result.breakdown) == 3
        assert result.breakdown[-1].locations == 8

    def test_custom_tier_not_reached_when_count_fits(self, paid_then_custom):
        result = calculate_chain_price(45, 4, paid_then_custom)

        assert result.total == 135
        assert result.is_priced
        assert all(not l.is_custom for l in result.breakdown)

    def test_missing_price_is_treated_as_custom(self):
        result = calculate_chain_price(45, 3, [_tier(1, None, None)])

        assert result.total == 45
        assert result.breakdown[-1].is_custom
        assert result.requires_quote


class TestUnderCoverage:
    """Demand beyond the last tier."""

    def test_empty_tiers_prices_base_only(self):
        result = calculate_chain_price(45, 10, [])

        assert result.total == 45
        assert len(result.breakdown) == 1
        assert result.outcome == PricingOutcome.INCOMPLETE
        assert result.uncovered_locations == 9

    def test_excess_is_not_in_breakdown(self, two_paid_tiers):
        result = calculate_chain_price(45, 15, two_paid_tiers)

        assert result.total == 45 + 90 + 140
        assert sum(l.locations for l in result.breakdown) == 11
        assert result.uncovered_locations == 4
        assert result.requires_quote

    def test_as_dict_flags_unpriced(self, two_paid_tiers):
        data = calculate_chain_price(45, 15, two_paid_tiers).as_dict()

        assert data["outcome"] == "incomplete"
        assert data["requires_quote"] is True
        assert data["breakdown"][0]["tier"] == "Base (1 location)"


class TestCatalogHelpers:
    """Plan catalog lookups."""

    def test_default_chain_tiers_usd(self):
        tiers = default_chain_tiers("USD")

        assert [(t.tier_min, t.tier_max, t.price_per_location, t.is_custom) for t in tiers] == [
            (1, 2, 30, False),
            (3, 9, 20, False),
            (10, None, None, True),
        ]

    def test_quote_chain_price_with_catalog_tiers(self):
        # 1 base + 2 at 30 + 7 at 20 + 2 custom
        result = quote_chain_price("chain", "USD", 12)

        assert result.total == 45 + 60 + 140
        assert result.breakdown[-1].locations == 2
        assert result.outcome == PricingOutcome.REQUIRES_QUOTE

    def test_quote_chain_price_ten_locations_is_priced(self):
        result = quote_chain_price("chain", "NGN", 10)

        assert result.total == 35000 + 2 * 25000 + 7 * 18000
        assert result.is_priced

    def test_single_location_plan_beyond_one_is_incomplete(self):
        result = quote_chain_price("solo", "USD", 2)

        assert result.total == 15
        assert result.outcome == PricingOutcome.INCOMPLETE

    def test_unknown_plan_raises(self):
        with pytest.raises(ValueError, match="unknown plan"):
            quote_chain_price("enterprise", "USD", 2)

    def test_unknown_currency_raises(self):
        with pytest.raises(ValueError, match="no price for currency"):
            quote_chain_price("chain", "EUR", 2)

    def test_format_plan_price_monthly(self):
        assert format_plan_price("studio", "USD") == {"price": 30, "period": "/month"}

    def test_format_plan_price_annual_savings(self):
        p = format_plan_price("solo", "USD", "annual")

        assert p["price"] == 13.20
        assert p["period"] == "/mo (billed annually)"
        assert p["savings"] == "Save 12%"

    def test_annual_falls_back_to_monthly_when_unavailable(self):
        assert format_plan_price("chain", "GHS", "annual") == {"price": 540, "period": "/month"}

    def test_bad_billing_cycle_raises(self):
        with pytest.raises(ValueError):
            format_plan_price("solo", "USD", "weekly")

    @pytest.mark.parametrize(
        "country,expected",
        [("NG", "NGN"), ("gh", "GHS"), ("US", "USD"), ("KE", "USD"), ("FR", "USD"), ("", "USD")],
    )
    def test_currency_for_country(self, country, expected):
        assert get_currency_for_country(country) == expected
