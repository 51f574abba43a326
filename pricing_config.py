# pricing_config.py
"""
Plan + pricing catalog. Every surface (API, pricing page, admin) reads from here.
"""

DEFAULT_CURRENCY = "USD"

TRIAL_DAYS = 14

BILLING_CYCLES = ("monthly", "annual")

BASE_TIER_LABEL = "Base (1 location)"

# ============================================================
# 1) PLAN PRICES (per currency)
# annual == 0 means the plan is monthly-only
# ============================================================
PRICING = {
    "solo": {
        "USD": {"monthly": 15, "annual": 158.40, "effective_monthly": 13.20},
        "NGN": {"monthly": 12000, "annual": 126720, "effective_monthly": 10560},
        "GHS": {"monthly": 180, "annual": 1900.80, "effective_monthly": 158.40},
    },
    "studio": {
        "USD": {"monthly": 30, "annual": 316.80, "effective_monthly": 26.40},
        "NGN": {"monthly": 15000, "annual": 158400, "effective_monthly": 13200},
        "GHS": {"monthly": 360, "annual": 3801.60, "effective_monthly": 316.80},
    },
    "chain": {
        "USD": {"monthly": 45, "annual": 0, "effective_monthly": 45},
        "NGN": {"monthly": 35000, "annual": 0, "effective_monthly": 35000},
        "GHS": {"monthly": 540, "annual": 0, "effective_monthly": 540},
    },
}

# ============================================================
# 2) CURRENCY TOGGLES
# ============================================================
CURRENCY_ENABLED = {
    "USD": True,
    "NGN": True,
    "GHS": True,
}

# Drop disabled currencies from every plan
PRICING = {
    plan: {cur: p for cur, p in by_currency.items() if CURRENCY_ENABLED.get(cur, False)}
    for plan, by_currency in PRICING.items()
}

ENABLED_CURRENCIES = [cur for cur, on in CURRENCY_ENABLED.items() if on]

# ============================================================
# 3) CHAIN PLAN: ADDITIONAL LOCATIONS
# tier_min / tier_max are ranks of *additional* locations
# (rank 1 == the 2nd location overall). price None == contact sales.
# ============================================================
CHAIN_PLAN_ID = "chain"

# Upper bound on locations per quote
MAX_LOCATIONS = 10_000

CHAIN_ADDITIONAL_LOCATION_TIERS = [
    {
        "label": "2–3 locations",
        "tier_min": 1,
        "tier_max": 2,
        "price": {"USD": 30, "NGN": 25000, "GHS": 360},
    },
    {
        "label": "4–10 locations",
        "tier_min": 3,
        "tier_max": 9,
        "price": {"USD": 20, "NGN": 18000, "GHS": 240},
    },
    {
        "label": "11+ locations",
        "tier_min": 10,
        "tier_max": None,
        "price": None,
    },
]

# ============================================================
# 4) MARKETING COPY
# ============================================================
PLAN_FEATURES = {
    "solo": [
        "1 location",
        "Owner + 1 helper",
        "Unlimited appointments",
        "Basic reports",
        "30 free messages/month",
    ],
    "studio": [
        "1 location",
        "Up to 10 staff",
        "Advanced scheduling",
        "Full analytics",
        "100 free messages/month",
        "Online booking",
        "Customer purse",
    ],
    "chain": [
        "Unlimited locations",
        "Unlimited staff",
        "Multi-location management",
        "Advanced analytics",
        "500 free messages/month",
        "Priority support",
        "API access",
    ],
}

PLAN_DESCRIPTIONS = {
    "solo": "Perfect for independent stylists",
    "studio": "For growing salons with a small team",
    "chain": "For multi-location businesses",
}

# Markets without a local price list are billed in USD
COUNTRY_CURRENCY = {
    "NG": "NGN",
    "GH": "GHS",
    "US": "USD",
    "GB": "USD",
    "KE": "USD",
    "ZA": "USD",
}
