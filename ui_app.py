import os

import requests
import streamlit as st

import pricing_config as cfg
from currency import CONTACT_SALES_TEXT, format_currency
from pricing_engine import format_plan_price, get_currency_for_country, quote_chain_price
from tier_store import load_tiers


API_BASE = os.environ.get("API_BASE", "http://localhost:8000").rstrip("/")
DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "US")

st.set_page_config(page_title="Plans & Pricing", layout="centered")

st.title("Plans & Pricing")
st.caption(f"{cfg.TRIAL_DAYS}-day free trial on every plan.")

default_currency = get_currency_for_country(DEFAULT_COUNTRY)
currency = st.selectbox(
    "Currency",
    options=cfg.ENABLED_CURRENCIES,
    index=cfg.ENABLED_CURRENCIES.index(default_currency) if default_currency in cfg.ENABLED_CURRENCIES else 0,
)
plan_id = st.selectbox(
    "Plan",
    options=list(cfg.PRICING.keys()),
    index=list(cfg.PRICING.keys()).index(cfg.CHAIN_PLAN_ID),
    format_func=lambda p: f"{p.title()} — {cfg.PLAN_DESCRIPTIONS.get(p, '')}",
)

with st.expander("What's included"):
    for feature in cfg.PLAN_FEATURES.get(plan_id, []):
        st.write(f"• {feature}")

locations = 1
if plan_id == cfg.CHAIN_PLAN_ID:
    locations = st.number_input("Number of locations", min_value=1, max_value=cfg.MAX_LOCATIONS, value=3, step=1)
else:
    annual = format_plan_price(plan_id, currency, "annual")
    if annual.get("savings"):
        st.caption(f"Annual billing: {format_currency(annual['price'], currency)}{annual['period']} ({annual['savings']})")

st.divider()
st.subheader("Monthly Estimate")

tiers = load_tiers(plan_id, currency)
result = quote_chain_price(plan_id, currency, int(locations), tiers)

rows = []
for line in result.breakdown:
    rows.append(
        {
            "Tier": line.tier,
            "Locations": line.locations,
            "Per location": CONTACT_SALES_TEXT if line.is_custom else format_currency(line.price_per_location, currency),
            "Subtotal": CONTACT_SALES_TEXT if line.is_custom else format_currency(line.subtotal, currency),
        }
    )
if result.uncovered_locations:
    rows.append(
        {
            "Tier": "Not covered by any tier",
            "Locations": result.uncovered_locations,
            "Per location": CONTACT_SALES_TEXT,
            "Subtotal": CONTACT_SALES_TEXT,
        }
    )

st.dataframe(rows, use_container_width=True, hide_index=True)

label = "Total per month" if result.is_priced else "Total per month (before custom pricing)"
st.metric(label, format_currency(result.total, currency))

st.divider()

if result.is_priced:
    tenant_id = st.text_input("Salon ID", help="Your workspace ID from the admin console.").strip()
    email = st.text_input("Billing email", placeholder="owner@salon.com").strip()

    if st.button("Start subscription"):
        if not tenant_id:
            st.error("Enter your Salon ID first.")
            st.stop()

        payload = {
            "plan_id": plan_id,
            "currency": currency,
            "total_locations": int(locations),
            "tenant_id": tenant_id,
            "customer_email": email or None,
        }

        try:
            r = requests.post(f"{API_BASE}/checkout/create", json=payload, timeout=30)

            if r.status_code != 200:
                st.error(f"Checkout API error: {r.status_code}")
                st.code(r.text)
                st.stop()

            checkout_url = r.json()["checkout_url"]

            st.markdown(
                f"<meta http-equiv='refresh' content='0; url={checkout_url}'>",
                unsafe_allow_html=True,
            )
            st.write("Redirecting to secure checkout…")

        except requests.RequestException as e:
            st.error(f"Checkout failed: {e}")
else:
    st.info("Pricing for this many locations is tailored to your business. Tell us about it and sales will reach out.")

    with st.form("contact_sales"):
        contact_email = st.text_input("Email").strip()
        salon_name = st.text_input("Salon name").strip()
        message = st.text_area("Anything we should know?")
        submitted = st.form_submit_button("Contact sales")

    if submitted:
        if not contact_email:
            st.error("Enter your email so we can reach you.")
            st.stop()

        payload = {
            "plan_id": plan_id,
            "currency": currency,
            "total_locations": int(locations),
            "contact_email": contact_email,
            "salon_name": salon_name or None,
            "message": message or None,
        }

        try:
            r = requests.post(f"{API_BASE}/quote/contact-sales", json=payload, timeout=30)
            if r.status_code != 200:
                st.error(f"API error: {r.status_code}")
                st.code(r.text)
                st.stop()
            st.success("Thanks! Our sales team will be in touch shortly.")
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")
