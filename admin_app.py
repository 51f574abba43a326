# admin_app.py
import os
from datetime import datetime

import requests
import streamlit as st


st.set_page_config(page_title="Sales Desk", layout="wide")

st.title("Sales Desk")
st.caption("Custom pricing requests from multi-location salons.")

# ----------------------------
# Config
# ----------------------------
API_BASE = os.environ.get("API_BASE", "http://localhost:8000").rstrip("/")
DEFAULT_LIMIT = int(os.environ.get("ADMIN_DEFAULT_LIMIT", "50"))

# ----------------------------
# Sidebar
# ----------------------------
with st.sidebar:
    st.subheader("Connection")
    st.write("API Base:")
    st.code(API_BASE)

    admin_key = st.text_input(
        "Admin API Key",
        type="password",
        value=os.environ.get("ADMIN_API_KEY", ""),
        help="This is the same value as API_KEY on the API service.",
    ).strip()

    st.divider()
    st.subheader("Filters")
    limit = st.number_input("Max rows", min_value=1, max_value=500, value=DEFAULT_LIMIT, step=10)
    outcome_filter = st.multiselect(
        "Outcome",
        options=["requires_quote", "incomplete", "priced"],
        default=["requires_quote", "incomplete"],
    )

    ping = st.button("🩺 Ping API")


# ----------------------------
# Helpers
# ----------------------------
def _fmt_dt(x) -> str:
    if not x:
        return ""
    try:
        return datetime.fromisoformat(x.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return str(x)


def api_get(path: str, *, params: dict | None = None) -> requests.Response:
    headers = {}
    if admin_key:
        headers["x-api-key"] = admin_key
    return requests.get(f"{API_BASE}{path}", headers=headers, params=params, timeout=30)


if ping:
    try:
        r = requests.get(f"{API_BASE}/health", timeout=10)
        st.success(f"API /health: {r.status_code} {r.text}")
    except requests.RequestException as e:
        st.error(f"API ping failed: {e}")

st.divider()

if not admin_key:
    st.info("Enter your **Admin API Key** in the sidebar to load quote requests.")
    st.stop()

# ----------------------------
# Load requests
# ----------------------------
with st.spinner("Loading quote requests..."):
    try:
        r = api_get("/admin/quote-requests", params={"limit": int(limit)})
    except requests.RequestException as e:
        st.error(f"Failed to load quote requests: {e}")
        st.stop()

if r.status_code == 401:
    st.error("Unauthorized (401). Your Admin API Key is wrong or not being sent.")
    st.stop()

if r.status_code != 200:
    st.error(f"API error: {r.status_code}")
    st.code(r.text)
    st.stop()

requests_list = [q for q in r.json().get("quote_requests", []) if q.get("outcome") in outcome_filter]

if not requests_list:
    st.warning("No quote requests match.")
    st.stop()

rows = [
    {
        "Received": _fmt_dt(q.get("created_at")),
        "Email": q.get("contact_email") or "",
        "Salon": q.get("salon_name") or "",
        "Plan": q.get("plan_id") or "",
        "Locations": q.get("total_locations"),
        "Computed": q.get("total_display") or "",
        "Outcome": q.get("outcome") or "",
        "Request ID": q.get("id") or "",
    }
    for q in requests_list
]

st.subheader(f"Quote requests ({len(rows)})")
st.dataframe(rows, use_container_width=True, hide_index=True)

selected = st.selectbox("Details for", options=[q["id"] for q in requests_list])
if selected:
    d = api_get(f"/admin/quote-requests/{selected}")
    if d.status_code == 200:
        detail = d.json()
        st.write(detail.get("message") or "_No message._")
        st.json(detail.get("quote") or {})
    else:
        st.error(f"API error: {d.status_code}")
