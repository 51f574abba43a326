import logging
import os
import uuid
from datetime import datetime, timezone
from html import escape
from typing import Optional

import stripe
from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

import pricing_config as cfg
from currency import format_breakdown_line, format_currency
from pricing_engine import PricingResult, format_plan_price, quote_chain_price
from tier_store import load_tiers

# DB (Postgres)
from sqlalchemy import create_engine, Column, String, Integer, DateTime, JSON, Text
from sqlalchemy.orm import declarative_base, sessionmaker

# Email (SendGrid)
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)


# ----------------------------
# App + config
# ----------------------------
app = FastAPI(title="Salon Plan Pricing API", version="1.0.0")

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.environ.get("ALLOWED_ORIGINS", "http://localhost:8501").split(",")
    if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Optional API key protection for admin routes (pricing + checkout stay public)
API_KEY = os.environ.get("API_KEY", "")

# Stripe config
stripe.api_key = os.environ.get("STRIPE_SECRET_KEY", "")
APP_BASE_URL = os.environ.get("APP_BASE_URL", "http://localhost:8501")

# DB config
DATABASE_URL = os.environ.get("DATABASE_URL", "")
Base = declarative_base()
engine = create_engine(DATABASE_URL, pool_pre_ping=True) if DATABASE_URL else None
SessionLocal = sessionmaker(bind=engine) if engine else None

# Email config
SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY", "")
FROM_EMAIL = os.environ.get("FROM_EMAIL", "billing@example.com")
SALES_EMAIL = os.environ.get("SALES_EMAIL", "sales@example.com")


# ----------------------------
# DB Model
# ----------------------------
class QuoteRequestRecord(Base):
    __tablename__ = "chain_quote_requests"

    id = Column(String, primary_key=True)  # uuid4
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    tenant_id = Column(String, nullable=True, index=True)
    contact_email = Column(String, nullable=False)
    salon_name = Column(String, nullable=True)
    message = Column(Text, nullable=True)

    plan_id = Column(String, nullable=False)
    currency = Column(String, nullable=False)
    total_locations = Column(Integer, nullable=False)
    outcome = Column(String, nullable=False)  # priced / requires_quote / incomplete

    quote_payload = Column(JSON, nullable=True)  # computed breakdown at request time


def init_db() -> None:
    if engine:
        Base.metadata.create_all(bind=engine)


init_db()


# ----------------------------
# Helpers
# ----------------------------
def _require_api_key(x_api_key: Optional[str]) -> None:
    if API_KEY:
        if not x_api_key or x_api_key != API_KEY:
            raise HTTPException(status_code=401, detail="Unauthorized")


def _send_email(to_email: str, subject: str, html: str) -> None:
    # Allow running without email configured
    if not SENDGRID_API_KEY:
        logger.info("SENDGRID_API_KEY not set; skipping email to %s.", to_email)
        return

    msg = Mail(
        from_email=FROM_EMAIL,
        to_emails=to_email,
        subject=subject,
        html_content=html,
    )
    SendGridAPIClient(SENDGRID_API_KEY).send(msg)


def _db_required() -> None:
    if not SessionLocal:
        raise HTTPException(status_code=500, detail="DB not configured (missing DATABASE_URL).")


def _quote(plan_id: str, currency: str, total_locations: int) -> PricingResult:
    cur = currency.upper()
    try:
        return quote_chain_price(plan_id, cur, total_locations, load_tiers(plan_id, cur))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _quote_response(result: PricingResult, currency: str) -> dict:
    cur = currency.upper()
    return {
        **result.as_dict(),
        "currency": cur,
        "total_display": format_currency(result.total, cur),
    }


# ----------------------------
# Request models
# ----------------------------
class ChainQuoteRequest(BaseModel):
    plan_id: str = cfg.CHAIN_PLAN_ID
    currency: str = cfg.DEFAULT_CURRENCY
    total_locations: int = Field(default=1, le=cfg.MAX_LOCATIONS)


class CheckoutCreateRequest(ChainQuoteRequest):
    tenant_id: str
    customer_email: Optional[str] = None
    billing_cycle: str = "monthly"


class ContactSalesRequest(ChainQuoteRequest):
    contact_email: str
    salon_name: Optional[str] = None
    tenant_id: Optional[str] = None
    message: Optional[str] = None


# ----------------------------
# Routes
# ----------------------------
@app.get("/health")
def health():
    return {"ok": True}


@app.get("/plans")
def list_plans(currency: str = cfg.DEFAULT_CURRENCY):
    cur = currency.upper()
    if cur not in cfg.ENABLED_CURRENCIES:
        raise HTTPException(status_code=400, detail=f"unsupported currency: {cur}")

    plans = []
    for plan_id, by_currency in cfg.PRICING.items():
        p = by_currency[cur]
        monthly = format_plan_price(plan_id, cur, "monthly")
        annual = format_plan_price(plan_id, cur, "annual")
        plans.append(
            {
                "plan_id": plan_id,
                "description": cfg.PLAN_DESCRIPTIONS.get(plan_id, ""),
                "features": cfg.PLAN_FEATURES.get(plan_id, []),
                "monthly_price": p["monthly"],
                "annual_price": p["annual"],
                "effective_monthly": p["effective_monthly"],
                "monthly_display": format_currency(monthly["price"], cur) + monthly["period"],
                "annual_display": format_currency(annual["price"], cur) + annual["period"],
                "annual_savings": annual.get("savings"),
            }
        )

    return {"currency": cur, "trial_days": cfg.TRIAL_DAYS, "plans": plans}


@app.get("/plans/{plan_id}/tiers")
def list_tiers(plan_id: str, currency: str = cfg.DEFAULT_CURRENCY):
    if plan_id not in cfg.PRICING:
        raise HTTPException(status_code=404, detail=f"unknown plan: {plan_id}")

    tiers = load_tiers(plan_id, currency.upper())
    return {
        "plan_id": plan_id,
        "currency": currency.upper(),
        "tiers": [
            {
                "id": t.id,
                "tier_label": t.tier_label,
                "tier_min": t.tier_min,
                "tier_max": t.tier_max,
                "price_per_location": t.price_per_location,
                "is_custom": t.is_custom,
            }
            for t in tiers
        ],
    }


@app.post("/quote/chain")
def chain_quote(req: ChainQuoteRequest):
    result = _quote(req.plan_id, req.currency, req.total_locations)
    return _quote_response(result, req.currency)


@app.post("/checkout/create")
def checkout_create(req: CheckoutCreateRequest):
    """
    Starts a Stripe Checkout subscription for the quoted monthly total.
    Server recomputes pricing (do not trust client). Quotes that need a
    human (custom tier or uncovered locations) are refused.
    """
    if req.billing_cycle != "monthly":
        raise HTTPException(status_code=400, detail="Only monthly billing is available for location-based pricing.")

    result = _quote(req.plan_id, req.currency, req.total_locations)
    if not result.is_priced:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "This configuration needs a custom quote. Contact sales.",
                "outcome": result.outcome.value,
            },
        )

    if not stripe.api_key:
        raise HTTPException(status_code=500, detail="Stripe is not configured (missing STRIPE_SECRET_KEY).")

    cur = req.currency.upper()
    total_minor = int(round(result.total * 100))
    locations = max(req.total_locations, 1)

    session = stripe.checkout.Session.create(
        mode="subscription",
        success_url=f"{APP_BASE_URL}/?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{APP_BASE_URL}/",
        customer_email=req.customer_email or None,
        line_items=[
            {
                "price_data": {
                    "currency": cur.lower(),
                    "product_data": {"name": f"{req.plan_id.title()} plan ({locations} locations)"},
                    "unit_amount": total_minor,
                    "recurring": {"interval": "month"},
                },
                "quantity": 1,
            }
        ],
        metadata={
            "tenant_id": req.tenant_id,
            "plan_id": req.plan_id,
            "total_locations": str(locations),
            "billing_cycle": req.billing_cycle,
        },
        subscription_data={"metadata": {"tenant_id": req.tenant_id}},
    )

    logger.info("Checkout session %s created for tenant %s", session.id, req.tenant_id)
    return {"checkout_url": session.url, "session_id": session.id}


@app.post("/quote/contact-sales")
def contact_sales(req: ContactSalesRequest):
    """
    Records a custom-pricing request and notifies the sales inbox.
    """
    result = _quote(req.plan_id, req.currency, req.total_locations)
    payload = _quote_response(result, req.currency)

    request_id = None
    if SessionLocal:
        db = SessionLocal()
        try:
            rec = QuoteRequestRecord(
                id=str(uuid.uuid4()),
                tenant_id=req.tenant_id,
                contact_email=req.contact_email,
                salon_name=req.salon_name,
                message=req.message,
                plan_id=req.plan_id,
                currency=req.currency.upper(),
                total_locations=req.total_locations,
                outcome=result.outcome.value,
                quote_payload=payload,
            )
            db.add(rec)
            db.commit()
            request_id = rec.id
        finally:
            db.close()
    else:
        logger.warning("DATABASE_URL not set; quote request from %s not stored.", req.contact_email)

    logger.info("Quote request %s: %s locations (%s)", request_id, req.total_locations, result.outcome.value)

    breakdown_html = "<br>".join(escape(format_breakdown_line(line, payload["currency"])) for line in result.breakdown)
    _send_email(
        to_email=SALES_EMAIL,
        subject=f"Custom pricing request: {escape(req.salon_name or req.contact_email)}",
        html=f"""
        <p><b>Contact:</b> {escape(req.contact_email)}</p>
        <p><b>Salon:</b> {escape(req.salon_name or '-')}</p>
        <p><b>Plan:</b> {escape(req.plan_id)} / {escape(req.currency.upper())}</p>
        <p><b>Locations:</b> {req.total_locations}</p>
        <p><b>Computed so far:</b> {escape(payload['total_display'])} ({result.outcome.value})</p>
        <p>{breakdown_html}</p>
        <p>{escape(req.message or '')}</p>
        """,
    )

    return {"ok": True, "request_id": request_id, "outcome": result.outcome.value}


@app.get("/admin/quote-requests")
def admin_quote_requests(limit: int = 50, x_api_key: Optional[str] = Header(default=None)):
    _require_api_key(x_api_key)
    _db_required()

    db = SessionLocal()
    try:
        rows = (
            db.query(QuoteRequestRecord)
            .order_by(QuoteRequestRecord.created_at.desc())
            .limit(max(1, min(limit, 500)))
            .all()
        )
        return {
            "quote_requests": [
                {
                    "id": r.id,
                    "created_at": r.created_at.isoformat() if r.created_at else None,
                    "tenant_id": r.tenant_id,
                    "contact_email": r.contact_email,
                    "salon_name": r.salon_name,
                    "plan_id": r.plan_id,
                    "currency": r.currency,
                    "total_locations": r.total_locations,
                    "outcome": r.outcome,
                    "total_display": (r.quote_payload or {}).get("total_display"),
                }
                for r in rows
            ]
        }
    finally:
        db.close()


@app.get("/admin/quote-requests/{request_id}")
def admin_quote_request(request_id: str, x_api_key: Optional[str] = Header(default=None)):
    _require_api_key(x_api_key)
    _db_required()

    db = SessionLocal()
    try:
        r = db.query(QuoteRequestRecord).filter(QuoteRequestRecord.id == request_id).first()
        if not r:
            raise HTTPException(status_code=404, detail="Quote request not found")

        return {
            "id": r.id,
            "created_at": r.created_at.isoformat() if r.created_at else None,
            "tenant_id": r.tenant_id,
            "contact_email": r.contact_email,
            "salon_name": r.salon_name,
            "message": r.message,
            "plan_id": r.plan_id,
            "currency": r.currency,
            "total_locations": r.total_locations,
            "outcome": r.outcome,
            "quote": r.quote_payload,
        }
    finally:
        db.close()
