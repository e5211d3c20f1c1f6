import logging
import re

import stripe
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from mockview.config import (
    FRONTEND_URL,
    PRICE_PER_CREDIT_CENTS,
    STRIPE_SECRET_KEY,
    STRIPE_TEST_WEBHOOK_ENABLED,
    STRIPE_WEBHOOK_SECRET,
)
from mockview.database import get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.models.user import User
from mockview.responses import ApiError, success
from mockview.schemas.billing import CheckoutRequest, TestWebhookRequest
from mockview.services import credits as credit_service
from mockview.services.credits import CreditError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stripe", tags=["stripe"])

stripe.api_key = STRIPE_SECRET_KEY

_USER_ID_JUNK = re.compile(r"[^\w-]", re.ASCII)


def sanitize_user_id(raw) -> str:
    return _USER_ID_JUNK.sub("", str(raw or "").strip())


def parse_credits(raw) -> int:
    try:
        return int(float(raw or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


@router.post("/checkout")
async def create_checkout_session(
    payload: CheckoutRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Start a Stripe Checkout session for a credit pack."""
    try:
        session = stripe.checkout.Session.create(
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": "usd",
                        "product_data": {"name": f"{payload.credits} Interview Credits"},
                        "unit_amount": PRICE_PER_CREDIT_CENTS,
                    },
                    "quantity": payload.credits,
                }
            ],
            mode="payment",
            success_url=f"{FRONTEND_URL}/credits?status=success",
            cancel_url=f"{FRONTEND_URL}/credits?status=cancelled",
            metadata={"userId": current_user.id, "credits": str(payload.credits)},
        )
    except stripe.StripeError as e:
        logger.error("Stripe checkout error for %s: %s", current_user.id, e)
        raise ApiError.server_error("Failed to create checkout session")

    return {"id": session["id"], "url": session.get("url")}


@router.post("/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    """Credit the buyer once Stripe reports a completed checkout."""
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    try:
        event = stripe.Webhook.construct_event(payload, sig_header, STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error("Webhook signature error: %s", e)
        return PlainTextResponse(f"Webhook Error: {e}", status_code=status.HTTP_400_BAD_REQUEST)

    if event["type"] == "checkout.session.completed":
        session_id = event["data"]["object"]["id"]
        full_session = stripe.checkout.Session.retrieve(session_id)
        metadata = full_session.get("metadata") or {}
        user_id = sanitize_user_id(metadata.get("userId"))
        credits = parse_credits(metadata.get("credits"))

        if user_id and credits > 0:
            try:
                credit_service.add_credits(db, user_id, credits, "stripe_payment")
            except CreditError as e:
                logger.error("Error adding credits via webhook for %s (session %s): %s", user_id, session_id, e)
        else:
            logger.warning("Checkout session %s is missing userId or credits metadata", session_id)

    return {"received": True}


@router.post("/test-webhook")
async def stripe_test_webhook(payload: TestWebhookRequest, db: Session = Depends(get_db)):
    """Add credits without a Stripe event. Only enabled for local testing."""
    if not STRIPE_TEST_WEBHOOK_ENABLED:
        raise ApiError.not_found()

    logger.info("Test webhook: %d credits for %s", payload.credits, payload.user_id)

    if not db.query(User).filter(User.id == payload.user_id).first():
        raise ApiError.not_found("User not found")

    balance = credit_service.add_credits(db, payload.user_id, payload.credits, "test_webhook")
    return success({"credits": balance})
