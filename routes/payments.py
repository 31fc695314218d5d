from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import Optional

import stripe

from database import get_db
from services.credit_ledger import ProfileNotFoundError, UnknownProductError, add_credits, credits_for_product
from services.payments import WebhookSignatureError, fetch_purchased_product_id, verify_event
from utils.logger import setup_api_logger

logger = setup_api_logger()
router = APIRouter(prefix="/payments", tags=["Payments"])


def handle_checkout_completed(db: Session, session: dict) -> PlainTextResponse:
    user_id = (session.get("metadata") or {}).get("user_id")
    if not user_id:
        logger.error("Webhook Error: Missing user_id in session metadata (session %s)", session.get("id"))
        return PlainTextResponse("Missing user_id", status_code=400)

    try:
        product_id = fetch_purchased_product_id(session["id"])
        credits = credits_for_product(product_id)
    except UnknownProductError as e:
        logger.error("Webhook Error: %s", e)
        return PlainTextResponse("Unknown product", status_code=400)
    except stripe.StripeError as e:
        logger.error("Stripe Error: could not list line items for %s: %s", session.get("id"), e)
        return PlainTextResponse("Line item lookup failed", status_code=502)

    logger.info("Processing credit purchase for user %s: +%d credits", user_id, credits)
    try:
        add_credits(db, user_id, credits, checkout_session_id=session["id"])
    except ProfileNotFoundError as e:
        logger.error("Webhook Error: %s", e)
        return PlainTextResponse("Profile not found", status_code=404)
    return PlainTextResponse("Success", status_code=200)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    payload = await request.body()
    try:
        event = verify_event(payload, stripe_signature)
    except WebhookSignatureError as e:
        logger.error("Webhook signature verification failed: %s", e)
        return PlainTextResponse("Webhook signature verification failed", status_code=400)

    event_type = event.get("type")
    logger.info("Received Stripe event: %s", event_type)
    if event_type == "checkout.session.completed":
        session = (event.get("data") or {}).get("object")
        if not isinstance(session, dict) or not session.get("id"):
            logger.error("Webhook Error: checkout event %s has no session object", event.get("id"))
            return PlainTextResponse("Malformed event", status_code=400)
        return handle_checkout_completed(db, session)

    logger.info("Unhandled event type: %s", event_type)
    return PlainTextResponse("Unhandled event type", status_code=200)
