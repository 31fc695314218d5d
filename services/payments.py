"""
Stripe checkout webhook handling.
"""
import json
from typing import Optional

import stripe

from config import get_settings
from utils.logger import setup_api_logger

logger = setup_api_logger()

SIGNATURE_TOLERANCE = 300  # seconds


class WebhookSignatureError(Exception):
    pass


def verify_event(payload: bytes, signature: Optional[str]) -> dict:
    """Check the Stripe-Signature header and return the decoded event."""
    if not signature:
        raise WebhookSignatureError("Missing Stripe signature")
    secret = get_settings().stripe_webhook_secret
    if not secret:
        raise WebhookSignatureError("Webhook secret not configured")

    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookSignatureError("Payload is not valid UTF-8") from e
    try:
        stripe.WebhookSignature.verify_header(text, signature, secret, SIGNATURE_TOLERANCE)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(str(e)) from e
    try:
        event = json.loads(text)
    except ValueError as e:
        raise WebhookSignatureError("Malformed event payload") from e
    if not isinstance(event, dict):
        raise WebhookSignatureError("Malformed event payload")
    return event


def fetch_purchased_product_id(session_id: str) -> Optional[str]:
    """Product id of the first line item in a checkout session."""
    stripe.api_key = get_settings().stripe_secret_key
    line_items = stripe.checkout.Session.list_line_items(session_id, limit=1)
    if not line_items.data:
        return None
    price = line_items.data[0].price
    if price is None:
        return None
    product = price.product
    return product if isinstance(product, str) else getattr(product, "id", None)


class CheckoutUnavailableError(Exception):
    pass


def create_checkout_session(user_id: str, email: Optional[str] = None) -> str:
    """Start a Stripe Checkout for one credit pack and return its URL.

    The user id travels in the session metadata; the webhook reads it back.
    """
    settings = get_settings()
    if not settings.stripe_secret_key or not settings.stripe_price_id:
        raise CheckoutUnavailableError("Payments are not configured")

    params = {
        "mode": "payment",
        "line_items": [{"price": settings.stripe_price_id, "quantity": 1}],
        "client_reference_id": user_id,
        "metadata": {"user_id": user_id},
        "success_url": settings.checkout_success_url,
        "cancel_url": settings.checkout_cancel_url,
    }
    if email:
        params["customer_email"] = email

    stripe.api_key = settings.stripe_secret_key
    session = stripe.checkout.Session.create(**params)
    logger.info("Checkout session %s created for user %s", session.id, user_id)
    return session.url
