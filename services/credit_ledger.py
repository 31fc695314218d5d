"""
Per-user credit balance.

Every balance change is a single conditional UPDATE so concurrent requests
(duplicate submissions, webhook deliveries) can never drive a balance below zero.
"""
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import get_settings
from models.CreditTransaction import CreditTransaction
from models.Profile import Profile
from utils.logger import setup_api_logger

logger = setup_api_logger()

# Stripe product id -> credits granted by one purchase
PRODUCT_CREDIT_MAP = {
    "prod_TjithQuJxJ9DGQ": 15,  # Traveler Pack
}


class UnknownProductError(Exception):
    def __init__(self, product_id: Optional[str]):
        super().__init__(f"Unknown product ID: {product_id}")
        self.product_id = product_id


class ProfileNotFoundError(Exception):
    def __init__(self, user_id: str):
        super().__init__(f"Profile not found: {user_id}")
        self.user_id = user_id


def credits_for_product(product_id: Optional[str]) -> int:
    credits = PRODUCT_CREDIT_MAP.get(product_id or "")
    if not credits:
        raise UnknownProductError(product_id)
    return credits


def get_or_create_profile(db: Session, user_id: str, email: Optional[str] = None,
                          full_name: Optional[str] = None) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile:
        if email and profile.email != email:
            profile.email = email
            db.commit()
        return profile

    profile = Profile(id=user_id, email=email, full_name=full_name, credits=get_settings().signup_credits)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # created by a concurrent request
        db.rollback()
        return db.query(Profile).filter(Profile.id == user_id).one()
    db.refresh(profile)
    logger.info("Created profile %s with %d credits", user_id, profile.credits)
    return profile


def get_balance(db: Session, user_id: str) -> int:
    credits = db.query(Profile.credits).filter(Profile.id == user_id).scalar()
    return credits or 0


def deduct_credit(db: Session, user_id: str) -> bool:
    """Take one credit. False, with nothing changed, when the balance is zero."""
    result = db.execute(
        update(Profile)
        .where(Profile.id == user_id, Profile.credits > 0)
        .values(credits=Profile.credits - 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        return False

    db.add(CreditTransaction(user_id=user_id, type="usage", amount=-1, description="Trip generation"))
    db.commit()
    db.expire_all()
    return True


def add_credits(db: Session, user_id: str, amount: int, checkout_session_id: Optional[str] = None) -> int:
    """Credit a purchase and record it. Returns the new balance.

    A checkout session that was already credited is not credited again.
    """
    if checkout_session_id:
        seen = (
            db.query(CreditTransaction.id)
            .filter(CreditTransaction.stripe_checkout_session_id == checkout_session_id)
            .first()
        )
        if seen:
            logger.warning("Checkout session %s already credited; skipping", checkout_session_id)
            return get_balance(db, user_id)

    result = db.execute(
        update(Profile)
        .where(Profile.id == user_id)
        .values(credits=Profile.credits + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise ProfileNotFoundError(user_id)

    db.add(CreditTransaction(
        user_id=user_id,
        type="purchase",
        amount=amount,
        description=f"Purchased {amount} credits via Stripe",
        stripe_checkout_session_id=checkout_session_id,
    ))
    try:
        db.commit()
    except IntegrityError:
        # same session credited concurrently; the unique key rolls this one back
        db.rollback()
        logger.warning("Checkout session %s credited concurrently; skipping", checkout_session_id)
        return get_balance(db, user_id)

    db.expire_all()
    balance = get_balance(db, user_id)
    logger.info("Added %d credits to user %s. New balance: %d", amount, user_id, balance)
    return balance
