from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

import stripe

from database import get_db
from schemas import CheckoutResponse, CreditBalance, DeductResult
from services.credit_ledger import deduct_credit, get_balance, get_or_create_profile
from services.firebase_auth import AuthenticatedUser, get_current_user
from services.payments import CheckoutUnavailableError, create_checkout_session
from utils.logger import setup_api_logger

logger = setup_api_logger()
router = APIRouter(prefix="/credits", tags=["Credits"])


@router.get("/", response_model=CreditBalance)
def my_credits(db: Session = Depends(get_db), user: AuthenticatedUser = Depends(get_current_user)):
    profile = get_or_create_profile(db, user.uid, user.email, user.name)
    return CreditBalance(credits=profile.credits)


@router.post("/deduct", response_model=DeductResult)
def spend_credit(db: Session = Depends(get_db), user: AuthenticatedUser = Depends(get_current_user)):
    get_or_create_profile(db, user.uid, user.email, user.name)
    success = deduct_credit(db, user.uid)
    return DeductResult(success=success, credits=get_balance(db, user.uid))


@router.post("/checkout", response_model=CheckoutResponse)
def start_checkout(db: Session = Depends(get_db), user: AuthenticatedUser = Depends(get_current_user)):
    """Open a Stripe Checkout for a credit pack; the webhook credits the balance."""
    get_or_create_profile(db, user.uid, user.email, user.name)
    try:
        url = create_checkout_session(user.uid, user.email)
    except CheckoutUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except stripe.StripeError as e:
        logger.error("Stripe Error: checkout for user %s failed: %s", user.uid, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not start the payment process")
    return CheckoutResponse(url=url)
