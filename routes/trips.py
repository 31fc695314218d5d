from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import get_db
from schemas import (
    PlanResponse, SaveTripRequest, SaveTripResponse, ToggleRequest, TotalRequest, TotalResponse,
    TripDetails, TripEmailRequest, TripEmailResponse, TripPlan, TripRead, TripSummary,
)
from services.credit_ledger import deduct_credit, get_balance, get_or_create_profile
from services.firebase_auth import AuthenticatedUser, get_current_user
from services.itinerary_generator import generate_trip_plan
from services.trip_costs import toggle_item, total_cost
from services.trip_email import EmailDeliveryError, render_trip_email, send_email
from services.trip_intake import TripValidationError, validate_trip_details
from services.trip_persistence import is_preview, list_trips, load_trip, save_trip
from utils.logger import setup_api_logger

logger = setup_api_logger()
router = APIRouter(prefix="/trips", tags=["Trips"])


@router.post("/plan", response_model=PlanResponse)
async def plan_trip(
    details: TripDetails,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Validate the intake form, spend one credit and generate an itinerary."""
    try:
        details = await validate_trip_details(details)
    except TripValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": e.message})

    get_or_create_profile(db, user.uid, user.email, user.name)
    if not deduct_credit(db, user.uid):
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED,
                            detail="You don't have enough credits to continue.")

    plan = generate_trip_plan(details)
    logger.info("Generated %d-day plan %s -> %s for user %s", len(plan.itinerary),
                details.departure_city, details.destination_city, user.uid)
    return PlanResponse(
        details=details,
        plan=plan,
        total_cost=plan.total_cost,
        credits_remaining=get_balance(db, user.uid),
    )


@router.post("/plan/total", response_model=TotalResponse)
def plan_total(payload: TotalRequest):
    return TotalResponse(total_cost=total_cost(payload.plan, payload.passengers))


@router.post("/plan/toggle", response_model=TripPlan)
def toggle_plan_item(payload: ToggleRequest):
    """Flip one item in or out of the estimate and return the plan with a fresh total."""
    plan = toggle_item(payload.plan, payload.item_type, payload.item_id)
    return plan.model_copy(update={"total_cost": total_cost(plan, payload.passengers)})


@router.post("/", response_model=SaveTripResponse, status_code=status.HTTP_201_CREATED)
def create_trip(
    payload: SaveTripRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    get_or_create_profile(db, user.uid, user.email, user.name)
    result = save_trip(db, user.uid, payload.details, payload.plan)
    if result.trip_id is None:
        body = SaveTripResponse(trip_id=None, error=result.error or "Failed to create trip")
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))
    return SaveTripResponse(trip_id=result.trip_id, items_warning=result.items_warning)


@router.get("/", response_model=List[TripSummary])
def get_my_trips(db: Session = Depends(get_db), user: AuthenticatedUser = Depends(get_current_user)):
    return list_trips(db, user.uid)


@router.post("/email", response_model=TripEmailResponse)
async def email_trip(
    payload: TripEmailRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Email a stored itinerary to the signed-in user's own address."""
    if not user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No email address on this account")
    if not user.email_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Email address not verified")

    loaded = load_trip(db, payload.trip_id, user.uid)
    if loaded is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    _trip, details, plan = loaded

    subject, html = render_trip_email(details, plan, plan.total_cost)
    try:
        message_id = await send_email(user.email, subject, html)
    except EmailDeliveryError as e:
        return JSONResponse(status_code=502, content={"error": str(e)})

    logger.info("Itinerary for trip %s emailed to user %s", payload.trip_id, user.uid)
    return TripEmailResponse(success=True, id=message_id)


@router.get("/{trip_id}", response_model=TripRead)
def get_trip(trip_id: int, db: Session = Depends(get_db), user: AuthenticatedUser = Depends(get_current_user)):
    loaded = load_trip(db, trip_id, user.uid)
    if loaded is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    trip, details, plan = loaded
    item_count = len(trip.items)
    return TripRead(
        id=trip.id,
        status=trip.status,
        is_preview=is_preview(trip, item_count),
        details=details,
        plan=plan,
    )
