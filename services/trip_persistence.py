"""
Trip persistence: one `trips` header row plus one `trip_items` row per item.

The relational columns keep what listing and emails need (name, cost, flags,
day/order); `provider_data` keeps everything else so a stored plan can be
rebuilt exactly as it was generated.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.Trip import Trip
from models.TripItem import TripItem
from schemas import (
    CarRental, DayItinerary, Flight, Hotel, ItineraryItem, Location, Passenger,
    TripDetails, TripPlan, TripSummary,
)
from services.trip_costs import total_cost
from utils.logger import setup_api_logger

logger = setup_api_logger()

STATUS_PREVIEW = "preview"
STATUS_COMPLETE = "complete"

# trip_items.item_type values; meal and rest activities are stored as "activity"
STORED_ACTIVITY_TYPES = {"flight", "hotel", "transport", "attraction"}


@dataclass
class SaveTripResult:
    trip_id: Optional[int]
    error: Optional[str] = None
    items_warning: bool = False


def _trip_header(user_id: str, details: TripDetails) -> Trip:
    origin = details.departure_location
    dest = details.destination_location
    return Trip(
        user_id=user_id,
        origin_city=details.departure_city,
        origin_iata_code=origin.iata_code if origin else None,
        origin_country=origin.country_name if origin else None,
        origin_lat=origin.lat if origin else None,
        origin_lon=origin.lon if origin else None,
        destination_city=details.destination_city,
        destination_iata_code=dest.iata_code if dest else None,
        destination_country=dest.country_name if dest else None,
        destination_lat=dest.lat if dest else None,
        destination_lon=dest.lon if dest else None,
        departure_date=details.departure_date,
        return_date=details.return_date,
        adults=details.passengers.adults,
        children=details.passengers.children,
        infants=details.passengers.infants,
        flight_class=details.flight_class,
        include_car=details.include_car_rental,
        include_hotel=details.include_hotel,
        status=STATUS_PREVIEW,
    )


def _flight_row(trip_id: int, flight: Flight, direction: str) -> TripItem:
    data = flight.model_dump(by_alias=True, mode="json")
    data["direction"] = direction
    return TripItem(
        trip_id=trip_id,
        item_type="flight",
        name=f"{flight.airline} {flight.flight_number} ({direction})",
        description=f"{flight.origin} ({flight.origin_code}) → {flight.destination} ({flight.destination_code})",
        cost=flight.price_per_person,
        included=flight.included,
        day_number=None,
        order_in_day=None,
        provider_data=data,
    )


def _car_row(trip_id: int, car: CarRental) -> TripItem:
    return TripItem(
        trip_id=trip_id,
        item_type="car",
        name=f"{car.company} - {car.vehicle_name}",
        description=f"{car.vehicle_type} | Pickup: {car.pickup_location}",
        cost=car.total_price,
        included=car.included,
        provider_data=car.model_dump(by_alias=True, mode="json"),
    )


def _hotel_row(trip_id: int, hotel: Hotel) -> TripItem:
    return TripItem(
        trip_id=trip_id,
        item_type="hotel",
        name=hotel.name,
        description=f"{hotel.rating}★ | {hotel.address}",
        cost=hotel.total_price,
        included=hotel.included,
        provider_data=hotel.model_dump(by_alias=True, mode="json"),
    )


def _activity_row(trip_id: int, day: DayItinerary, index: int, item: ItineraryItem) -> TripItem:
    data = item.model_dump(by_alias=True, mode="json", exclude={"title", "description", "cost", "included"})
    data["date"] = day.date
    return TripItem(
        trip_id=trip_id,
        item_type=item.type if item.type in STORED_ACTIVITY_TYPES else "activity",
        name=item.title,
        description=item.description,
        cost=item.cost,
        included=item.included,
        day_number=day.day,
        order_in_day=index,
        provider_data=data,
    )


def build_trip_items(trip_id: int, plan: TripPlan) -> List[TripItem]:
    items: List[TripItem] = []
    if plan.outbound_flight:
        items.append(_flight_row(trip_id, plan.outbound_flight, "outbound"))
    if plan.return_flight:
        items.append(_flight_row(trip_id, plan.return_flight, "return"))
    if plan.car_rental:
        items.append(_car_row(trip_id, plan.car_rental))
    if plan.hotel:
        items.append(_hotel_row(trip_id, plan.hotel))
    for day in plan.itinerary:
        for index, item in enumerate(day.items):
            items.append(_activity_row(trip_id, day, index, item))
    return items


def save_trip(db: Session, user_id: str, details: TripDetails, plan: TripPlan) -> SaveTripResult:
    """Persist a trip in two commits.

    A failed header insert writes nothing. A failed item insert leaves the
    header behind as a preview trip with no items and sets `items_warning`.
    """
    trip = _trip_header(user_id, details)
    try:
        db.add(trip)
        db.commit()
        db.refresh(trip)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Trip insert failed for user %s: %s", user_id, e)
        return SaveTripResult(trip_id=None, error=str(e))

    trip_id = trip.id
    try:
        rows = build_trip_items(trip_id, plan)
        db.add_all(rows)
        trip.status = STATUS_COMPLETE
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Trip items insert failed for trip %s: %s", trip_id, e)
        return SaveTripResult(trip_id=trip_id, items_warning=True)

    logger.info("Trip %s saved with %d items", trip_id, len(rows))
    return SaveTripResult(trip_id=trip_id)


def _location(city: str, iata: Optional[str], country: Optional[str],
              lat: Optional[float], lon: Optional[float]) -> Optional[Location]:
    if not iata:
        return None
    return Location(
        name=city,
        iata_code=iata,
        sub_type="CITY",
        city_name=city,
        country_name=country,
        lat=lat,
        lon=lon,
    )


def trip_details_from_row(trip: Trip) -> TripDetails:
    return TripDetails(
        departure_city=trip.origin_city,
        destination_city=trip.destination_city,
        departure_location=_location(trip.origin_city, trip.origin_iata_code, trip.origin_country,
                                     trip.origin_lat, trip.origin_lon),
        destination_location=_location(trip.destination_city, trip.destination_iata_code,
                                       trip.destination_country, trip.destination_lat, trip.destination_lon),
        departure_date=trip.departure_date,
        return_date=trip.return_date,
        passengers=Passenger(adults=trip.adults, children=trip.children, infants=trip.infants),
        flight_class=trip.flight_class,
        include_car_rental=trip.include_car,
        include_hotel=trip.include_hotel,
    )


def trip_plan_from_rows(items: List[TripItem], passengers: Passenger) -> TripPlan:
    plan = TripPlan()
    days = {}

    for row in items:
        data = dict(row.provider_data or {})
        if row.day_number is None:
            data["included"] = row.included
            if row.item_type == "flight":
                direction = data.pop("direction", None)
                if direction == "outbound":
                    plan.outbound_flight = Flight.model_validate(data)
                elif direction == "return":
                    plan.return_flight = Flight.model_validate(data)
            elif row.item_type == "car":
                plan.car_rental = CarRental.model_validate(data)
            elif row.item_type == "hotel":
                plan.hotel = Hotel.model_validate(data)
            continue

        day_date = data.pop("date", "")
        data.update(title=row.name, description=row.description or "", cost=row.cost, included=row.included)
        data.setdefault("id", str(row.id))
        data.setdefault("type", row.item_type if row.item_type in STORED_ACTIVITY_TYPES else "attraction")
        data.setdefault("time", "09:00")
        day = days.setdefault(row.day_number, {"date": day_date, "items": []})
        day["items"].append((row.order_in_day or 0, row.id, ItineraryItem.model_validate(data)))

    plan.itinerary = [
        DayItinerary(day=number, date=day["date"], items=[item for _, _, item in sorted(day["items"], key=lambda t: t[:2])])
        for number, day in sorted(days.items())
    ]
    plan.total_cost = total_cost(plan, passengers)
    return plan


def load_trip(db: Session, trip_id: int, user_id: str) -> Optional[Tuple[Trip, TripDetails, TripPlan]]:
    """Rebuild a stored trip owned by `user_id`; None when it does not exist."""
    trip = (
        db.query(Trip)
        .options(selectinload(Trip.items))
        .filter(Trip.id == trip_id, Trip.user_id == user_id)
        .first()
    )
    if trip is None:
        return None
    details = trip_details_from_row(trip)
    plan = trip_plan_from_rows(list(trip.items), details.passengers)
    return trip, details, plan


def is_preview(trip: Trip, item_count: int) -> bool:
    return trip.status != STATUS_COMPLETE or item_count == 0


def list_trips(db: Session, user_id: str) -> List[TripSummary]:
    rows = (
        db.query(Trip, func.count(TripItem.id))
        .outerjoin(TripItem, TripItem.trip_id == Trip.id)
        .filter(Trip.user_id == user_id)
        .group_by(Trip.id)
        .order_by(Trip.created_at.desc(), Trip.id.desc())
        .all()
    )
    return [
        TripSummary(
            id=trip.id,
            origin_city=trip.origin_city,
            destination_city=trip.destination_city,
            departure_date=trip.departure_date,
            return_date=trip.return_date,
            flight_class=trip.flight_class,
            status=trip.status,
            item_count=count,
            is_preview=is_preview(trip, count),
            created_at=trip.created_at,
        )
        for trip, count in rows
    ]
