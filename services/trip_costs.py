"""
Derived trip total and item inclusion.

The total stored on a TripPlan is only a cache: callers recompute it with
`total_cost` after any `toggle_item`.
"""
from typing import Optional

from schemas import Passenger, TripPlan

SINGLETON_ITEMS = {
    "outboundFlight": "outbound_flight",
    "returnFlight": "return_flight",
    "carRental": "car_rental",
    "hotel": "hotel",
}
ITINERARY_ITEM = "itinerary"


def total_cost(plan: TripPlan, passengers: Passenger) -> float:
    """Sum every included item.

    Flights and priced activities scale with the traveler count (children and
    infants pay the adult rate); car and hotel totals are per booking.
    """
    travelers = passengers.traveler_count
    cost = 0.0

    for flight in (plan.outbound_flight, plan.return_flight):
        if flight is not None and flight.included:
            cost += flight.price_per_person * travelers

    if plan.car_rental is not None and plan.car_rental.included:
        cost += plan.car_rental.total_price
    if plan.hotel is not None and plan.hotel.included:
        cost += plan.hotel.total_price

    for day in plan.itinerary:
        for item in day.items:
            if item.included and item.cost is not None:
                cost += item.cost * travelers

    return cost


def toggle_item(plan: TripPlan, item_type: str, item_id: Optional[str] = None) -> TripPlan:
    """Return a copy of `plan` with one item's `included` flag flipped.

    Singletons (flights, car, hotel) ignore `item_id`. For `itinerary` the
    first item with a matching id across all days is flipped. Unknown types,
    missing singletons and unmatched ids return `plan` itself.
    """
    attr = SINGLETON_ITEMS.get(item_type)
    if attr is not None:
        current = getattr(plan, attr)
        if current is None:
            return plan
        flipped = current.model_copy(update={"included": not current.included})
        return plan.model_copy(update={attr: flipped})

    if item_type != ITINERARY_ITEM or item_id is None:
        return plan

    for day_index, day in enumerate(plan.itinerary):
        for item_index, item in enumerate(day.items):
            if item.id != item_id:
                continue
            items = list(day.items)
            items[item_index] = item.model_copy(update={"included": not item.included})
            itinerary = list(plan.itinerary)
            itinerary[day_index] = day.model_copy(update={"items": items})
            return plan.model_copy(update={"itinerary": itinerary})
    return plan
