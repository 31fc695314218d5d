"""
Canned itinerary generator.

Builds a complete, costed TripPlan from the intake form without calling any
supply-side API. The output has the same shape real search results would have,
so the cost and persistence layers never special-case generated data.
"""
import uuid
from datetime import date, timedelta
from typing import Callable, List, Optional
from urllib.parse import quote_plus

from schemas import CarRental, DayItinerary, Flight, Hotel, ItineraryItem, TripDetails, TripPlan
from services.location_directory import airport_code_for
from services.trip_costs import total_cost

IdFactory = Callable[[str], str]

DEFAULT_TRIP_DAYS = 6
BASE_FARES = {"economy": 320, "business": 650, "first": 1200}
FARE_SURCHARGES = {"outbound": 36, "return": 58}
CAR_PRICE_PER_DAY = 65
HOTEL_PRICE_PER_NIGHT = 250
HOTEL_AMENITIES = ["Free WiFi", "Spa", "Restaurant", "Pool", "Gym", "Room Service"]

_IMG = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=800&q=80"
AIRPORT_IMAGE = _IMG.format("1556388158-158ea5b6d841")
HOTEL_IMAGE = _IMG.format("1631049307264-da0ec9d70304")
DINNER_IMAGE = _IMG.format("1504674900247-0877df9cc836")
LUNCH_IMAGE = _IMG.format("1546069901-ba9599a7e63c")
BREAKFAST_IMAGE = _IMG.format("1511920170033-f8396924c348")
SHOPPING_IMAGE = _IMG.format("1555529669-e69e7ea0bb29")
WALK_IMAGE = _IMG.format("1488646953014-85cb44e25828")

# (name, description, distance, cost, image id, booking search term)
ATTRACTION_SETS = [
    [
        ("Historic City Center",
         "Explore the charming old town with its cobblestone streets and centuries-old architecture.",
         "3 km", 0, "1467269204594-9661b134dd2b", "walking tour"),
        ("National Museum",
         "Discover the rich cultural heritage through art and historical artifacts.",
         "2.5 km", 18, "1518998053502-53cc8efd9aee", "museum"),
    ],
    [
        ("Cathedral & Religious Quarter",
         "Visit stunning religious architecture and learn about local traditions.",
         "2 km", 12, "1548661762-4646fa58339a", "cathedral"),
        ("Local Market Experience",
         "Immerse yourself in local culture at the bustling market. Try street food and crafts.",
         "3.5 km", 25, "1533900298318-6b8da08a523e", "market"),
    ],
    [
        ("Modern Art Gallery",
         "Explore contemporary works from local and international artists.",
         "2.8 km", 20, "1518998053502-53cc8efd9aee", "art gallery"),
        ("Panoramic Viewpoint",
         "Enjoy breathtaking views of the city from a famous observation point.",
         "6 km", 15, "1449156001935-d2863fb22690", "viewpoint"),
    ],
]


def default_id_factory(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def booking_url(query: str) -> str:
    return "https://www.getyourguide.com/s/?q=" + quote_plus(query)


def format_day(d: Optional[date]) -> str:
    """'Saturday, March 1' style label; empty when the date is unknown."""
    if d is None:
        return ""
    return f"{d:%A, %B} {d.day}"


def format_pickup(d: Optional[date], time: str) -> str:
    if d is None:
        return ""
    return f"{d:%b} {d.day}, {time}"


def trip_window(details: TripDetails) -> tuple:
    """Return (departure, return, number of days) with the defaults applied."""
    departure = details.departure_date
    if departure is None:
        return None, None, DEFAULT_TRIP_DAYS
    returning = details.return_date or departure + timedelta(days=DEFAULT_TRIP_DAYS - 1)
    days = max((returning - departure).days + 1, 1)
    return departure, returning, days


def generate_trip_plan(details: TripDetails, id_factory: Optional[IdFactory] = None) -> TripPlan:
    """Fabricate flights, optional car and hotel, and a day-by-day schedule.

    Everything except item ids is a pure function of `details`; pass an
    `id_factory` to make ids predictable.
    """
    new_id = id_factory or default_id_factory
    departure, returning, trip_days = trip_window(details)

    origin = details.departure_city
    destination = details.destination_city
    origin_code = airport_code_for(origin, details.departure_location)
    dest_code = airport_code_for(destination, details.destination_location)
    base_fare = BASE_FARES[details.flight_class]

    outbound = Flight(
        id=new_id("outbound"),
        airline="SkyWings Airlines",
        flight_number="SW 1247",
        origin=origin,
        origin_code=origin_code,
        destination=destination,
        destination_code=dest_code,
        departure_time="09:15",
        arrival_time="12:45",
        duration="3h 30m",
        flight_class=details.flight_class,
        price_per_person=base_fare + FARE_SURCHARGES["outbound"],
    )
    inbound = Flight(
        id=new_id("return"),
        airline="SkyWings Airlines",
        flight_number="SW 1248",
        origin=destination,
        origin_code=dest_code,
        destination=origin,
        destination_code=origin_code,
        departure_time="18:30",
        arrival_time="22:00",
        duration="3h 30m",
        flight_class=details.flight_class,
        price_per_person=base_fare + FARE_SURCHARGES["return"],
    )

    car = None
    if details.include_car_rental:
        car = CarRental(
            id=new_id("car"),
            company="EuroMobility",
            vehicle_type="SUV",
            vehicle_name="Volkswagen Tiguan or similar",
            pickup_location=f"{destination} Airport",
            dropoff_location=f"{destination} Airport",
            pickup_time=format_pickup(departure, "13:30"),
            dropoff_time=format_pickup(returning, "14:00"),
            price_per_day=CAR_PRICE_PER_DAY,
            total_price=CAR_PRICE_PER_DAY * trip_days,
        )

    hotel = None
    if details.include_hotel:
        nights = max(trip_days - 1, 1)
        hotel = Hotel(
            id=new_id("hotel"),
            name=hotel_name(destination),
            rating=4,
            address=f"123 Central Avenue, {destination}",
            distance_from_airport="18 km",
            price_per_night=HOTEL_PRICE_PER_NIGHT,
            total_price=HOTEL_PRICE_PER_NIGHT * nights,
            amenities=list(HOTEL_AMENITIES),
        )

    plan = TripPlan(
        outbound_flight=outbound,
        return_flight=inbound,
        car_rental=car,
        hotel=hotel,
        itinerary=build_day_itineraries(details, departure, trip_days, new_id),
    )
    plan.total_cost = total_cost(plan, details.passengers)
    return plan


def hotel_name(destination: str) -> str:
    return f"Grand {destination} Palace Hotel"


def build_day_itineraries(details: TripDetails, departure: Optional[date], trip_days: int,
                          new_id: IdFactory) -> List[DayItinerary]:
    days = [DayItinerary(day=1, date=format_day(departure), items=_arrival_day(details, new_id))]

    for day in range(2, trip_days):
        day_date = departure + timedelta(days=day - 1) if departure else None
        days.append(DayItinerary(day=day, date=format_day(day_date),
                                 items=_exploration_day(details.destination_city, day, new_id)))

    if trip_days > 1:
        last_date = departure + timedelta(days=trip_days - 1) if departure else None
        days.append(DayItinerary(day=trip_days, date=format_day(last_date),
                                 items=_departure_day(details, trip_days, new_id)))
    return days


def _arrival_day(details: TripDetails, new_id: IdFactory) -> List[ItineraryItem]:
    city = details.destination_city
    items = [
        ItineraryItem(
            id=new_id("d1"),
            time="12:45",
            title=f"Arrival at {city} Airport",
            description="Your flight has landed. Welcome to your destination!",
            type="flight",
            image_url=AIRPORT_IMAGE,
            booking_url=booking_url(f"{city} airport"),
        ),
    ]
    if details.include_hotel:
        items.append(ItineraryItem(
            id=new_id("d1"),
            time="14:30",
            title="Hotel Check-in",
            description=f"Arrive at {hotel_name(city)}. Take time to settle in and refresh after your journey.",
            type="hotel",
            distance="18 km from airport",
            image_url=HOTEL_IMAGE,
            booking_url=booking_url(hotel_name(city)),
        ))
    else:
        items.append(ItineraryItem(
            id=new_id("d1"),
            time="15:00",
            title="Settle In",
            description="Take a leisurely walk around your neighborhood. Discover local cafes and get your bearings.",
            type="rest",
            distance="Walking distance",
            image_url=WALK_IMAGE,
            booking_url=booking_url(f"{city} walking tour"),
        ))
    items.append(ItineraryItem(
        id=new_id("d1"),
        time="19:30",
        title="Welcome Dinner",
        description="Enjoy an authentic local dining experience. Ask for recommendations nearby.",
        type="meal",
        cost=75,
        image_url=LUNCH_IMAGE,
        booking_url=booking_url(f"{city} restaurants"),
    ))
    return items


def _attraction(city: str, entry: tuple, time: str, prefix: str, new_id: IdFactory) -> ItineraryItem:
    name, description, distance, cost, image, search = entry
    return ItineraryItem(
        id=new_id(prefix),
        time=time,
        title=name,
        description=description,
        type="attraction",
        distance=distance,
        cost=cost,
        image_url=_IMG.format(image),
        booking_url=booking_url(f"{city} {search}"),
    )


def _exploration_day(city: str, day: int, new_id: IdFactory) -> List[ItineraryItem]:
    morning, afternoon = ATTRACTION_SETS[(day - 2) % len(ATTRACTION_SETS)]
    prefix = f"d{day}"
    return [
        _attraction(city, morning, "09:30", prefix, new_id),
        ItineraryItem(
            id=new_id(prefix),
            time="12:30",
            title="Lunch Break",
            description="Find a local restaurant for lunch. Take time to rest and recharge.",
            type="meal",
            cost=40,
            image_url=LUNCH_IMAGE,
            booking_url=booking_url(f"{city} restaurants"),
        ),
        _attraction(city, afternoon, "14:30", prefix, new_id),
        ItineraryItem(
            id=new_id(prefix),
            time="20:00",
            title="Dinner",
            description="Evening dining experience. Explore different neighborhoods each night.",
            type="meal",
            cost=85,
            image_url=DINNER_IMAGE,
            booking_url=booking_url(f"{city} dining"),
        ),
    ]


def _departure_day(details: TripDetails, day: int, new_id: IdFactory) -> List[ItineraryItem]:
    city = details.destination_city
    prefix = f"d{day}"
    return [
        ItineraryItem(
            id=new_id(prefix),
            time="08:00",
            title="Final Breakfast",
            description="Enjoy your last morning in town. Double-check your belongings.",
            type="meal",
            image_url=BREAKFAST_IMAGE,
            booking_url=booking_url(f"{city} breakfast"),
        ),
        ItineraryItem(
            id=new_id(prefix),
            time="11:00",
            title="Last-minute Shopping",
            description="Pick up any souvenirs or last-minute gifts for loved ones back home.",
            type="attraction",
            cost=0,
            image_url=SHOPPING_IMAGE,
            booking_url=booking_url(f"{city} shopping"),
        ),
        ItineraryItem(
            id=new_id(prefix),
            time="15:30",
            title="Airport Transfer",
            description=f"Head to the airport with plenty of time for your flight home to {details.departure_city}.",
            type="rest",
            distance="18 km",
            image_url=AIRPORT_IMAGE,
            booking_url=booking_url(f"{city} airport transfer"),
        ),
    ]
