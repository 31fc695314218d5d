# schemas.py (Pydantic v2, camelCase on the wire)
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal
from datetime import date, datetime


FlightClass = Literal["economy", "business", "first"]
ItemKind = Literal["flight", "transport", "hotel", "meal", "attraction", "rest"]
ToggleTarget = Literal["outboundFlight", "returnFlight", "carRental", "hotel", "itinerary"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Locations ----------
class Location(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    iata_code: str
    sub_type: Literal["CITY", "AIRPORT"]
    city_name: str
    country_code: Optional[str] = None
    country_name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    city_code: Optional[str] = None


class LocationSearchRequest(CamelModel):
    keyword: str = ""


class LocationSearchResult(CamelModel):
    locations: List[Location] = []


# ---------- Trip details (intake form) ----------
class Passenger(CamelModel):
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)

    @property
    def traveler_count(self) -> int:
        return self.adults + self.children + self.infants


class TripDetails(CamelModel):
    departure_city: str
    destination_city: str
    # Best-effort normalization; may stay empty
    departure_location: Optional[Location] = None
    destination_location: Optional[Location] = None
    departure_date: Optional[date] = None
    return_date: Optional[date] = None
    passengers: Passenger = Field(default_factory=Passenger)
    flight_class: FlightClass = "economy"
    include_car_rental: bool = False
    include_hotel: bool = False


# ---------- Trip plan ----------
class Flight(CamelModel):
    id: str
    airline: str
    flight_number: str
    origin: str
    origin_code: str
    destination: str
    destination_code: str
    departure_time: str
    arrival_time: str
    duration: str
    flight_class: FlightClass = Field(alias="class")
    price_per_person: float
    included: bool = True


class CarRental(CamelModel):
    id: str
    company: str
    vehicle_type: str
    vehicle_name: str
    pickup_location: str
    dropoff_location: str
    pickup_time: str
    dropoff_time: str
    price_per_day: float
    total_price: float
    included: bool = True


class Hotel(CamelModel):
    id: str
    name: str
    rating: int
    address: str
    distance_from_airport: str
    price_per_night: float
    total_price: float
    amenities: List[str] = []
    included: bool = True


class ItineraryItem(CamelModel):
    id: str
    time: str
    title: str
    description: str
    type: ItemKind
    distance: Optional[str] = None
    duration: Optional[str] = None
    cost: Optional[float] = None
    included: bool = True
    image_url: Optional[str] = None
    booking_url: Optional[str] = None


class DayItinerary(CamelModel):
    day: int = Field(..., ge=1)
    date: str
    items: List[ItineraryItem] = []


class TripPlan(CamelModel):
    outbound_flight: Optional[Flight] = None
    return_flight: Optional[Flight] = None
    car_rental: Optional[CarRental] = None
    hotel: Optional[Hotel] = None
    itinerary: List[DayItinerary] = []
    total_cost: float = 0


# ---------- Plan operations ----------
class PlanResponse(CamelModel):
    details: TripDetails  # with normalized locations filled in
    plan: TripPlan
    total_cost: float
    credits_remaining: Optional[int] = None


class TotalRequest(CamelModel):
    plan: TripPlan
    passengers: Passenger


class TotalResponse(CamelModel):
    total_cost: float


class ToggleRequest(CamelModel):
    plan: TripPlan
    passengers: Passenger
    item_type: str
    item_id: Optional[str] = None


# ---------- Persistence ----------
class SaveTripRequest(CamelModel):
    details: TripDetails
    plan: TripPlan


class SaveTripResponse(CamelModel):
    trip_id: Optional[int] = None
    items_warning: bool = False
    error: Optional[str] = None


class TripSummary(CamelModel):
    id: int
    origin_city: str
    destination_city: str
    departure_date: Optional[date] = None
    return_date: Optional[date] = None
    flight_class: str
    status: str
    item_count: int
    is_preview: bool
    created_at: datetime


class TripRead(CamelModel):
    id: int
    status: str
    is_preview: bool
    details: TripDetails
    plan: TripPlan


class TripEmailRequest(CamelModel):
    # Any destination address in the body is ignored; mail goes to the signed-in user
    trip_id: int


class TripEmailResponse(CamelModel):
    success: bool
    id: Optional[str] = None


# ---------- Credits ----------
class CreditBalance(CamelModel):
    credits: int


class DeductResult(CamelModel):
    success: bool
    credits: int


class CheckoutResponse(CamelModel):
    url: str


# ---------- Places ----------
class PlacesRequest(CamelModel):
    action: str
    input: Optional[str] = None
    types: str = "(cities)"
    place_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius: int = 5000
    type: str = "tourist_attraction"
    query: Optional[str] = None
    photo_reference: Optional[str] = None
    max_width: int = 800


# ---------- Attractions ----------
class AttractionRequest(CamelModel):
    city: str
    lat: float
    lon: float
    limit: int = Field(15, ge=1, le=100)
    radius: int = Field(5000, ge=100, le=50000)


class Attraction(CamelModel):
    id: str
    name: str
    description: str
    category: str
    rating: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    distance: Optional[int] = None


class AttractionResponse(CamelModel):
    attractions: List[Attraction] = []
    city: str = ""
    count: int = 0
    error: Optional[str] = None


class ActivityImageRequest(CamelModel):
    query: str


class ActivityImageResponse(CamelModel):
    image_url: Optional[str] = None
