from typing import Optional

from config import Settings
from schemas import Location, TripDetails
from services.location_directory import search_locations

CITY_NOT_FOUND = "We couldn't find this city. Please select from the suggestions."


class TripValidationError(Exception):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


async def normalize_city(text: str, settings: Optional[Settings] = None) -> Optional[Location]:
    """Best match for free-text city input, or None."""
    locations = await search_locations(text, settings)
    return locations[0] if locations else None


async def validate_trip_details(details: TripDetails, settings: Optional[Settings] = None) -> TripDetails:
    """Check a submitted form and fill in normalized locations.

    Returns a copy with `departureLocation`/`destinationLocation` resolved;
    raises TripValidationError for the first problem found.
    """
    if not details.departure_city.strip():
        raise TripValidationError("departureCity", "Please enter a departure city.")
    if not details.destination_city.strip():
        raise TripValidationError("destinationCity", "Please enter a destination city.")
    if details.departure_date is None:
        raise TripValidationError("departureDate", "Please select a departure date.")
    if details.return_date is None:
        raise TripValidationError("returnDate", "Please select a return date.")
    if details.return_date < details.departure_date:
        raise TripValidationError("returnDate", "Return date must be on or after the departure date.")

    departure = details.departure_location or await normalize_city(details.departure_city, settings)
    if departure is None:
        raise TripValidationError("departureCity", CITY_NOT_FOUND)
    destination = details.destination_location or await normalize_city(details.destination_city, settings)
    if destination is None:
        raise TripValidationError("destinationCity", CITY_NOT_FOUND)

    return details.model_copy(update={"departure_location": departure, "destination_location": destination})
