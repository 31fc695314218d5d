"""
City and airport lookup used by the intake form.

Two sources share one output shape (`schemas.Location`):
- a static directory of major cities and their primary airports, always available
- the Amadeus reference-data locations API, used when credentials are configured
"""
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import httpx

from config import Settings, get_settings
from schemas import Location
from utils.logger import setup_api_logger

logger = setup_api_logger()

MIN_KEYWORD_LENGTH = 2
MAX_RESULTS = 10

# city, IATA city code, country code, country, lat, lon, primary airport (code, name)
_CITIES: List[Tuple[str, str, str, str, float, float, Tuple[str, str]]] = [
    ("London", "LON", "GB", "United Kingdom", 51.5074, -0.1278, ("LHR", "Heathrow")),
    ("Paris", "PAR", "FR", "France", 48.8566, 2.3522, ("CDG", "Charles de Gaulle")),
    ("New York", "NYC", "US", "United States", 40.7128, -74.0060, ("JFK", "John F Kennedy Intl")),
    ("Rome", "ROM", "IT", "Italy", 41.9028, 12.4964, ("FCO", "Fiumicino")),
    ("Tokyo", "TYO", "JP", "Japan", 35.6762, 139.6503, ("NRT", "Narita Intl")),
    ("Bali", "DPS", "ID", "Indonesia", -8.3405, 115.0920, ("DPS", "Ngurah Rai Intl")),
    ("Dubai", "DXB", "AE", "United Arab Emirates", 25.2048, 55.2708, ("DXB", "Dubai Intl")),
    ("Barcelona", "BCN", "ES", "Spain", 41.3874, 2.1686, ("BCN", "El Prat")),
    ("Amsterdam", "AMS", "NL", "Netherlands", 52.3676, 4.9041, ("AMS", "Schiphol")),
    ("Berlin", "BER", "DE", "Germany", 52.5200, 13.4050, ("BER", "Brandenburg")),
    ("Madrid", "MAD", "ES", "Spain", 40.4168, -3.7038, ("MAD", "Barajas")),
    ("Lisbon", "LIS", "PT", "Portugal", 38.7223, -9.1393, ("LIS", "Humberto Delgado")),
    ("Vienna", "VIE", "AT", "Austria", 48.2082, 16.3738, ("VIE", "Schwechat")),
    ("Prague", "PRG", "CZ", "Czech Republic", 50.0755, 14.4378, ("PRG", "Vaclav Havel")),
    ("Sydney", "SYD", "AU", "Australia", -33.8688, 151.2093, ("SYD", "Kingsford Smith")),
    ("Singapore", "SIN", "SG", "Singapore", 1.3521, 103.8198, ("SIN", "Changi")),
    ("Bangkok", "BKK", "TH", "Thailand", 13.7563, 100.5018, ("BKK", "Suvarnabhumi")),
    ("Istanbul", "IST", "TR", "Turkey", 41.0082, 28.9784, ("IST", "Istanbul Airport")),
    ("Athens", "ATH", "GR", "Greece", 37.9838, 23.7275, ("ATH", "Eleftherios Venizelos")),
    ("Zurich", "ZRH", "CH", "Switzerland", 47.3769, 8.5417, ("ZRH", "Kloten")),
]


def _build_directory() -> List[Location]:
    entries: List[Location] = []
    for city, city_code, country_code, country, lat, lon, (airport_code, airport_name) in _CITIES:
        entries.append(Location(
            name=city,
            iata_code=city_code,
            sub_type="CITY",
            city_name=city,
            country_code=country_code,
            country_name=country,
            lat=lat,
            lon=lon,
            city_code=city_code,
        ))
        entries.append(Location(
            name=airport_name,
            iata_code=airport_code,
            sub_type="AIRPORT",
            city_name=city,
            country_code=country_code,
            country_name=country,
            lat=lat,
            lon=lon,
            city_code=city_code,
        ))
    return entries


_DIRECTORY = _build_directory()
_PRIMARY_AIRPORT: Dict[str, str] = {city.lower(): airport[0] for city, *_rest, airport in _CITIES}


def search_directory(keyword: str, limit: int = MAX_RESULTS) -> List[Location]:
    """Match the keyword against city names, airport names and IATA codes."""
    needle = (keyword or "").strip().lower()
    if len(needle) < MIN_KEYWORD_LENGTH:
        return []

    exact: List[Location] = []
    partial: List[Location] = []
    for loc in _DIRECTORY:
        if needle in (loc.city_name.lower(), loc.iata_code.lower()):
            exact.append(loc)
        elif loc.city_name.lower().startswith(needle) or needle in loc.name.lower():
            partial.append(loc)
    return (exact + partial)[:limit]


def airport_code_for(city: str, location: Optional[Location] = None) -> str:
    """Airport IATA code for a trip endpoint.

    An AIRPORT location is used as is. A CITY location resolves to its primary
    airport when the directory knows one, else keeps its metro code. Without a
    location the typed city is looked up, then its first three letters are used.
    """
    if location is not None:
        if location.sub_type == "AIRPORT":
            return location.iata_code
        return _PRIMARY_AIRPORT.get(location.city_name.strip().lower()) or location.iata_code
    code = _PRIMARY_AIRPORT.get((city or "").strip().lower())
    if code:
        return code
    return (city or "").strip()[:3].upper()


# --- Amadeus reference data ---

class AmadeusTokenCache:
    """OAuth2 client-credentials token, refreshed 60 seconds before expiry."""

    def __init__(self):
        self._token: Optional[str] = None
        self._expires_at: Optional[datetime] = None
        self._lock = threading.Lock()

    def valid_token(self) -> Optional[str]:
        with self._lock:
            now = datetime.now(timezone.utc)
            if self._token and self._expires_at and now < self._expires_at - timedelta(seconds=60):
                return self._token
            return None

    def store(self, token: str, expires_in: int) -> None:
        with self._lock:
            self._token = token
            self._expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

    def clear(self) -> None:
        with self._lock:
            self._token = None
            self._expires_at = None


_token_cache = AmadeusTokenCache()


async def _amadeus_token(client: httpx.AsyncClient, settings: Settings) -> str:
    token = _token_cache.valid_token()
    if token:
        return token

    resp = await client.post(
        f"{settings.amadeus_base_url}/v1/security/oauth2/token",
        data={
            "grant_type": "client_credentials",
            "client_id": settings.amadeus_client_id,
            "client_secret": settings.amadeus_client_secret,
        },
    )
    resp.raise_for_status()
    data = resp.json()
    _token_cache.store(data["access_token"], int(data.get("expires_in", 1799)))
    logger.info("Amadeus token acquired, expires in %ss", data.get("expires_in"))
    return data["access_token"]


def _location_from_amadeus(loc: dict) -> Location:
    address = loc.get("address") or {}
    geo = loc.get("geoCode") or {}
    return Location(
        name=loc.get("name", ""),
        iata_code=loc.get("iataCode", ""),
        sub_type=loc.get("subType", "CITY"),
        city_name=address.get("cityName") or loc.get("name", ""),
        country_code=address.get("countryCode"),
        country_name=address.get("countryName"),
        lat=geo.get("latitude"),
        lon=geo.get("longitude"),
        city_code=address.get("cityCode"),
    )


async def search_amadeus(keyword: str, settings: Settings) -> List[Location]:
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        token = await _amadeus_token(client, settings)
        resp = await client.get(
            f"{settings.amadeus_base_url}/v1/reference-data/locations",
            params={"keyword": keyword, "subType": "CITY,AIRPORT", "page[limit]": str(MAX_RESULTS)},
            headers={"Authorization": f"Bearer {token}"},
        )
        if resp.status_code == 401:
            _token_cache.clear()
        resp.raise_for_status()
        data = resp.json()
    return [_location_from_amadeus(loc) for loc in data.get("data") or []]


async def search_locations(keyword: str, settings: Optional[Settings] = None) -> List[Location]:
    """City search: Amadeus when configured, otherwise the static directory.

    Short keywords and upstream failures both yield an empty list.
    """
    keyword = (keyword or "").strip()
    if len(keyword) < MIN_KEYWORD_LENGTH:
        return []

    settings = settings or get_settings()
    if not settings.has_amadeus:
        return search_directory(keyword)

    try:
        locations = await search_amadeus(keyword, settings)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.error("Amadeus city search failed for %r: %s", keyword, e)
        return []
    logger.info("City search for %r: %d results", keyword, len(locations))
    return locations
