"""
Proxy for the Google Places web service.

Responses are reshaped into a stable camelCase schema. Upstream failures
(non-OK status, HTTP errors) come back as empty results with an `error`
field; they never raise to the caller.
"""
from typing import Any, Dict, Optional

import httpx

from config import Settings, get_settings
from utils.logger import setup_api_logger

logger = setup_api_logger()

OK_STATUSES = {"OK", "ZERO_RESULTS"}
DETAIL_FIELDS = ("name,formatted_address,geometry,rating,user_ratings_total,reviews,photos,"
                 "opening_hours,website,formatted_phone_number,price_level,types")


class PlacesRequestError(ValueError):
    """Request is missing a field the action needs."""


def photo_url(settings: Settings, reference: str, max_width: int = 800) -> str:
    return (f"{settings.places_api_base_url}/maps/api/place/photo"
            f"?maxwidth={max_width}&photo_reference={reference}&key={settings.google_places_api_key}")


async def _get(settings: Settings, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
    params = dict(params, key=settings.google_places_api_key)
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        resp = await client.get(f"{settings.places_api_base_url}/maps/api/place/{path}/json", params=params)
        resp.raise_for_status()
        return resp.json()


async def _fetch(settings: Settings, path: str, params: Dict[str, Any], empty: Dict[str, Any],
                 ok_statuses=OK_STATUSES) -> Optional[Dict[str, Any]]:
    """Call the API; on failure return None after filling `empty` with the error."""
    try:
        data = await _get(settings, path, params)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Places %s request failed: %s", path, e)
        empty["error"] = str(e)
        return None
    if data.get("status") not in ok_statuses:
        logger.error("Places %s error: %s %s", path, data.get("status"), data.get("error_message"))
        empty["error"] = data.get("error_message") or data.get("status")
        return None
    return data


async def autocomplete(input_text: Optional[str], types: str = "(cities)",
                       settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    if not input_text or len(input_text) < 2:
        return {"predictions": []}

    result: Dict[str, Any] = {"predictions": []}
    data = await _fetch(settings, "autocomplete", {"input": input_text, "types": types}, result)
    if data is None:
        return result

    for p in data.get("predictions") or []:
        formatting = p.get("structured_formatting") or {}
        result["predictions"].append({
            "placeId": p.get("place_id"),
            "description": p.get("description"),
            "mainText": formatting.get("main_text") or p.get("description"),
            "secondaryText": formatting.get("secondary_text") or "",
            "types": p.get("types") or [],
        })
    return result


async def place_details(place_id: Optional[str], settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    if not place_id:
        raise PlacesRequestError("placeId is required")

    result: Dict[str, Any] = {"place": None}
    data = await _fetch(settings, "details", {"place_id": place_id, "fields": DETAIL_FIELDS}, result,
                        ok_statuses={"OK"})
    if data is None:
        return result

    place = data.get("result") or {}
    location = (place.get("geometry") or {}).get("location") or {}
    hours = place.get("opening_hours") or {}
    result["place"] = {
        "name": place.get("name"),
        "address": place.get("formatted_address"),
        "lat": location.get("lat"),
        "lng": location.get("lng"),
        "rating": place.get("rating"),
        "totalRatings": place.get("user_ratings_total"),
        "reviews": [
            {
                "authorName": r.get("author_name"),
                "rating": r.get("rating"),
                "text": r.get("text"),
                "relativeTime": r.get("relative_time_description"),
            }
            for r in (place.get("reviews") or [])[:5]
        ],
        "photos": [
            {
                "photoReference": ph.get("photo_reference"),
                "width": ph.get("width"),
                "height": ph.get("height"),
                "photoUrl": photo_url(settings, ph.get("photo_reference")),
            }
            for ph in (place.get("photos") or [])[:5]
        ],
        "openingHours": hours.get("weekday_text") or [],
        "isOpen": hours.get("open_now"),
        "website": place.get("website"),
        "phone": place.get("formatted_phone_number"),
        "priceLevel": place.get("price_level"),
        "types": place.get("types") or [],
    }
    return result


def _place_summary(settings: Settings, place: dict, address_key: str, photo_width: int) -> dict:
    location = (place.get("geometry") or {}).get("location") or {}
    photos = place.get("photos") or []
    return {
        "placeId": place.get("place_id"),
        "name": place.get("name"),
        "address": place.get(address_key),
        "lat": location.get("lat"),
        "lng": location.get("lng"),
        "rating": place.get("rating"),
        "totalRatings": place.get("user_ratings_total"),
        "priceLevel": place.get("price_level"),
        "types": place.get("types") or [],
        "photoUrl": photo_url(settings, photos[0]["photo_reference"], photo_width)
        if photos and photos[0].get("photo_reference") else None,
        "isOpen": (place.get("opening_hours") or {}).get("open_now"),
    }


async def nearby_search(lat: Optional[float], lng: Optional[float], radius: int = 5000,
                        place_type: str = "tourist_attraction",
                        settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    if lat is None or lng is None:
        raise PlacesRequestError("lat and lng are required")

    result: Dict[str, Any] = {"places": []}
    params = {"location": f"{lat},{lng}", "radius": radius, "type": place_type, "rankby": "prominence"}
    data = await _fetch(settings, "nearbysearch", params, result)
    if data is None:
        return result

    result["places"] = [_place_summary(settings, p, "vicinity", 400) for p in (data.get("results") or [])[:20]]
    return result


async def text_search(query: Optional[str], settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    if not query:
        raise PlacesRequestError("query is required")

    result: Dict[str, Any] = {"places": []}
    data = await _fetch(settings, "textsearch", {"query": query}, result)
    if data is None:
        return result

    result["places"] = [_place_summary(settings, p, "formatted_address", 800)
                        for p in (data.get("results") or [])[:10]]
    return result


def photo(photo_reference: Optional[str], max_width: int = 800,
          settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    if not photo_reference:
        raise PlacesRequestError("photoReference is required")
    return {"photoUrl": photo_url(settings, photo_reference, max_width)}
