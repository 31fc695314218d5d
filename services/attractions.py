"""
Sightseeing suggestions (OpenTripMap) and activity pictures (Unsplash).

Both are decoration for the results page: failures come back as empty data.
"""
from typing import Optional

import httpx

from config import Settings, get_settings
from schemas import Attraction, AttractionRequest, AttractionResponse
from utils.logger import setup_api_logger

logger = setup_api_logger()

OPENTRIPMAP_URL = "https://api.opentripmap.com/0.1/en/places/radius"
UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
ATTRACTION_KINDS = "cultural,historic,architecture,museums,natural"

CATEGORY_DESCRIPTIONS = {
    "cultural": "Explore the rich cultural heritage.",
    "historic": "Step back in time and discover the history.",
    "architecture": "Admire remarkable architecture.",
    "museums": "Discover fascinating collections and exhibits.",
    "natural": "Enjoy the natural beauty of the area.",
}


def format_category(category: str) -> str:
    return category.replace("_", " ").title()


def _to_attraction(place: dict, city: str) -> Attraction:
    kinds = (place.get("kinds") or "").split(",")
    category = kinds[0] or "attraction"
    point = place.get("point") or {}
    rate = place.get("rate")
    return Attraction(
        id=place.get("xid", ""),
        name=place["name"].strip(),
        description=(f"A {category.replace('_', ' ')} in {city}. "
                     f"{CATEGORY_DESCRIPTIONS.get(category, 'A must-see spot.')}"),
        category=format_category(category),
        # OpenTripMap rates 1-7; shown on a 1-10 scale
        rating=min(10, int(rate) + 3) if rate else 5,
        lat=point.get("lat"),
        lon=point.get("lon"),
        distance=round(place["dist"]) if place.get("dist") else None,
    )


async def fetch_attractions(req: AttractionRequest, settings: Optional[Settings] = None) -> AttractionResponse:
    settings = settings or get_settings()
    params = {
        "radius": req.radius,
        "lon": req.lon,
        "lat": req.lat,
        "kinds": ATTRACTION_KINDS,
        "rate": 2,
        "format": "json",
        "limit": req.limit,
        "apikey": settings.opentripmap_api_key,
    }
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            resp = await client.get(OPENTRIPMAP_URL, params=params)
            resp.raise_for_status()
            places = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("OpenTripMap request failed for %s: %s", req.city, e)
        return AttractionResponse(attractions=[], city="", count=0, error=str(e))

    attractions = [
        _to_attraction(p, req.city)
        for p in places
        if (p.get("name") or "").strip()
    ][:req.limit]
    logger.info("OpenTripMap returned %d attractions for %s", len(attractions), req.city)
    return AttractionResponse(attractions=attractions, city=req.city, count=len(attractions))


async def fetch_activity_image(query: str, settings: Optional[Settings] = None) -> Optional[str]:
    settings = settings or get_settings()
    if not settings.unsplash_access_key:
        logger.warning("UNSPLASH_ACCESS_KEY not configured; no image for %r", query)
        return None
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            resp = await client.get(
                UNSPLASH_SEARCH_URL,
                params={"query": query, "per_page": 1, "orientation": "landscape"},
                headers={"Authorization": f"Client-ID {settings.unsplash_access_key}"},
            )
            resp.raise_for_status()
            data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Unsplash request failed for %r: %s", query, e)
        return None

    results = data.get("results") or []
    if not results:
        return None
    return (results[0].get("urls") or {}).get("regular")
