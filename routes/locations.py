from fastapi import APIRouter

from schemas import LocationSearchRequest, LocationSearchResult
from services.location_directory import search_locations

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.post("/search", response_model=LocationSearchResult)
async def search_cities(req: LocationSearchRequest):
    """City/airport search for the intake form; keywords under 2 characters return nothing."""
    return LocationSearchResult(locations=await search_locations(req.keyword))
