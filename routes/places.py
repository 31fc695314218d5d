"""
Routes for the Google Places proxy: autocomplete, details, nearby, text search and photos.
"""
from fastapi import APIRouter, HTTPException

from schemas import PlacesRequest
from services import places_gateway
from services.places_gateway import PlacesRequestError

router = APIRouter(prefix="/places", tags=["Places"])


@router.post("/")
async def places(req: PlacesRequest):
    try:
        if req.action == "autocomplete":
            return await places_gateway.autocomplete(req.input, req.types)
        if req.action == "details":
            return await places_gateway.place_details(req.place_id)
        if req.action == "nearby":
            return await places_gateway.nearby_search(req.lat, req.lng, req.radius, req.type)
        if req.action == "search":
            return await places_gateway.text_search(req.query)
        if req.action == "photo":
            return places_gateway.photo(req.photo_reference, req.max_width)
    except PlacesRequestError as e:
        raise HTTPException(400, str(e))
    raise HTTPException(400, "Invalid action")
