from fastapi import APIRouter

from schemas import ActivityImageRequest, ActivityImageResponse, AttractionRequest, AttractionResponse
from services.attractions import fetch_activity_image, fetch_attractions

router = APIRouter(prefix="/attractions", tags=["Attractions"])


@router.post("/", response_model=AttractionResponse, response_model_exclude_none=True)
async def search_attractions(req: AttractionRequest):
    return await fetch_attractions(req)


@router.post("/image", response_model=ActivityImageResponse)
async def activity_image(req: ActivityImageRequest):
    return ActivityImageResponse(image_url=await fetch_activity_image(req.query))
