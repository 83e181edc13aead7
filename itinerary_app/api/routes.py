"""
API Routes for the itinerary planner.

The extraction endpoints fill item forms from a screenshot or a booking
page; the geocode endpoint resolves a typed location.
"""
from fastapi import APIRouter, Depends, Query, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional
import logging

from ..services.errors import ConfigurationError, ExtractionError, PageFetchError
from ..services.extractor import ItemExtractor, get_extractor
from ..services.geocoding import Geocoder, get_geocoder


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["itinerary-planner"])

URL_ACCESS_ERROR = "Could not access the URL. It may be blocked or require authentication."
IMAGE_FAILURE = "Failed to extract information from the image"
URL_FAILURE = "Failed to extract information from the URL"
INVALID_BODY = "Invalid request body"


# Request Models
class ParseImageRequest(BaseModel):
    image: Optional[str] = None
    itemType: Optional[str] = None


class ScrapeUrlRequest(BaseModel):
    url: Optional[str] = None
    itemType: Optional[str] = None


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Extraction endpoints answer malformed bodies with their own 400 shape."""
    if request.url.path in (router.prefix + "/parse-image", router.prefix + "/scrape-url"):
        logger.warning(f"Rejected body for {request.url.path}: {exc.errors()}")
        return _failure(400, INVALID_BODY)
    return await request_validation_exception_handler(request, exc)


# Endpoints

@router.post("/parse-image")
async def parse_image(
    request: ParseImageRequest,
    extractor: ItemExtractor = Depends(get_extractor),
):
    """Extract item fields from an uploaded screenshot."""
    if not request.image:
        return _failure(400, "Image is required")

    try:
        result = await extractor.extract_from_image(request.image, request.itemType)
    except ConfigurationError as e:
        return _failure(500, str(e))
    except ExtractionError as e:
        logger.error(f"Image parse error: {e}")
        return _failure(500, IMAGE_FAILURE)

    return {"success": True, **result.to_response_dict()}


@router.post("/scrape-url")
async def scrape_url(
    request: ScrapeUrlRequest,
    extractor: ItemExtractor = Depends(get_extractor),
):
    """Extract item fields from a booking page."""
    if not request.url:
        return _failure(400, "URL is required")

    try:
        result = await extractor.extract_from_url(request.url, request.itemType)
    except PageFetchError:
        return _failure(400, URL_ACCESS_ERROR)
    except ConfigurationError as e:
        return _failure(500, str(e))
    except ExtractionError as e:
        logger.error(f"Scrape error: {e}")
        return _failure(500, URL_FAILURE)

    return {"success": True, **result.to_response_dict()}


@router.get("/geocode")
async def geocode(
    q: str = Query(..., description="Free-text location"),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Resolve a location to coordinates; `found` is false when it can't be."""
    place = await geocoder.geocode(q)
    if place is None:
        return {"found": False}
    return {"found": True, **place.model_dump(by_alias=True)}
