"""
Item Extractor.
Reads booking details from a screenshot or a web page with an LLM and
geocodes the location it finds.
"""
import logging
from typing import Optional

from ..config import Settings, settings as default_settings
from ..models.extraction import ExtractionResult
from .geocoding import Geocoder
from .llm_client import ImageInput, get_completion_provider, parse_ai_response
from .page_fetcher import PageFetcher

logger = logging.getLogger(__name__)


IMAGE_TYPE_HINTS = {
    "stay": "This is a screenshot of an accommodation/stay booking (like Airbnb, hotel, etc).",
    "travel": "This is a screenshot of a travel booking (train, flight, bus ticket, etc).",
    "activity": "This is a screenshot of an activity or event booking (tour, museum, restaurant, etc).",
}

PAGE_TYPE_HINTS = {
    "stay": "This is a accommodation/stay booking (like Airbnb, hotel, etc).",
    "travel": "This is a travel booking (train, flight, bus ticket, etc).",
    "activity": "This is an activity or event booking (tour, museum, restaurant, etc).",
}

RESPONSE_SCHEMA = """Return ONLY a JSON object with these fields (use null for any field not found):
{
  "title": "name of the place/activity/travel",
  "location": "address or location",
  "startDate": "YYYY-MM-DD format or null",
  "startTime": "HH:MM format (24h) or null",
  "endDate": "YYYY-MM-DD format or null",
  "endTime": "HH:MM format (24h) or null",
  "price": "price with currency symbol"
}"""

EXTRACTED_FIELDS = ("title", "location", "startDate", "startTime", "endDate", "endTime", "price")


def _hint(hints: dict, item_type: Optional[str]) -> str:
    return hints.get(str(getattr(item_type, "value", item_type)), "")


def build_image_prompt(item_type: Optional[str]) -> str:
    return f"""Extract travel booking information from this screenshot. {_hint(IMAGE_TYPE_HINTS, item_type)}

Look for dates, times, locations, prices, and any booking details visible in the image.

{RESPONSE_SCHEMA}

JSON response:"""


def build_page_prompt(item_type: Optional[str], content: str) -> str:
    return f"""Extract travel booking information from this webpage content. {_hint(PAGE_TYPE_HINTS, item_type)}

{RESPONSE_SCHEMA}

Webpage content:
{content}

JSON response:"""


def clean_extraction(data: dict) -> ExtractionResult:
    """Keep the known fields, as non-empty strings."""
    cleaned = {}
    for field in EXTRACTED_FIELDS:
        value = data.get(field)
        if value is None or isinstance(value, (dict, list)):
            continue
        value = str(value).strip()
        if not value or value.lower() == "null":
            continue
        cleaned[field] = value
    return ExtractionResult.model_validate(cleaned)


class ItemExtractor:
    """Turns a screenshot or a booking page into itinerary item fields."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        geocoder: Optional[Geocoder] = None,
        fetcher: Optional[PageFetcher] = None,
        provider=None,
    ):
        self.config = config or default_settings
        self.geocoder = geocoder or Geocoder(self.config)
        self.fetcher = fetcher or PageFetcher(self.config)
        self._provider = provider

    def _get_provider(self):
        # Built once; raises ConfigurationError on every call until a key is set
        if self._provider is None:
            self._provider = get_completion_provider(self.config)
        return self._provider

    async def extract_from_image(self, image: str, item_type: Optional[str] = None) -> ExtractionResult:
        """
        Extract item fields from a screenshot.

        Args:
            image: The screenshot as a base64 data URI
            item_type: stay, travel or activity; sharpens the prompt

        Raises:
            ConfigurationError: no provider key is set
            ExtractionError: bad image data or the provider call failed
        """
        image_input = ImageInput.from_data_uri(image)
        provider = self._get_provider()
        logger.info(f"Extracting {item_type or 'item'} from image with {provider.name}")

        text = await provider.complete(build_image_prompt(item_type), image=image_input)
        return await self._finish(text)

    async def extract_from_url(self, url: str, item_type: Optional[str] = None) -> ExtractionResult:
        """
        Extract item fields from a booking page.

        Raises:
            PageFetchError: the page could not be fetched
            ConfigurationError: no provider key is set
            ExtractionError: the provider call failed
        """
        content = await self.fetcher.fetch_text(url)
        provider = self._get_provider()
        logger.info(f"Extracting {item_type or 'item'} from {url} with {provider.name}")

        text = await provider.complete(build_page_prompt(item_type, content))
        return await self._finish(text)

    async def _finish(self, text: str) -> ExtractionResult:
        result = clean_extraction(parse_ai_response(text))
        if result.location:
            place = await self.geocoder.geocode(result.location)
            if place is not None:
                result = result.model_copy(update={"coordinates": place.coordinates})
        return result


# Global extractor instance
extractor: Optional[ItemExtractor] = None


def get_extractor() -> ItemExtractor:
    """Get or create the global extractor."""
    global extractor
    if extractor is None:
        extractor = ItemExtractor()
    return extractor
