"""
Geocoding Service.
Resolves free-text locations to coordinates with OpenStreetMap (Nominatim).
"""
import httpx
import logging
from typing import Optional

from ..config import Settings, settings as default_settings
from ..models.extraction import GeocodeResult

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3


class Geocoder:
    """Free-text place search, best match only."""

    def __init__(self, config: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or default_settings
        self._client = client
        # Nominatim requires a user-agent
        self.headers = {"User-Agent": self.config.geocoder_user_agent}

    async def geocode(self, text: Optional[str]) -> Optional[GeocodeResult]:
        """
        Look up ``text`` and return the first match.

        Queries shorter than three characters are not sent. Zero results, an
        error status and network failures all come back as None.
        """
        if not text or len(text.strip()) < MIN_QUERY_LENGTH:
            return None

        params = {
            "q": text.strip(),
            "format": "json",
            "limit": 1,
        }

        try:
            if self._client is not None:
                response = await self._client.get(self.config.nominatim_url, params=params, headers=self.headers)
            else:
                async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
                    response = await client.get(self.config.nominatim_url, params=params, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error(f"Geocoding error for '{text}': {e}")
            return None

        if not response.is_success:
            logger.error(f"Geocoding request failed: {response.status_code}")
            return None

        try:
            results = response.json()
            if not results:
                logger.warning(f"No results found for place: {text}")
                return None
            first = results[0]
            return GeocodeResult(
                lat=float(first["lat"]),
                lng=float(first["lon"]),
                display_name=first.get("display_name"),
            )
        except (ValueError, KeyError, TypeError, IndexError) as e:
            logger.error(f"Unexpected geocoding payload for '{text}': {e}")
            return None


# Global geocoder instance
geocoder: Optional[Geocoder] = None


def get_geocoder() -> Geocoder:
    """Get or create the global geocoder."""
    global geocoder
    if geocoder is None:
        geocoder = Geocoder()
    return geocoder
