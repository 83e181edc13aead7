"""
Extraction models - What the AI extraction and geocoding services return.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

from .trip import Coordinates


class ExtractionResult(BaseModel):
    """Best-effort partial itinerary item read from a page or screenshot."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = Field(None, description="Name of the place/activity/travel")
    location: Optional[str] = Field(None, description="Address or location")
    start_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    start_time: Optional[str] = Field(None, description="HH:MM, 24h")
    end_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    end_time: Optional[str] = Field(None, description="HH:MM, 24h")
    price: Optional[str] = Field(None, description="Price with currency symbol")
    coordinates: Optional[Coordinates] = Field(
        None,
        description="Geocoded location, when the location could be resolved"
    )

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())

    def to_response_dict(self) -> dict:
        """camelCase fields that were actually found."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GeocodeResult(BaseModel):
    """A single resolved place."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    lat: float
    lng: float
    display_name: Optional[str] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)
