"""Data models for the itinerary planner."""
from .trip import (
    AppState,
    Coordinates,
    ItemType,
    ItineraryItem,
    Location,
    LocationCategory,
    TravelType,
    Trip,
)
from .extraction import ExtractionResult, GeocodeResult

__all__ = [
    "AppState",
    "Coordinates",
    "ItemType",
    "ItineraryItem",
    "Location",
    "LocationCategory",
    "TravelType",
    "Trip",
    "ExtractionResult",
    "GeocodeResult",
]
