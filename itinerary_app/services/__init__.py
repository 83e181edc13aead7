"""Services for the itinerary planner."""
from .store import TripStore, open_store, reduce
from .persistence import LocalStorage, MemoryStorage, STORAGE_KEY
from .geocoding import Geocoder
from .extractor import ItemExtractor

__all__ = [
    "TripStore",
    "reduce",
    "open_store",
    "LocalStorage",
    "MemoryStorage",
    "STORAGE_KEY",
    "Geocoder",
    "ItemExtractor",
]
