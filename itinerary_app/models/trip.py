"""
Trip models - Trips, itinerary items, wishlist locations and the app state.

Attributes are snake_case in Python; serialized snapshots use the camelCase
keys the browser client has always stored.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from enum import Enum


class ItemType(str, Enum):
    """Kinds of itinerary items."""
    STAY = "stay"
    TRAVEL = "travel"
    ACTIVITY = "activity"


class TravelType(str, Enum):
    """Means of transport for a travel item."""
    TRAIN = "train"
    FLIGHT = "flight"
    BUS = "bus"
    CAR = "car"
    FERRY = "ferry"
    OTHER = "other"


class LocationCategory(str, Enum):
    """Categories for wishlist locations."""
    LODGING = "lodging"
    RESTAURANT = "restaurant"
    SIGHT = "sight"
    MUSEUM = "museum"
    SHOPPING = "shopping"
    NIGHTLIFE = "nightlife"
    NATURE = "nature"
    OTHER = "other"


class StoredModel(BaseModel):
    """Base for everything that ends up in the persisted snapshot."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys and JSON-safe values."""
        return self.model_dump(mode="json", by_alias=True)


class Coordinates(StoredModel):
    """A latitude/longitude pair."""
    lat: float
    lng: float


class ItineraryItem(StoredModel):
    """A stay, travel leg or activity belonging to one trip."""
    id: str = Field(..., description="Unique within the owning trip")
    type: ItemType = Field(..., description="Kind of item")
    travel_type: Optional[TravelType] = Field(
        None,
        description="Transport mode, only meaningful for travel items"
    )
    title: str = Field(default="", description="Display title")
    location: Optional[str] = Field(None, description="Free-text location")
    start_date: Optional[str] = Field(
        None,
        description="ISO-8601 start date-time, stored verbatim"
    )
    end_date: Optional[str] = Field(
        None,
        description="ISO-8601 end date-time, stored verbatim"
    )
    price: Optional[str] = Field(None, description="Price with currency symbol")
    url: Optional[str] = None
    notes: Optional[str] = None
    image: Optional[str] = Field(None, description="Embedded image data URI")
    favicon_url: Optional[str] = Field(None, description="Favicon for the url's domain")
    coordinates: Optional[Coordinates] = None
    created_at: Optional[str] = Field(None, description="ISO-8601 creation time")

    @model_validator(mode="before")
    @classmethod
    def _drop_travel_type_for_non_travel(cls, data):
        if isinstance(data, dict) and data.get("type") != ItemType.TRAVEL:
            data = {k: v for k, v in data.items() if k not in ("travel_type", "travelType")}
        return data


class Trip(StoredModel):
    """A named travel plan and its itinerary items."""
    id: str
    name: str = Field(..., min_length=1)
    description: str = ""
    start_date: Optional[str] = Field(None, description="Calendar date YYYY-MM-DD")
    end_date: Optional[str] = Field(None, description="Calendar date YYYY-MM-DD")
    cover_image: Optional[str] = None
    items: list[ItineraryItem] = Field(default_factory=list)
    created_at: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Trip name must not be blank")
        return value

    def get_item(self, item_id: str) -> Optional[ItineraryItem]:
        """Find an item of this trip by id."""
        return next((item for item in self.items if item.id == item_id), None)


class Location(StoredModel):
    """A wishlist place of interest, independent of any trip."""
    id: str
    name: str = ""
    category: LocationCategory = LocationCategory.OTHER
    address: Optional[str] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    created_at: Optional[str] = None


class AppState(StoredModel):
    """Everything the store owns; one snapshot per storage."""
    trips: list[Trip] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list)
    active_trip: Optional[str] = Field(
        None,
        description="Id of the trip in focus, must reference an existing trip"
    )

    def get_trip(self, trip_id: Optional[str]) -> Optional[Trip]:
        """Find a trip by id."""
        if trip_id is None:
            return None
        return next((trip for trip in self.trips if trip.id == trip_id), None)

    def get_location(self, location_id: str) -> Optional[Location]:
        """Find a wishlist location by id."""
        return next((loc for loc in self.locations if loc.id == location_id), None)

    def has_trip(self, trip_id: Optional[str]) -> bool:
        return self.get_trip(trip_id) is not None


def field_changes(model_cls: type[StoredModel], data: dict) -> dict:
    """
    Normalize an update payload to attribute names.

    Accepts camelCase or snake_case keys, drops unknown keys and the
    identity fields (``id``, ``created_at``), which updates never touch.
    """
    by_alias = {}
    for name, info in model_cls.model_fields.items():
        by_alias[name] = name
        if info.alias:
            by_alias[info.alias] = name

    changes = {}
    for key, value in data.items():
        name = by_alias.get(key)
        if name is None or name in ("id", "created_at"):
            continue
        changes[name] = value
    return changes


def merge_fields(model: StoredModel, data: dict) -> StoredModel:
    """Return a validated copy of ``model`` with ``data`` merged in."""
    merged = model.model_dump()
    merged.update(field_changes(type(model), data))
    return type(model).model_validate(merged)
