"""
Derived views over trips and wishlist locations.

Pure functions: ordering and grouping for the timeline, colour and icon
lookups, and the points shown on the map.
"""
from collections import OrderedDict
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel, Field, model_validator

from ..models.trip import (
    Coordinates,
    ItemType,
    ItineraryItem,
    Location,
    LocationCategory,
    TravelType,
    Trip,
)


ITEM_COLORS = {
    ItemType.STAY: "#667eea",
    ItemType.TRAVEL: "#f093fb",
    ItemType.ACTIVITY: "#4fd1c5",
}
DEFAULT_ITEM_COLOR = "#a0aec0"

ITEM_ICONS = {
    ItemType.STAY: "🏨",
    ItemType.ACTIVITY: "🎯",
}
TRAVEL_ICONS = {
    TravelType.TRAIN: "🚂",
    TravelType.FLIGHT: "✈️",
    TravelType.BUS: "🚌",
    TravelType.CAR: "🚗",
    TravelType.FERRY: "⛴️",
    TravelType.OTHER: "🚀",
}
DEFAULT_ITEM_ICON = "📍"

CATEGORY_COLORS = {
    LocationCategory.LODGING: "#667eea",
    LocationCategory.RESTAURANT: "#FF6B6B",
    LocationCategory.SIGHT: "#4ECDC4",
    LocationCategory.MUSEUM: "#9B59B6",
    LocationCategory.SHOPPING: "#F39C12",
    LocationCategory.NIGHTLIFE: "#8E44AD",
    LocationCategory.NATURE: "#27AE60",
    LocationCategory.OTHER: "#95A5A6",
}

CATEGORY_ICONS = {
    LocationCategory.LODGING: "🏨",
    LocationCategory.RESTAURANT: "🍽️",
    LocationCategory.SIGHT: "🏛️",
    LocationCategory.MUSEUM: "🖼️",
    LocationCategory.SHOPPING: "🛍️",
    LocationCategory.NIGHTLIFE: "🌙",
    LocationCategory.NATURE: "🌳",
    LocationCategory.OTHER: "📍",
}


def _coerce(enum_cls: type[Enum], value) -> Optional[Enum]:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or date-time. None when absent or invalid."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _sort_key(item) -> tuple:
    parsed = parse_datetime(item.start_date)
    if parsed is None:
        # undated items always go last
        return (1, 0.0)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (0, parsed.timestamp())


def sorted_items_by_start(items: Iterable[ItineraryItem]) -> list[ItineraryItem]:
    """
    Items ordered by start date-time, earliest first.

    The sort is stable. Items with a missing or unparseable start keep
    their relative order after all dated items. Timestamps without an
    offset are compared as UTC.
    """
    return sorted(items, key=_sort_key)


def day_key(item) -> Optional[str]:
    """The calendar day an item (or entry) starts on, as written in its timestamp."""
    parsed = parse_datetime(item.start_date)
    return parsed.date().isoformat() if parsed else None


def group_by_calendar_day(items: Iterable) -> OrderedDict:
    """
    Group items or itinerary entries by the day they start, days ascending.

    Each group is sorted by start time. Items without a valid start date
    are left out.
    """
    groups: dict[str, list] = {}
    for item in sorted_items_by_start(items):
        key = day_key(item)
        if key is None:
            continue
        groups.setdefault(key, []).append(item)
    return OrderedDict((key, groups[key]) for key in sorted(groups))


class ItineraryEntry(BaseModel):
    """An itinerary item tagged with the trip it belongs to."""
    item: ItineraryItem
    trip_id: str
    trip_name: str

    @property
    def start_date(self) -> Optional[str]:
        return self.item.start_date


def itinerary_entries(trips: Iterable[Trip], trip_id: Optional[str] = None) -> list[ItineraryEntry]:
    """
    Items across all trips, or of the trip ``trip_id``, ordered by start.

    Entries carry their trip's id and name and can be passed straight to
    ``group_by_calendar_day``. An unknown ``trip_id`` gives no entries.
    """
    entries = [
        ItineraryEntry(item=item, trip_id=trip.id, trip_name=trip.name)
        for trip in trips
        if trip_id is None or trip.id == trip_id
        for item in trip.items
    ]
    return sorted(entries, key=_sort_key)


def format_date(value: Optional[str], with_time: bool = False) -> str:
    """'May 1, 2024' (or 'May 1, 2024 2:00 PM'); empty for invalid input."""
    parsed = parse_datetime(value)
    if parsed is None:
        return ""
    text = f"{parsed:%b} {parsed.day}, {parsed.year}"
    if with_time:
        hour = parsed.hour % 12 or 12
        text += f" {hour}:{parsed:%M} {'AM' if parsed.hour < 12 else 'PM'}"
    return text


def format_date_range(start: Optional[str], end: Optional[str]) -> str:
    """Start and end date-times joined with a dash, as far as they exist."""
    start_text = format_date(start, with_time=True)
    if not start_text:
        return ""
    end_text = format_date(end, with_time=True)
    if not end_text:
        return start_text
    return f"{start_text} - {end_text}"


def truncate_text(text: Optional[str], max_length: int = 100) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


# ---------------------------------------------------------------------------
# Colours and icons
# ---------------------------------------------------------------------------

def item_color(item_type: Union[ItemType, str, None]) -> str:
    return ITEM_COLORS.get(_coerce(ItemType, item_type), DEFAULT_ITEM_COLOR)


def item_icon(
    item_type: Union[ItemType, str, None],
    travel_type: Union[TravelType, str, None] = None,
) -> str:
    """Glyph for an item; travel items are drawn by their transport mode."""
    kind = _coerce(ItemType, item_type)
    if kind == ItemType.TRAVEL:
        mode = _coerce(TravelType, travel_type) or TravelType.OTHER
        return TRAVEL_ICONS[mode]
    return ITEM_ICONS.get(kind, DEFAULT_ITEM_ICON)


def category_color(category: Union[LocationCategory, str, None]) -> str:
    key = _coerce(LocationCategory, category) or LocationCategory.OTHER
    return CATEGORY_COLORS[key]


def category_icon(category: Union[LocationCategory, str, None]) -> str:
    key = _coerce(LocationCategory, category) or LocationCategory.OTHER
    return CATEGORY_ICONS[key]


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------

class MapPointSource(str, Enum):
    WISHLIST = "wishlist"
    TRIP_ITEM = "trip_item"


class MapPoint(BaseModel):
    """Something that can be drawn on the map."""
    id: str
    title: str
    coordinates: Coordinates
    source: MapPointSource
    color: str
    icon: str
    trip_id: Optional[str] = None
    trip_name: Optional[str] = None
    item_type: Optional[ItemType] = None
    travel_type: Optional[TravelType] = None
    category: Optional[LocationCategory] = None
    start_date: Optional[str] = None
    location: Optional[str] = None
    thumbnail: Optional[str] = Field(None, description="Item image, else its favicon")


class MapFilter(BaseModel):
    """
    Which points to show. At most one criterion is set; none means all.

    An item type keeps only trip items of that type, a category keeps only
    wishlist locations of that category, a trip id keeps only that trip's
    items.
    """
    item_type: Optional[ItemType] = None
    category: Optional[LocationCategory] = None
    trip_id: Optional[str] = None

    @model_validator(mode="after")
    def _single_criterion(self) -> "MapFilter":
        set_fields = [v for v in (self.item_type, self.category, self.trip_id) if v is not None]
        if len(set_fields) > 1:
            raise ValueError("MapFilter takes a single criterion")
        return self

    @classmethod
    def all(cls) -> "MapFilter":
        return cls()

    @classmethod
    def for_item_type(cls, item_type: ItemType) -> "MapFilter":
        return cls(item_type=item_type)

    @classmethod
    def for_category(cls, category: LocationCategory) -> "MapFilter":
        return cls(category=category)

    @classmethod
    def for_trip(cls, trip_id: str) -> "MapFilter":
        return cls(trip_id=trip_id)

    @property
    def includes_wishlist(self) -> bool:
        return self.item_type is None and self.trip_id is None

    @property
    def includes_trip_items(self) -> bool:
        return self.category is None


def _location_point(location: Location) -> MapPoint:
    return MapPoint(
        id=location.id,
        title=location.name,
        coordinates=location.coordinates,
        source=MapPointSource.WISHLIST,
        color=category_color(location.category),
        icon=category_icon(location.category),
        category=location.category,
        location=location.address,
    )


def _item_point(item: ItineraryItem, trip: Trip) -> MapPoint:
    return MapPoint(
        id=item.id,
        title=item.title,
        coordinates=item.coordinates,
        source=MapPointSource.TRIP_ITEM,
        color=item_color(item.type),
        icon=item_icon(item.type, item.travel_type),
        trip_id=trip.id,
        trip_name=trip.name,
        item_type=item.type,
        travel_type=item.travel_type,
        start_date=item.start_date,
        location=item.location,
        thumbnail=item.image or item.favicon_url,
    )


def map_points(
    locations: Iterable[Location],
    trips: Iterable[Trip],
    filter: Optional[MapFilter] = None,
) -> list[MapPoint]:
    """
    Wishlist locations and trip items that carry coordinates.

    Wishlist points come first in stored order, then trip items across all
    trips ordered by start.
    """
    filter = filter or MapFilter.all()
    points = []

    if filter.includes_wishlist:
        for location in locations:
            if location.coordinates is None:
                continue
            if filter.category is not None and location.category != filter.category:
                continue
            points.append(_location_point(location))

    if filter.includes_trip_items:
        owned = []
        for trip in trips:
            if filter.trip_id is not None and trip.id != filter.trip_id:
                continue
            for item in trip.items:
                if item.coordinates is None:
                    continue
                if filter.item_type is not None and item.type != filter.item_type:
                    continue
                owned.append((item, trip))
        for item, trip in sorted(owned, key=lambda pair: _sort_key(pair[0])):
            points.append(_item_point(item, trip))

    return points


def route_positions(
    points: Iterable[MapPoint],
    filter: Optional[MapFilter] = None,
) -> list[tuple[float, float]]:
    """
    (lat, lng) pairs of trip-item points in order, for a route line.

    Only a single selected trip has a route; any other filter gives none.
    """
    if filter is None or filter.trip_id is None:
        return []
    return [
        (p.coordinates.lat, p.coordinates.lng)
        for p in points
        if p.source == MapPointSource.TRIP_ITEM
    ]
