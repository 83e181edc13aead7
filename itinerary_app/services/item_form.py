"""
Item Form - Field values of the itinerary item form.

Bridges extraction results and the trip store: merges what the extractor
found into the form, and turns a confirmed form into item fields.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from urllib.parse import urlparse

from ..models.extraction import ExtractionResult
from ..models.trip import Coordinates, ItemType, ItineraryItem, TravelType
from .errors import FormValidationError
from .views import parse_datetime


FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={domain}&sz=64"

# (form attribute, label shown to the user)
EXTRACTED_FORM_FIELDS = (
    ("title", "title"),
    ("location", "location"),
    ("start_date", "start date"),
    ("start_time", "start time"),
    ("end_date", "end date"),
    ("end_time", "end time"),
    ("price", "price"),
)


def is_valid_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value.strip())
    return bool(parsed.scheme) and bool(parsed.netloc)


def extract_domain(url: Optional[str]) -> str:
    """Hostname of ``url`` without a leading ``www.``; empty if there is none."""
    if not is_valid_url(url):
        return ""
    host = urlparse(url.strip()).hostname or ""
    return host.replace("www.", "", 1)


def favicon_url(url: Optional[str]) -> Optional[str]:
    domain = extract_domain(url)
    if not domain:
        return None
    return FAVICON_SERVICE.format(domain=domain)


def _combine(date_part: str, time_part: str) -> Optional[str]:
    if not date_part:
        return None
    if time_part:
        parsed = parse_datetime(f"{date_part}T{time_part}")
    else:
        parsed = parse_datetime(date_part)
    if parsed is None:
        raise FormValidationError(f"Invalid date or time: {date_part} {time_part}".strip())
    return parsed.isoformat()


class ItemForm(BaseModel):
    """Values of the item form, with dates and times in separate inputs."""
    model_config = ConfigDict(frozen=True)

    type: ItemType = ItemType.STAY
    travel_type: TravelType = TravelType.TRAIN
    title: str = ""
    location: str = ""
    start_date: str = ""
    start_time: str = ""
    end_date: str = ""
    end_time: str = ""
    price: str = ""
    url: str = ""
    notes: str = ""
    image: Optional[str] = None
    favicon_url: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @classmethod
    def from_item(cls, item: ItineraryItem) -> "ItemForm":
        """Pre-fill the form for editing an existing item."""
        start = parse_datetime(item.start_date)
        end = parse_datetime(item.end_date)
        return cls(
            type=item.type,
            travel_type=item.travel_type or TravelType.TRAIN,
            title=item.title,
            location=item.location or "",
            start_date=start.date().isoformat() if start else "",
            start_time=start.strftime("%H:%M") if start else "",
            end_date=end.date().isoformat() if end else "",
            end_time=end.strftime("%H:%M") if end else "",
            price=item.price or "",
            url=item.url or "",
            notes=item.notes or "",
            image=item.image,
            favicon_url=item.favicon_url,
            coordinates=item.coordinates,
        )

    def with_url(self, url: str) -> "ItemForm":
        """Set the url and derive its favicon."""
        return self.model_copy(update={"url": url, "favicon_url": favicon_url(url)})

    def to_item_fields(self) -> dict:
        """
        Fields for TripStore.add_itinerary_item / update_itinerary_item.

        Raises:
            FormValidationError: missing title or unreadable date/time
        """
        if not self.title.strip():
            raise FormValidationError("Title is required")

        return {
            "type": self.type,
            "travel_type": self.travel_type if self.type == ItemType.TRAVEL else None,
            "title": self.title,
            "location": self.location,
            "start_date": _combine(self.start_date, self.start_time),
            "end_date": _combine(self.end_date, self.end_time),
            "price": self.price,
            "url": self.url,
            "notes": self.notes,
            "image": self.image,
            "favicon_url": self.favicon_url,
            "coordinates": self.coordinates,
        }


def apply_extraction(form: ItemForm, result: ExtractionResult) -> tuple[ItemForm, list[str]]:
    """
    Copy every field the extractor found into the form.

    Returns the updated form and the labels of the fields that were filled.
    """
    updates = {}
    found = []
    for attr, label in EXTRACTED_FORM_FIELDS:
        value = getattr(result, attr)
        if value:
            updates[attr] = value
            found.append(label)
    if result.coordinates is not None:
        updates["coordinates"] = result.coordinates
        found.append("map location")
    return form.model_copy(update=updates), found


def extraction_message(fields_found: list[str]) -> str:
    if fields_found:
        return f"Extracted: {', '.join(fields_found)}"
    return "Could not extract any fields. Please fill in manually."
