"""
Trip Store - Sole owner of trips, itinerary items and wishlist locations.

State changes go through ``reduce``, a pure function of (state, action).
The ``TripStore`` object builds actions (generating ids and timestamps),
applies them and persists the full snapshot after every change.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import Settings, settings as default_settings
from ..models.actions import (
    Action,
    AddItineraryItem,
    AddLocation,
    CreateTrip,
    DeleteItineraryItem,
    DeleteLocation,
    DeleteTrip,
    LoadState,
    SetActiveTrip,
    UpdateItineraryItem,
    UpdateLocation,
    UpdateTrip,
)
from ..models.trip import (
    AppState,
    ItineraryItem,
    Location,
    Trip,
    merge_fields,
)
from .persistence import LocalStorage, load_state, save_state

logger = logging.getLogger(__name__)


def _replace_trip(state: AppState, trip_id: str, update: Callable[[Trip], Trip]) -> AppState:
    trips = [update(trip) if trip.id == trip_id else trip for trip in state.trips]
    return state.model_copy(update={"trips": trips})


def reduce(state: AppState, action: Action) -> AppState:
    """
    Apply ``action`` to ``state`` and return the new state.

    Never mutates ``state``. Actions aimed at unknown ids leave the state
    as it was.
    """
    if isinstance(action, LoadState):
        return action.state

    if isinstance(action, CreateTrip):
        return state.model_copy(update={
            "trips": [*state.trips, action.trip],
            "active_trip": action.trip.id,
        })

    if isinstance(action, UpdateTrip):
        return _replace_trip(state, action.trip_id, lambda trip: merge_fields(trip, action.changes))

    if isinstance(action, DeleteTrip):
        active = None if state.active_trip == action.trip_id else state.active_trip
        return state.model_copy(update={
            "trips": [trip for trip in state.trips if trip.id != action.trip_id],
            "active_trip": active,
        })

    if isinstance(action, SetActiveTrip):
        if action.trip_id is not None and not state.has_trip(action.trip_id):
            return state
        return state.model_copy(update={"active_trip": action.trip_id})

    if isinstance(action, AddItineraryItem):
        return _replace_trip(
            state,
            action.trip_id,
            lambda trip: trip.model_copy(update={"items": [*trip.items, action.item]}),
        )

    if isinstance(action, UpdateItineraryItem):
        def update_item(trip: Trip) -> Trip:
            items = [
                merge_fields(item, action.changes) if item.id == action.item_id else item
                for item in trip.items
            ]
            return trip.model_copy(update={"items": items})

        return _replace_trip(state, action.trip_id, update_item)

    if isinstance(action, DeleteItineraryItem):
        return _replace_trip(
            state,
            action.trip_id,
            lambda trip: trip.model_copy(update={
                "items": [item for item in trip.items if item.id != action.item_id]
            }),
        )

    if isinstance(action, AddLocation):
        return state.model_copy(update={"locations": [*state.locations, action.location]})

    if isinstance(action, UpdateLocation):
        locations = [
            merge_fields(loc, action.changes) if loc.id == action.location_id else loc
            for loc in state.locations
        ]
        return state.model_copy(update={"locations": locations})

    if isinstance(action, DeleteLocation):
        return state.model_copy(update={
            "locations": [loc for loc in state.locations if loc.id != action.location_id]
        })

    raise TypeError(f"Unhandled store action: {type(action).__name__}")


IDENTITY_KEYS = ("id", "created_at", "createdAt")


def _without_identity(data: dict) -> dict:
    return {k: v for k, v in data.items() if k not in IDENTITY_KEYS}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


class TripStore:
    """Trips, itinerary items and wishlist locations backed by a storage."""

    def __init__(
        self,
        storage,
        clock: Optional[Callable[[], str]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.storage = storage
        self._clock = clock or _now
        self._new_id = id_factory or _new_id
        self._state = AppState()
        self.dispatch(LoadState(state=load_state(storage)), persist=False)

    # State access

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def trips(self) -> list[Trip]:
        return self._state.trips

    @property
    def locations(self) -> list[Location]:
        return self._state.locations

    @property
    def active_trip_id(self) -> Optional[str]:
        return self._state.active_trip

    def dispatch(self, action: Action, persist: bool = True) -> AppState:
        """Reduce ``action`` into the current state and persist the result."""
        self._state = reduce(self._state, action)
        if persist:
            save_state(self.storage, self._state)
        return self._state

    # Trips

    def create_trip(
        self,
        name: str,
        description: str = "",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        cover_image: Optional[str] = None,
    ) -> Optional[Trip]:
        """Create a trip and make it the active one."""
        if not name or not name.strip():
            logger.warning("Ignoring trip creation without a name")
            return None

        trip = Trip(
            id=self._new_id(),
            name=name,
            description=description or "",
            start_date=start_date,
            end_date=end_date,
            cover_image=cover_image,
            items=[],
            created_at=self._clock(),
        )
        self.dispatch(CreateTrip(trip=trip))
        return trip

    def update_trip(self, trip_data: dict):
        """Merge ``trip_data`` (which must carry ``id``) into the matching trip."""
        trip_id = trip_data.get("id")
        if self._state.get_trip(trip_id) is None:
            logger.warning(f"Trip not found for update: {trip_id}")
            return
        self.dispatch(UpdateTrip(trip_id=trip_id, changes=dict(trip_data)))

    def delete_trip(self, trip_id: str):
        """Delete a trip together with its items."""
        self.dispatch(DeleteTrip(trip_id=trip_id))

    def set_active_trip(self, trip_id: Optional[str]):
        """Point at an existing trip, or clear the pointer with ``None``."""
        if trip_id is not None and not self._state.has_trip(trip_id):
            logger.warning(f"Cannot activate unknown trip: {trip_id}")
            return
        self.dispatch(SetActiveTrip(trip_id=trip_id))

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return self._state.get_trip(trip_id)

    def get_active_trip(self) -> Optional[Trip]:
        return self._state.get_trip(self._state.active_trip)

    # Itinerary items

    def add_itinerary_item(self, trip_id: str, item_data: dict) -> Optional[ItineraryItem]:
        """Add a new item to a trip. Returns None if the trip does not exist."""
        if self._state.get_trip(trip_id) is None:
            logger.warning(f"Trip not found for new item: {trip_id}")
            return None

        item = ItineraryItem.model_validate({
            **_without_identity(item_data),
            "id": self._new_id(),
            "created_at": self._clock(),
        })
        self.dispatch(AddItineraryItem(trip_id=trip_id, item=item))
        return item

    def update_itinerary_item(self, trip_id: str, item_data: dict):
        """Merge ``item_data`` (which must carry ``id``) into the matching item."""
        trip = self._state.get_trip(trip_id)
        item_id = item_data.get("id")
        if trip is None or trip.get_item(item_id) is None:
            logger.warning(f"Item {item_id} not found in trip {trip_id}")
            return
        self.dispatch(UpdateItineraryItem(trip_id=trip_id, item_id=item_id, changes=dict(item_data)))

    def delete_itinerary_item(self, trip_id: str, item_id: str):
        self.dispatch(DeleteItineraryItem(trip_id=trip_id, item_id=item_id))

    # Wishlist locations

    def add_location(self, location_data: dict) -> Location:
        location = Location.model_validate({
            **_without_identity(location_data),
            "id": self._new_id(),
            "created_at": self._clock(),
        })
        self.dispatch(AddLocation(location=location))
        return location

    def update_location(self, location_data: dict):
        location_id = location_data.get("id")
        if self._state.get_location(location_id) is None:
            logger.warning(f"Location not found for update: {location_id}")
            return
        self.dispatch(UpdateLocation(location_id=location_id, changes=dict(location_data)))

    def delete_location(self, location_id: str):
        self.dispatch(DeleteLocation(location_id=location_id))

    def get_location(self, location_id: str) -> Optional[Location]:
        return self._state.get_location(location_id)


def open_store(config: Optional[Settings] = None) -> TripStore:
    """A store over local storage in the configured ``storage_dir``."""
    config = config or default_settings
    return TripStore(LocalStorage(config.storage_dir))
