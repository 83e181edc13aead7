"""
Store actions - the closed set of state transitions the trip store accepts.

Every action carries fully built data: ids and timestamps are generated
before the action exists, so reducing an action is deterministic.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional, Union

from .trip import AppState, ItineraryItem, Location, Trip


class StoreAction(BaseModel):
    """Base for store actions."""
    model_config = ConfigDict(frozen=True)


class LoadState(StoreAction):
    """Replace the whole state with a previously persisted snapshot."""
    state: AppState


class CreateTrip(StoreAction):
    trip: Trip


class UpdateTrip(StoreAction):
    trip_id: str
    changes: dict


class DeleteTrip(StoreAction):
    trip_id: str


class SetActiveTrip(StoreAction):
    trip_id: Optional[str] = None


class AddItineraryItem(StoreAction):
    trip_id: str
    item: ItineraryItem


class UpdateItineraryItem(StoreAction):
    trip_id: str
    item_id: str
    changes: dict


class DeleteItineraryItem(StoreAction):
    trip_id: str
    item_id: str


class AddLocation(StoreAction):
    location: Location


class UpdateLocation(StoreAction):
    location_id: str
    changes: dict


class DeleteLocation(StoreAction):
    location_id: str


Action = Union[
    LoadState,
    CreateTrip,
    UpdateTrip,
    DeleteTrip,
    SetActiveTrip,
    AddItineraryItem,
    UpdateItineraryItem,
    DeleteItineraryItem,
    AddLocation,
    UpdateLocation,
    DeleteLocation,
]
