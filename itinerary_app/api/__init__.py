"""HTTP API for the itinerary planner."""
from .routes import router, validation_error_handler

__all__ = ["router", "validation_error_handler"]
