"""Errors raised by the itinerary services."""


class ItineraryError(Exception):
    """Base class for itinerary planner errors."""


class ConfigurationError(ItineraryError):
    """No completion provider is configured."""


class ExtractionError(ItineraryError):
    """The completion provider call failed or its input was unusable."""


class PageFetchError(ItineraryError):
    """The target page could not be fetched."""


class FormValidationError(ItineraryError):
    """A required form field is missing."""


class JSONExtractionError(ItineraryError):
    """No usable JSON object in a model response."""


class NoJSONObjectFound(JSONExtractionError):
    """The response text contains no brace-delimited object."""


class InvalidJSONObject(JSONExtractionError):
    """A brace-delimited span was found but is not a JSON object."""
