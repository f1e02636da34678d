"""
Error types for the proximity and routing features.

Routing errors never leave the route enricher: they are turned into
straight-line results. Geolocation and catalog errors are surfaced to the
caller, who must show them to the user.
"""


class HousingError(Exception):
    """Base class for errors raised by the housing package."""


class RoutingError(HousingError):
    """The routing provider was unreachable, failed, or returned malformed data."""


class ImplausibleRouteError(RoutingError):
    """The routing provider returned a path outside the operating region."""


class GeolocationError(HousingError):
    """The user's location could not be obtained (denied, unavailable, invalid)."""


class UnknownUniversityError(HousingError, LookupError):
    """No university with the requested id exists in the catalog."""
