"""Error types shared by the tripreel services."""


class PlannerError(Exception):
    """Base class for errors raised by the planner pipeline."""
    pass


class InputError(PlannerError):
    """Raised when a required parameter is missing or invalid."""
    pass


class UpstreamError(PlannerError):
    """Raised when an upstream API call fails during a flow."""
    pass


class NetworkError(UpstreamError):
    """Raised for network-related errors."""
    pass


class ServiceResponseError(UpstreamError):
    """Raised when an upstream service answers with an error or a malformed body."""
    pass
