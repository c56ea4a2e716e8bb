"""Exceptions defined and used by this package."""

from typing import Optional


class APIError(Exception):
    """Error interacting with NationStates API."""


class InvalidArgument(APIError, ValueError):
    """A caller supplied value cannot be turned into a valid request.

    Raised before any network activity takes place.
    """


class APIRequestFailure(APIError):
    """Error reaching or talking to the NS API host.

    The underlying transport error is attached as the cause.
    statusCode is set when the server answered with an HTTP error status.
    """

    def __init__(self, message: str, statusCode: Optional[int] = None) -> None:
        super().__init__(message)
        self.statusCode = statusCode


class APIResponseInvalid(APIError):
    """The NS API response did not have the shape expected for the endpoint."""
