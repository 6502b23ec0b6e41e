"""Error taxonomy for weather lookups.

Every failure a page can run into is one of these. Each carries the message a
user should see, so callers only decide where to show it.
"""

from __future__ import annotations


class WeatherServiceError(Exception):
    """Base error for weather lookups."""

    user_message = "Error fetching weather"

    def __init__(self, message: str | None = None, *, user_message: str | None = None) -> None:
        super().__init__(message or user_message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class ValidationError(WeatherServiceError):
    """The location query was empty or too long; no request was made."""

    user_message = "Please enter a city"


class NotFoundError(WeatherServiceError):
    """The provider does not know the requested location."""

    user_message = "City not found"


class AuthError(WeatherServiceError):
    """The API key is missing or was rejected."""

    user_message = "Invalid API key"


class TransientError(WeatherServiceError):
    """Any other upstream, transport or payload failure."""

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def error_for_status(status: int, message: str | None = None) -> WeatherServiceError:
    if status == 404:
        return NotFoundError(message)
    if status == 401:
        return AuthError(message)
    return TransientError(message, status=status)
