"""Application errors.

Services raise these to express failures; the API layer renders each one as
`{"success": false, "message": ...}` with the attached HTTP status. Messages are
safe to show to end users and never carry internal details.
"""

from __future__ import annotations


class FlickHubError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    default_message: str = "Server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FlickHubError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "All fields are required."


class AuthError(FlickHubError):
    """Credentials did not match. Deliberately generic."""

    status_code = 401
    default_message = "Invalid credentials."


class NotFoundError(FlickHubError):
    status_code = 404
    default_message = "Not found."


class ConflictError(FlickHubError):
    """A unique key (user id or email) is already taken."""

    status_code = 409
    default_message = "User ID or email already exists."


class UpstreamError(FlickHubError):
    """The movie catalog could not be reached or answered with garbage."""

    status_code = 500
    default_message = "Failed to fetch from TMDB"


class InternalError(FlickHubError):
    """Store or infrastructure failure."""

    status_code = 500
    default_message = "Server error."
