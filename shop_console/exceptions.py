"""
Exceptions raised by the shop console.

Every fetch or mutation failure surfaces as a ShopConsoleError subclass so
views can catch one type and show a message inline.
"""

from typing import Any, Dict, Optional


class ShopConsoleError(Exception):
    """Base exception for all shop console errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(ShopConsoleError):
    """The API could not be reached."""
    pass


class ApiError(ShopConsoleError):
    """The API answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        server_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(server_message or message, details)
        self.status_code = status_code
        self.server_message = server_message


class UnauthorizedError(ApiError):
    """HTTP 401. The session has already been cleared when this is raised."""

    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(message, status_code=401)


class ValidationError(ShopConsoleError):
    """Client-side form constraint violation."""
    pass


class LocationUnavailableError(ShopConsoleError):
    """Current location could not be determined."""
    pass


def user_message(error: ShopConsoleError, fallback: str) -> str:
    """The server's own error text when it sent one, else fallback."""
    if isinstance(error, ApiError) and error.server_message:
        return error.server_message
    return fallback
