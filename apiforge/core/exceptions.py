"""Exception taxonomy for the schema-to-API engine.

Every error carries the HTTP status it maps to; ``main.py`` renders them into
the ``{"success": false, "error": ...}`` envelope.
"""

from fastapi import status


class ApiForgeError(Exception):
    """Base exception for API Forge."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(ApiForgeError):
    """Raised for a malformed model/field spec or a missing required field."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ApiForgeError):
    """Raised when credentials are missing or invalid."""
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(ApiForgeError):
    """Raised when the caller's role lacks the requested action."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundOrForbidden(ApiForgeError):
    """Raised when a row or model is absent, or exists but is not owned by the caller.

    The two cases are deliberately indistinguishable to the caller.
    """
    status_code = status.HTTP_404_NOT_FOUND


class PersistenceError(ApiForgeError):
    """Raised when DDL or DML against the store fails."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class DefinitionCorruption(ApiForgeError):
    """Raised when a stored model definition cannot be parsed."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
