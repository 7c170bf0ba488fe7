# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from typing import Any
from urllib.parse import urlsplit, urlunsplit


# =============================================================================
# Connection String Utilities
# =============================================================================

def redact_uri(uri: str | None) -> str:
    """
    Strip credentials from a connection URI so it can be logged.

    Args:
        uri: Connection string, possibly containing user:password

    Returns:
        The URI with the userinfo part replaced by "***", or "<unset>"

    Example:
        redact_uri("mongodb://bob:secret@db:27017/app")  # "mongodb://***@db:27017/app"
    """
    if not uri:
        return "<unset>"

    try:
        parts = urlsplit(uri)
    except ValueError:
        return "<unparseable>"

    if "@" not in parts.netloc:
        return uri

    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, f"***@{host}", parts.path, parts.query, parts.fragment))


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }


class ConfigurationMissingError(ApplicationError):
    """Raised when a required setting has no value."""

    def __init__(self, setting_name: str):
        super().__init__(
            message=f"Required setting is not configured: {setting_name}",
            code="CONFIGURATION_MISSING",
            suggestion=f"Set {setting_name} in the environment or in your .env file",
            details={"setting": setting_name},
        )
