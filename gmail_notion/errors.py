"""
Error taxonomy for the Gmail → Notion mapper.

- AppError: base class carrying a machine-readable code and details
- ConfigError: missing API key / database id, fatal before any mapping work
- MappingError: handler misconfiguration or a failed property conversion
- NotionAPIError: non-2xx response from the Notion API (raw message kept)
- NotionConnectionError: transport failure talking to the Notion API
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base exception for the application."""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def user_message(self) -> str:
        """Short message suitable for the terminal."""
        return self.message


class ConfigError(AppError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "CONFIG_ERROR", {"field": field})
        self.field = field

    def user_message(self) -> str:
        if self.field:
            return f"Configuration error ({self.field}): {self.message}"
        return f"Configuration error: {self.message}"


class MappingError(AppError):
    """A property mapping could not be built or converted."""

    def __init__(
        self,
        message: str,
        property_name: Optional[str] = None,
        property_type: Optional[str] = None,
    ):
        super().__init__(
            message,
            "MAPPING_ERROR",
            {"property_name": property_name, "property_type": property_type},
        )
        self.property_name = property_name
        self.property_type = property_type


class NotionAPIError(AppError):
    """The Notion API rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        notion_code: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            "NOTION_API_ERROR",
            {"status_code": status_code, "notion_code": notion_code, "endpoint": endpoint},
        )
        self.status_code = status_code
        self.notion_code = notion_code
        self.endpoint = endpoint

    @property
    def is_retryable(self) -> bool:
        """Rate limits, timeouts and server errors may succeed on retry."""
        if self.status_code is None:
            return False
        return self.status_code in (408, 429) or self.status_code >= 500

    def user_message(self) -> str:
        if self.status_code == 401:
            return "Notion rejected the API key. Check NOTION_API_KEY."
        if self.status_code == 404:
            return (
                "Notion database not found. Make sure the integration "
                "has been shared with the database."
            )
        if self.status_code == 429:
            return "Notion rate limit reached. Try again in a moment."
        return f"Notion API error: {self.message}"


class NotionConnectionError(NotionAPIError):
    """The Notion API could not be reached."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message, status_code=None, notion_code="connection_error", endpoint=endpoint)
        self.code = "NOTION_CONNECTION_ERROR"
