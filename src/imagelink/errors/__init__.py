"""Custom exception hierarchy for imagelink."""

from __future__ import annotations


class ImageLinkError(Exception):
    """Base class for all custom errors raised by imagelink."""


# --- 3-layer hierarchy ---

class DomainError(ImageLinkError):
    """Base class for domain-level errors."""


class InfrastructureError(ImageLinkError):
    """Base class for infrastructure-level errors."""


class ApplicationError(ImageLinkError):
    """Base class for application-level errors."""


# --- Domain errors ---

class InvalidURLError(DomainError):
    """Raised when a string is not a well-formed http(s) URL."""


# --- Infrastructure errors ---

class NetworkError(InfrastructureError):
    """Raised when the HTTP transport fails before a response is received."""


class InvalidResponseError(InfrastructureError):
    """Raised when a response status code falls outside 200..299."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(InfrastructureError):
    """Raised when fetched bytes are not a decodable image."""


class EncodingError(DecodeError):
    """Raised when a text body is not valid UTF-8."""


# --- Application errors ---

class NoConnectivityError(ApplicationError):
    """Raised when a network operation is attempted while offline."""


# --- Settings errors ---

class SettingsError(ImageLinkError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
