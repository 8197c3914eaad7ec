"""Exception types raised by the bridge services."""
from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a caller passes a value of the wrong type or shape."""


class ConfigurationError(RuntimeError):
    """Raised when a required setting (token, endpoint) is missing."""


class ForbiddenPathError(PermissionError):
    """Raised when a path lies outside the files the bridge manages."""


class OcrResponseError(RuntimeError):
    """Raised when the OCR endpoint answers with an unexpected shape."""
