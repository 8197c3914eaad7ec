"""Bridge between a launcher plugin UI and local settings, clipboard and temp files."""

from .errors import ConfigurationError, ForbiddenPathError, InvalidInputError, OcrResponseError
from .services import BridgeServices
from .settings import Settings

__all__ = [
    "BridgeServices",
    "ConfigurationError",
    "ForbiddenPathError",
    "InvalidInputError",
    "OcrResponseError",
    "Settings",
]
