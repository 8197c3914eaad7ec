"""System clipboard access through pyperclip."""
from __future__ import annotations

from typing import Callable

import pyperclip

from .errors import InvalidInputError
from .logger import get_logger

logger = get_logger(__name__)

CopyFn = Callable[[str], None]


def copy_to_clipboard(text: str, copy: CopyFn | None = None) -> None:
    """Write ``text`` to the system clipboard.

    ``copy`` defaults to :func:`pyperclip.copy`; backend failures are logged
    and re-raised.
    """
    if not isinstance(text, str):
        raise InvalidInputError("clipboard text must be a string")
    copy = copy or pyperclip.copy
    try:
        copy(text)
    except Exception:
        logger.exception("Failed to copy to clipboard")
        raise
    logger.debug("Copied %d characters to clipboard", len(text))
