"""Logging helpers with API token masking."""

from __future__ import annotations

import logging
import re


_TOKEN_RE = re.compile(r"(token|api_key)=[^\s,]+", re.IGNORECASE)
_BEARER_RE = re.compile(r"(Bearer\s+)[^\s'\"]+")


class TokenFilter(logging.Filter):
    """Mask API tokens in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = _TOKEN_RE.sub(lambda m: f"{m.group(1)}=***", record.getMessage())
        record.msg = _BEARER_RE.sub(lambda m: f"{m.group(1)}***", msg)
        record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and attach :class:`TokenFilter` to its handlers.

    Filters on a logger do not apply to records propagated from child
    loggers, so the filter is installed on the handlers instead.
    """

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, TokenFilter) for f in handler.filters):
            handler.addFilter(TokenFilter())


def get_logger(name: str) -> logging.Logger:
    """Return a logger that masks tokens even without :func:`configure_logging`."""

    log = logging.getLogger(name)
    if not any(isinstance(f, TokenFilter) for f in log.filters):
        log.addFilter(TokenFilter())
    return log


logger = get_logger("ocrbridge")
