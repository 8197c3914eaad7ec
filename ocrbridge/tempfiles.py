"""Temporary image files handed to external OCR tooling by path."""
from __future__ import annotations

import base64
import binascii
import os
import re
import time
from pathlib import Path
from typing import List

from .errors import ForbiddenPathError, InvalidInputError
from .logger import get_logger

logger = get_logger(__name__)

TEMP_PREFIX = "qwen_ocr_"
MAX_AGE_MS = 3_600_000

_DATA_URL_RE = re.compile(r"^data:image/\w+;base64,")
_WHITESPACE_RE = re.compile(r"\s+")


def _now_ms() -> int:
    return int(time.time() * 1000)


def strip_data_url(data: str) -> str:
    """Remove a leading ``data:image/<type>;base64,`` header if present."""
    return _DATA_URL_RE.sub("", data, count=1)


def decode_image(base64_data: str) -> bytes:
    """Decode base64 image data, with or without a data-URL header."""
    if not base64_data or not isinstance(base64_data, str):
        raise InvalidInputError("image data must be a non-empty base64 string")
    payload = _WHITESPACE_RE.sub("", strip_data_url(base64_data))
    if not payload:
        raise InvalidInputError("image data is empty")
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidInputError(f"image data is not valid base64: {exc}") from exc


def save_temp_image(base64_data: str, temp_dir: Path, prefix: str = TEMP_PREFIX) -> str:
    """Write decoded image data to ``temp_dir`` and return the absolute path.

    Files are named ``<prefix><epoch-ms>.png``; the millisecond suffix is
    bumped while the name is taken.
    """
    image = decode_image(base64_data)
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
        stamp = _now_ms()
        path = temp_dir / f"{prefix}{stamp}.png"
        while path.exists():
            stamp += 1
            path = temp_dir / f"{prefix}{stamp}.png"
        path.write_bytes(image)
    except OSError:
        logger.exception("Failed to save temporary image")
        raise
    logger.debug("Saved %d bytes to %s", len(image), path)
    return str(path.resolve())


def read_image_as_base64(file_path: str) -> str:
    """Read ``file_path`` and return it as a PNG data URL."""
    if not file_path or not isinstance(file_path, str):
        raise InvalidInputError("file path must be a non-empty string")
    try:
        data = Path(file_path).read_bytes()
    except OSError:
        logger.exception("Failed to read image %s", file_path)
        raise
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def delete_temp_image(file_path: str, temp_dir: Path, prefix: str = TEMP_PREFIX) -> bool:
    """Remove a temporary image; returns ``False`` if it was already gone.

    Only ``prefix``-named files directly inside ``temp_dir`` may be removed.
    """
    if not file_path or not isinstance(file_path, str):
        raise InvalidInputError("file path must be a non-empty string")
    path = Path(file_path).resolve()
    if path.parent != temp_dir.resolve() or not path.name.startswith(prefix):
        logger.warning("Refusing to delete %s outside %s", file_path, temp_dir)
        raise ForbiddenPathError(f"{file_path} is not a temporary image")
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def cleanup_temp_files(
    directory: Path,
    prefix: str = TEMP_PREFIX,
    max_age_ms: int = MAX_AGE_MS,
    now: int | None = None,
) -> List[Path]:
    """Delete ``prefix``-named files in ``directory`` older than ``max_age_ms``.

    Files without the prefix are never touched.  A failure on one file is
    logged and the sweep moves on to the next one.

    Returns
    -------
    list[Path]
        Paths that were removed.
    """
    now = _now_ms() if now is None else now
    removed: List[Path] = []
    try:
        entries = list(os.scandir(directory))
    except OSError as exc:
        logger.error("Failed to list %s for cleanup: %s", directory, exc)
        return removed
    for entry in entries:
        if not entry.name.startswith(prefix):
            continue
        try:
            if not entry.is_file(follow_symlinks=False):
                continue
            age_ms = now - entry.stat(follow_symlinks=False).st_mtime * 1000
            if age_ms > max_age_ms:
                os.unlink(entry.path)
                removed.append(Path(entry.path))
        except OSError as exc:
            logger.warning("Failed to clean up %s: %s", entry.path, exc)
    if removed:
        logger.info("Removed %d expired temporary file(s) from %s", len(removed), directory)
    return removed
