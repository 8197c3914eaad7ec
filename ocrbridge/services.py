"""The ``services`` object consumed by the plugin UI.

:class:`BridgeServices` is constructed explicitly and handed to whatever UI
layer needs it.  Storage sits behind :class:`~ocrbridge.storage.KeyValueStore`
so the backing store can be swapped in tests.
"""
from __future__ import annotations

import random
from pathlib import Path
from typing import Any, List, Mapping

from . import clipboard, tempfiles
from .clipboard import CopyFn
from .settings import Settings, SettingsRepository
from .storage import KeyValueStore


class BridgeServices:
    """Settings, clipboard and temp-file operations exposed to the UI.

    Parameters
    ----------
    store:
        Key-value store holding the serialized settings.
    temp_dir:
        Directory for temporary images.
    copy:
        Clipboard writer; defaults to :func:`pyperclip.copy`.
    rng:
        Random source used by :meth:`get_random_token`.
    """

    def __init__(
        self,
        store: KeyValueStore,
        temp_dir: Path,
        copy: CopyFn | None = None,
        rng: random.Random | None = None,
        temp_prefix: str = tempfiles.TEMP_PREFIX,
    ) -> None:
        self.settings = SettingsRepository(store, rng=rng)
        self.temp_dir = temp_dir
        self.temp_prefix = temp_prefix
        self._copy = copy

    def get_settings(self) -> Settings:
        return self.settings.get()

    def save_settings(self, settings: Settings | Mapping[str, Any]) -> Settings:
        return self.settings.save(settings)

    def get_random_token(self) -> str | None:
        return self.settings.random_token()

    def copy_to_clipboard(self, text: str) -> None:
        clipboard.copy_to_clipboard(text, copy=self._copy)

    def save_temp_image(self, base64_data: str) -> str:
        return tempfiles.save_temp_image(base64_data, self.temp_dir, prefix=self.temp_prefix)

    def read_image_as_base64(self, file_path: str) -> str:
        return tempfiles.read_image_as_base64(file_path)

    def delete_temp_image(self, file_path: str) -> bool:
        return tempfiles.delete_temp_image(file_path, self.temp_dir, prefix=self.temp_prefix)

    def cleanup_temp_files(self, max_age_ms: int = tempfiles.MAX_AGE_MS) -> List[Path]:
        return tempfiles.cleanup_temp_files(self.temp_dir, prefix=self.temp_prefix, max_age_ms=max_age_ms)
