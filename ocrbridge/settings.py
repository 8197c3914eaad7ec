"""Persisted OCR settings: API tokens and the prompt sent with each image."""
from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .errors import InvalidInputError
from .logger import get_logger
from .storage import KeyValueStore

logger = get_logger(__name__)

SETTINGS_KEY = "qwen_ocr_settings"


def normalize_tokens(value: Any) -> List[Any]:
    """Return ``value`` as a token list.

    A comma separated string is split, trimmed and stripped of empty
    entries.  Lists are copied as-is and anything else becomes ``[]``.
    """
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if isinstance(value, list):
        return list(value)
    return []


@dataclass
class Settings:
    """Token list and prompt used to configure OCR requests."""

    tokens: List[Any] = field(default_factory=list)
    prompt: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.extra, "tokens": list(self.tokens), "prompt": self.prompt}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a stored or user supplied mapping."""
        prompt = data.get("prompt", "")
        return cls(
            tokens=normalize_tokens(data.get("tokens")),
            prompt=prompt if isinstance(prompt, str) else "",
            extra={k: v for k, v in data.items() if k not in {"tokens", "prompt"}},
        )


class SettingsRepository:
    """Read and write :class:`Settings` under a fixed storage key."""

    def __init__(self, store: KeyValueStore, rng: random.Random | None = None, key: str = SETTINGS_KEY) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.key = key

    def get(self) -> Settings:
        """Return stored settings or the defaults; never raises."""
        try:
            raw = self.store.get(self.key)
            if not raw:
                return Settings()
            data = json.loads(raw)
            if not isinstance(data, dict):
                logger.warning("Ignoring stored settings that are not an object")
                return Settings()
            return Settings.from_dict(data)
        except Exception as exc:
            logger.error("Failed to read settings: %s", exc)
            return Settings()

    def save(self, settings: Settings | Mapping[str, Any]) -> Settings:
        """Normalize and persist ``settings``.

        Raises
        ------
        InvalidInputError
            If ``settings`` is not a mapping or :class:`Settings`.
        """
        if isinstance(settings, Settings):
            normalized = Settings.from_dict(settings.to_dict())
        elif isinstance(settings, Mapping):
            normalized = Settings.from_dict(settings)
        else:
            raise InvalidInputError("settings must be an object")
        try:
            self.store.set(self.key, json.dumps(normalized.to_dict(), ensure_ascii=False))
        except Exception:
            logger.exception("Failed to save settings")
            raise
        logger.info("Saved settings with %d token(s)", len(normalized.tokens))
        return normalized

    def random_token(self) -> str | None:
        """Pick one token uniformly, or ``None`` when there are none."""
        try:
            tokens = self.get().tokens
            if not tokens:
                return None
            return self.rng.choice(tokens)
        except Exception as exc:
            logger.error("Failed to pick a token: %s", exc)
            return None
