"""Environment based configuration."""
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

SCREENSHOT_COMMAND = "截图文字识别"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class BridgeConfig:
    """Runtime settings for the bridge.

    Parameters
    ----------
    temp_dir:
        Directory that receives temporary images and is swept periodically.
    settings_path:
        JSON file backing the key-value store.
    cleanup_interval_ms:
        Interval between two cleanup sweeps.
    temp_max_age_ms:
        Age after which a temporary image is removed by the sweep.
    ocr_endpoint:
        Chat-completions URL that receives images, or ``None`` to disable
        forwarding.
    """

    temp_dir: Path
    settings_path: Path
    cleanup_interval_ms: int = 3_600_000
    temp_max_age_ms: int = 3_600_000
    capture_delay_ms: int = 100
    screenshot_command: str = SCREENSHOT_COMMAND
    ocr_endpoint: str | None = None
    ocr_model: str = "qwen-vl-ocr"
    ocr_copy_result: bool = True

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        """Build a configuration from ``os.environ``."""
        return cls(
            temp_dir=Path(os.getenv("BRIDGE_TEMP_DIR") or tempfile.gettempdir()),
            settings_path=Path(os.getenv("BRIDGE_SETTINGS_PATH", "data/settings.json")),
            cleanup_interval_ms=int(os.getenv("CLEANUP_INTERVAL_MS", "3600000")),
            temp_max_age_ms=int(os.getenv("TEMP_MAX_AGE_MS", "3600000")),
            capture_delay_ms=int(os.getenv("CAPTURE_DELAY_MS", "100")),
            screenshot_command=os.getenv("SCREENSHOT_COMMAND", SCREENSHOT_COMMAND),
            ocr_endpoint=os.getenv("OCR_ENDPOINT") or None,
            ocr_model=os.getenv("OCR_MODEL", "qwen-vl-ocr"),
            ocr_copy_result=_env_bool("OCR_COPY_RESULT", True),
        )
