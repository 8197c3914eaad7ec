"""Downstream OCR entry point.

The bridge never performs OCR itself; it hands images to an
:class:`ImageProcessor`.  :class:`HttpImageProcessor` sends them to an
OpenAI compatible vision endpoint authenticated with one of the stored
tokens.
"""
from __future__ import annotations

from typing import Any, Dict, Protocol

import requests

from .errors import ConfigurationError, OcrResponseError
from .logger import get_logger
from .services import BridgeServices

logger = get_logger(__name__)

DEFAULT_PROMPT = "Recognize all text in this image and return it as plain text."


class ImageProcessor(Protocol):
    """Callable receiving a base64 image or data URL."""

    def __call__(self, image: str) -> Any:  # pragma: no cover - runtime interface
        ...


def as_data_url(image: str) -> str:
    if image.startswith("data:"):
        return image
    return "data:image/png;base64," + image


def extract_text(data: Any) -> str:
    """Return the answer text of a chat-completions response.

    ``content`` may be a string or a list of content parts; text parts are
    joined.  Any other shape raises :class:`OcrResponseError`.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise OcrResponseError(f"malformed OCR response: {data!r:.200}") from exc
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            str(part.get("text", "")) for part in content if isinstance(part, dict) and part.get("type") == "text"
        )
    raise OcrResponseError(f"unexpected OCR content type: {type(content).__name__}")


class HttpImageProcessor:
    """Post images to a chat-completions endpoint and return the text.

    Parameters
    ----------
    services:
        Source of the API token and prompt; also used to copy the result.
    endpoint:
        Full URL of the ``/chat/completions`` endpoint.
    model:
        Model name sent with each request.
    copy_result:
        Copy recognized text to the clipboard when ``True``.
    """

    def __init__(
        self,
        services: BridgeServices,
        endpoint: str,
        model: str = "qwen-vl-ocr",
        copy_result: bool = True,
        timeout: float = 60,
    ) -> None:
        self.services = services
        self.endpoint = endpoint
        self.model = model
        self.copy_result = copy_result
        self.timeout = timeout

    def build_payload(self, image: str, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": as_data_url(image)}},
                        {"type": "text", "text": prompt or DEFAULT_PROMPT},
                    ],
                }
            ],
        }

    def __call__(self, image: str) -> str:
        token = self.services.get_random_token()
        if not token:
            raise ConfigurationError("no API token configured")
        prompt = self.services.get_settings().prompt
        response = requests.post(
            self.endpoint,
            json=self.build_payload(image, prompt),
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        text = extract_text(response.json())
        logger.info("OCR returned %d characters", len(text))
        if text and self.copy_result:
            self.services.copy_to_clipboard(text)
        return text
