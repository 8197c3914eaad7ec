"""Boundary between the bridge and the launcher hosting the plugin.

The launcher dispatches ``plugin-enter`` events and owns the plugin window
and the screen capture tool.  :class:`Host` is the narrow interface the
dispatcher relies on; :class:`LocalHost` is an in-process implementation
driven through :meth:`LocalHost.emit`.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Mapping, Protocol, Union

from .logger import get_logger

logger = get_logger(__name__)

CaptureCallback = Callable[[Union[str, None]], None]
PluginEnterHandler = Callable[["PluginEnterEvent"], Union[Awaitable[None], None]]


@dataclass
class FileDescriptor:
    """A file handed over by the launcher."""

    is_file: bool
    path: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileDescriptor":
        return cls(is_file=bool(data.get("isFile", False)), path=str(data.get("path", "")))


@dataclass
class PluginEnterEvent:
    """Payload of the launcher's ``plugin-enter`` event.

    ``payload`` is a base64 image for ``img`` events, a list of
    :class:`FileDescriptor` for ``files`` events and usually the matched
    command text otherwise.
    """

    code: str = ""
    type: str = ""
    payload: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PluginEnterEvent":
        event_type = str(data.get("type") or "")
        payload = data.get("payload")
        if event_type == "files" and isinstance(payload, list):
            payload = [FileDescriptor.from_dict(p) if isinstance(p, Mapping) else p for p in payload]
        return cls(code=str(data.get("code") or ""), type=event_type, payload=payload)

    def summary(self) -> str:
        """Short description for logs; image data is not included."""
        if isinstance(self.payload, str) and len(self.payload) > 64:
            payload = f"<{len(self.payload)} chars>"
        elif isinstance(self.payload, list):
            payload = f"<{len(self.payload)} file(s)>"
        else:
            payload = repr(self.payload)
        return f"code={self.code!r} type={self.type!r} payload={payload}"


class Host(Protocol):
    """Services the launcher provides to the plugin."""

    def on_plugin_enter(self, handler: PluginEnterHandler) -> None:
        ...

    def hide_window(self) -> None:
        ...

    def show_window(self) -> None:
        ...

    def capture_screen(self, callback: CaptureCallback) -> None:
        ...


@dataclass
class LocalHost:
    """In-process host used by the HTTP server and tests.

    ``capture`` returns a base64 screenshot or ``None``.  Without it,
    :meth:`capture_screen` only logs a warning.
    """

    capture: Callable[[], Union[str, None]] | None = None
    visible: bool = True
    handlers: List[PluginEnterHandler] = field(default_factory=list)

    def on_plugin_enter(self, handler: PluginEnterHandler) -> None:
        self.handlers.append(handler)

    def hide_window(self) -> None:
        self.visible = False

    def show_window(self) -> None:
        self.visible = True

    def capture_screen(self, callback: CaptureCallback) -> None:
        if self.capture is None:
            logger.warning("Screen capture is not available on this host")
            return
        callback(self.capture())

    async def emit(self, event: PluginEnterEvent) -> None:
        """Deliver ``event`` to every registered handler."""
        for handler in list(self.handlers):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("plugin-enter handler failed")
