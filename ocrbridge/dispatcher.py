"""React to ``plugin-enter`` events by forwarding an image for OCR."""
from __future__ import annotations

import asyncio
import re
from typing import Set

from .config import SCREENSHOT_COMMAND
from .host import FileDescriptor, Host, PluginEnterEvent
from .logger import get_logger
from .processor import ImageProcessor
from .services import BridgeServices

logger = get_logger(__name__)

IMAGE_FILE_RE = re.compile(r"\.(jpg|jpeg|png|gif|bmp)$", re.IGNORECASE)


class PluginEnterDispatcher:
    """Route launcher events to the downstream OCR processor.

    * the screenshot command hides the window, captures the screen and
      forwards the capture once the window is shown again;
    * ``img`` events forward their base64 payload unchanged;
    * ``files`` events forward the first file if it is an image.

    Failures are logged and never propagated to the host.
    """

    def __init__(
        self,
        services: BridgeServices,
        host: Host,
        processor: ImageProcessor | None,
        capture_delay_ms: int = 100,
        screenshot_command: str = SCREENSHOT_COMMAND,
    ) -> None:
        self.services = services
        self.host = host
        self.processor = processor
        self.capture_delay_ms = capture_delay_ms
        self.screenshot_command = screenshot_command
        self._pending: Set[asyncio.Task] = set()

    def attach(self) -> None:
        """Subscribe to the host's ``plugin-enter`` events."""
        self.host.on_plugin_enter(self.handle)

    async def handle(self, event: PluginEnterEvent) -> None:
        logger.info("plugin-enter: %s", event.summary())
        try:
            if event.payload == self.screenshot_command:
                await self._capture()
            elif event.type == "img":
                await self.forward(event.payload)
            elif event.type == "files" and isinstance(event.payload, list) and event.payload:
                await self._handle_file(event.payload[0])
            else:
                logger.debug("Ignoring plugin-enter event %s", event.code)
        except Exception:
            logger.exception("Failed to handle plugin-enter event")

    async def _capture(self) -> None:
        loop = asyncio.get_running_loop()
        self.host.hide_window()
        await asyncio.sleep(self.capture_delay_ms / 1000)

        def on_captured(image: str | None) -> None:
            self.host.show_window()
            if image:
                loop.call_soon_threadsafe(self._spawn, image)

        self.host.capture_screen(on_captured)

    async def _handle_file(self, descriptor: object) -> None:
        if not isinstance(descriptor, FileDescriptor):
            logger.warning("Unexpected file payload: %r", descriptor)
            return
        if not descriptor.is_file or not IMAGE_FILE_RE.search(descriptor.path):
            logger.info("Skipping non-image file %s", descriptor.path)
            return
        image = self.services.read_image_as_base64(descriptor.path)
        await self.forward(image)

    def _spawn(self, image: str) -> None:
        task = asyncio.ensure_future(self.forward(image))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def forward(self, image: str) -> None:
        """Hand ``image`` (base64 or data URL) to the processor."""
        if self.processor is None:
            logger.warning("No image processor configured; dropping image")
            return
        try:
            await asyncio.to_thread(self.processor, image)
        except Exception:
            logger.exception("Image processing failed")

    async def wait_idle(self) -> None:
        """Wait for forwards started by screen capture callbacks."""
        await asyncio.sleep(0)
        while self._pending:
            await asyncio.gather(*list(self._pending))
