"""Tests for plugin-enter event handling with a fake launcher host."""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from typing import List

from ocrbridge.config import SCREENSHOT_COMMAND
from ocrbridge.dispatcher import PluginEnterDispatcher
from ocrbridge.host import FileDescriptor, LocalHost, PluginEnterEvent
from ocrbridge.services import BridgeServices
from ocrbridge.storage import MemoryStore


class FakeHost:
    """Records window calls and replays a canned capture."""

    def __init__(self, capture: str | None = "c2NyZWVu") -> None:
        self.calls: List[str] = []
        self.capture = capture
        self.handlers = []

    def on_plugin_enter(self, handler) -> None:
        self.handlers.append(handler)

    def hide_window(self) -> None:
        self.calls.append("hide")

    def show_window(self) -> None:
        self.calls.append("show")

    def capture_screen(self, callback) -> None:
        self.calls.append("capture")
        callback(self.capture)


def _dispatcher(tmp_path: Path, host, processed: list) -> PluginEnterDispatcher:
    services = BridgeServices(MemoryStore(), tmp_path, copy=lambda text: None)
    return PluginEnterDispatcher(services, host, processed.append, capture_delay_ms=0)


def _run(dispatcher: PluginEnterDispatcher, event: PluginEnterEvent) -> None:
    async def go() -> None:
        await dispatcher.handle(event)
        await dispatcher.wait_idle()

    asyncio.run(go())


def test_screenshot_command(tmp_path: Path) -> None:
    host = FakeHost()
    processed: list = []
    _run(_dispatcher(tmp_path, host, processed), PluginEnterEvent(code="ocr", type="text", payload=SCREENSHOT_COMMAND))
    assert host.calls == ["hide", "capture", "show"]
    assert processed == ["c2NyZWVu"]


def test_screenshot_cancelled(tmp_path: Path) -> None:
    host = FakeHost(capture=None)
    processed: list = []
    _run(_dispatcher(tmp_path, host, processed), PluginEnterEvent(payload=SCREENSHOT_COMMAND))
    assert host.calls == ["hide", "capture", "show"]
    assert processed == []


def test_image_payload_forwarded(tmp_path: Path) -> None:
    processed: list = []
    _run(_dispatcher(tmp_path, FakeHost(), processed), PluginEnterEvent(type="img", payload="data:image/png;base64,AAAA"))
    assert processed == ["data:image/png;base64,AAAA"]


def test_image_file_forwarded(tmp_path: Path) -> None:
    image = tmp_path / "Scan.PNG"
    image.write_bytes(b"pixels")
    processed: list = []
    event = PluginEnterEvent.from_dict(
        {"code": "ocr", "type": "files", "payload": [{"isFile": True, "path": str(image)}, {"isFile": True, "path": "other.png"}]}
    )
    _run(_dispatcher(tmp_path, FakeHost(), processed), event)
    assert processed == ["data:image/png;base64," + base64.b64encode(b"pixels").decode()]


def test_non_image_or_directory_ignored(tmp_path: Path) -> None:
    processed: list = []
    dispatcher = _dispatcher(tmp_path, FakeHost(), processed)
    _run(dispatcher, PluginEnterEvent(type="files", payload=[FileDescriptor(True, str(tmp_path / "notes.txt"))]))
    _run(dispatcher, PluginEnterEvent(type="files", payload=[FileDescriptor(False, str(tmp_path / "album.png"))]))
    _run(dispatcher, PluginEnterEvent(type="files", payload=[]))
    _run(dispatcher, PluginEnterEvent(type="text", payload="hello"))
    assert processed == []


def test_errors_are_contained(tmp_path: Path) -> None:
    processed: list = []
    dispatcher = _dispatcher(tmp_path, FakeHost(), processed)
    _run(dispatcher, PluginEnterEvent(type="files", payload=[FileDescriptor(True, str(tmp_path / "missing.jpg"))]))
    assert processed == []

    def broken(image: str) -> None:
        raise RuntimeError("ocr down")

    dispatcher.processor = broken
    _run(dispatcher, PluginEnterEvent(type="img", payload="AAAA"))


def test_without_processor(tmp_path: Path) -> None:
    services = BridgeServices(MemoryStore(), tmp_path)
    dispatcher = PluginEnterDispatcher(services, FakeHost(), None)
    _run(dispatcher, PluginEnterEvent(type="img", payload="AAAA"))


def test_local_host_emit(tmp_path: Path) -> None:
    host = LocalHost(capture=lambda: "Y2FwdHVyZQ==")
    processed: list = []
    dispatcher = _dispatcher(tmp_path, host, processed)
    dispatcher.attach()

    def failing_handler(event):
        raise RuntimeError("handler bug")

    host.on_plugin_enter(failing_handler)

    async def go() -> None:
        await host.emit(PluginEnterEvent(payload=SCREENSHOT_COMMAND))
        await dispatcher.wait_idle()

    asyncio.run(go())
    assert processed == ["Y2FwdHVyZQ=="]
    assert host.visible is True


def test_local_host_without_capture() -> None:
    host = LocalHost()
    seen: list = []
    host.capture_screen(seen.append)
    assert seen == []
    host.hide_window()
    assert host.visible is False


def test_event_summary_hides_image_data() -> None:
    event = PluginEnterEvent(code="ocr", type="img", payload="A" * 500)
    assert "AAAA" not in event.summary()
    assert "<500 chars>" in event.summary()
