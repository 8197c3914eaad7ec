from pathlib import Path

import pytest

from ocrbridge import processor as processor_module
from ocrbridge.errors import ConfigurationError, OcrResponseError
from ocrbridge.processor import DEFAULT_PROMPT, HttpImageProcessor, as_data_url, extract_text
from ocrbridge.services import BridgeServices
from ocrbridge.storage import MemoryStore


class FakeResponse:
    def __init__(self, payload: dict) -> None:
        self.payload = payload

    def raise_for_status(self) -> None:
        pass

    def json(self) -> dict:
        return self.payload


def _services(tmp_path: Path, copied: list) -> BridgeServices:
    return BridgeServices(MemoryStore(), tmp_path, copy=copied.append)


def test_as_data_url() -> None:
    assert as_data_url("AAAA") == "data:image/png;base64,AAAA"
    assert as_data_url("data:image/jpeg;base64,AAAA") == "data:image/jpeg;base64,AAAA"


def test_posts_image_and_copies_result(tmp_path: Path, monkeypatch) -> None:
    copied: list = []
    services = _services(tmp_path, copied)
    services.save_settings({"tokens": "sk-1", "prompt": "只返回文字"})
    sent = {}

    def fake_post(url, json, headers, timeout):
        sent.update(url=url, json=json, headers=headers)
        return FakeResponse({"choices": [{"message": {"content": "hello world"}}]})

    monkeypatch.setattr(processor_module.requests, "post", fake_post)
    proc = HttpImageProcessor(services, "http://ocr.local/v1/chat/completions", model="m")
    assert proc("AAAA") == "hello world"
    assert sent["url"] == "http://ocr.local/v1/chat/completions"
    assert sent["headers"] == {"Authorization": "Bearer sk-1"}
    content = sent["json"]["messages"][0]["content"]
    assert content[0] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}
    assert content[1] == {"type": "text", "text": "只返回文字"}
    assert sent["json"]["model"] == "m"
    assert copied == ["hello world"]


def test_default_prompt_and_no_copy(tmp_path: Path, monkeypatch) -> None:
    copied: list = []
    services = _services(tmp_path, copied)
    services.save_settings({"tokens": ["sk-1"]})
    sent = {}

    def fake_post(url, json, headers, timeout):
        sent.update(json=json)
        return FakeResponse({"choices": [{"message": {"content": "text"}}]})

    monkeypatch.setattr(processor_module.requests, "post", fake_post)
    HttpImageProcessor(services, "http://ocr.local", copy_result=False)("AAAA")
    assert sent["json"]["messages"][0]["content"][1]["text"] == DEFAULT_PROMPT
    assert copied == []


def test_requires_token(tmp_path: Path) -> None:
    proc = HttpImageProcessor(_services(tmp_path, []), "http://ocr.local")
    with pytest.raises(ConfigurationError):
        proc("AAAA")


def test_extract_text_shapes() -> None:
    assert extract_text({"choices": [{"message": {"content": "plain"}}]}) == "plain"
    assert extract_text({"choices": [{"message": {"content": None}}]}) == ""
    parts = [{"type": "text", "text": "line 1\n"}, {"type": "image_url"}, {"type": "text", "text": "line 2"}]
    assert extract_text({"choices": [{"message": {"content": parts}}]}) == "line 1\nline 2"


@pytest.mark.parametrize(
    "payload",
    [{"choices": []}, {}, {"choices": [{}]}, [], {"choices": [{"message": {"content": 5}}]}],
)
def test_extract_text_rejects_malformed(payload) -> None:
    with pytest.raises(OcrResponseError):
        extract_text(payload)


def test_empty_choices_raise_clear_error(tmp_path: Path, monkeypatch) -> None:
    copied: list = []
    services = _services(tmp_path, copied)
    services.save_settings({"tokens": ["sk-1"]})
    monkeypatch.setattr(
        processor_module.requests, "post", lambda url, json, headers, timeout: FakeResponse({"choices": []})
    )
    with pytest.raises(OcrResponseError):
        HttpImageProcessor(services, "http://ocr.local")("AAAA")
    assert copied == []


def test_content_parts_copied_as_text(tmp_path: Path, monkeypatch) -> None:
    copied: list = []
    services = _services(tmp_path, copied)
    services.save_settings({"tokens": ["sk-1"]})
    parts = [{"type": "text", "text": "识别"}, {"type": "text", "text": "结果"}]
    monkeypatch.setattr(
        processor_module.requests,
        "post",
        lambda url, json, headers, timeout: FakeResponse({"choices": [{"message": {"content": parts}}]}),
    )
    assert HttpImageProcessor(services, "http://ocr.local")("AAAA") == "识别结果"
    assert copied == ["识别结果"]
