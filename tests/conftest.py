import textwrap
from pathlib import Path

import httpx
import pytest

_CONFIG_ENV = [
    "OCR_BACKEND",
    "OPENAI_API_KEY", "OPENAI_API_ENDPOINT", "OPENAI_MODEL", "OPENAI_DETAIL",
    "GEMINI_API_KEY", "GEMINI_API_ENDPOINT", "GEMINI_MODEL",
    "TEXTSNAP_VISION_SCRIPT", "TEXTSNAP_VISION_INTERPRETER",
]


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep the developer's env / stored config out of every test."""
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TEXTSNAP_CONFIG_FILE", str(tmp_path / "config" / "backend.json"))


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image-bytes")
    return path


@pytest.fixture
def write_helper(tmp_path):
    """Write a Python stand-in for the Vision helper script and return its path."""
    def _write(body: str, name: str = "vision_helper.py") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return path
    return _write


class FakeHTTP:
    """Replacement for httpx.post that records calls and replays one canned answer."""

    def __init__(self, status_code=200, json_body=None, text=None, exc=None):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.exc = exc
        self.calls = []

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        request = httpx.Request("POST", url)
        if self.exc is not None:
            raise self.exc
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text, request=request)
        return httpx.Response(self.status_code, json=self.json_body, request=request)


@pytest.fixture
def fake_http(monkeypatch):
    def _install(**kwargs) -> FakeHTTP:
        fake = FakeHTTP(**kwargs)
        monkeypatch.setattr("textsnap.adapters.ocr.remote_vlm.httpx.post", fake)
        return fake
    return _install
