import subprocess

import httpx
import pytest

from textsnap.adapters.ocr.base import OCRBackend
from textsnap.adapters.ocr.factory import create_backend
from textsnap.adapters.ocr.gemini_vlm import GeminiVLMBackend
from textsnap.adapters.ocr.openai_vlm import OpenAIVLMBackend
from textsnap.adapters.ocr.vision_ocr import VisionOCRBackend
from textsnap.core.contracts import BackendConfig, BackendKind


@pytest.mark.parametrize(
    "kind, cls",
    [
        (BackendKind.VISION, VisionOCRBackend),
        (BackendKind.OPENAI, OpenAIVLMBackend),
        (BackendKind.GEMINI, GeminiVLMBackend),
    ],
)
def test_creates_matching_backend(kind, cls):
    backend = create_backend(BackendConfig(kind=kind))
    assert isinstance(backend, cls)
    assert isinstance(backend, OCRBackend)


def test_each_call_builds_a_new_instance():
    config = BackendConfig(kind=BackendKind.OPENAI, api_key="sk-x")
    assert create_backend(config) is not create_backend(config)


def test_unknown_kind_raises():
    with pytest.raises(ValueError, match="Unknown backend type"):
        create_backend(BackendConfig(kind="tesseract"))


def test_parse_kind():
    assert BackendKind.parse(" OpenAI ") is BackendKind.OPENAI
    with pytest.raises(ValueError):
        BackendKind.parse("claude")


def test_no_io_on_construction_or_validation(monkeypatch, tmp_path):
    def forbidden(*args, **kwargs):
        raise AssertionError("no I/O expected")

    monkeypatch.setattr(httpx, "post", forbidden)
    monkeypatch.setattr(subprocess, "Popen", forbidden)

    configs = [
        BackendConfig(kind=BackendKind.VISION, script_path=str(tmp_path / "missing.swift")),
        BackendConfig(kind=BackendKind.OPENAI, api_key=""),
        BackendConfig(kind=BackendKind.GEMINI, api_key=None),
    ]
    for config in configs:
        backend = create_backend(config)
        assert backend.validate_config() is False
        assert backend.get_name()


def test_names_are_distinct():
    names = {create_backend(BackendConfig(kind=kind)).get_name() for kind in BackendKind}
    assert len(names) == 3
