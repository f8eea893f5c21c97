from typing import Optional

from textsnap.adapters.ocr.base import OCRBackend
from textsnap.adapters.ocr.gemini_vlm import GeminiVLMBackend
from textsnap.adapters.ocr.openai_vlm import OpenAIVLMBackend
from textsnap.adapters.ocr.vision_ocr import VisionOCRBackend
from textsnap.core.contracts import BackendConfig, BackendKind
from textsnap.services.status_store import StatusStore


def create_backend(config: BackendConfig, status_store: Optional[StatusStore] = None) -> OCRBackend:
    """Build the backend named by config.kind. No I/O happens here."""
    if config.kind == BackendKind.VISION:
        return VisionOCRBackend(config, status_store)
    if config.kind == BackendKind.OPENAI:
        return OpenAIVLMBackend(config, status_store)
    if config.kind == BackendKind.GEMINI:
        return GeminiVLMBackend(config, status_store)
    raise ValueError(f"Unknown backend type: {config.kind}")
