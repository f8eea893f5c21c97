"""
Google Gemini vision backend (models/{model}:generateContent with inline_data).
"""
from typing import Any, Optional

from textsnap.adapters.ocr.remote_vlm import EncodedImage, RemoteVLMBackend, dig
from textsnap.core.errors import ErrorKind

GEMINI_API_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_MODEL = "gemini-2.5-flash"


def _mentions_api_key(message: str, body: Any) -> bool:
    # Gemini answers a bad key with 400 INVALID_ARGUMENT, reason API_KEY_INVALID
    haystack = f"{message} {body}".lower()
    return "api_key" in haystack or "api key" in haystack


class GeminiVLMBackend(RemoteVLMBackend):
    provider = "Gemini"
    log_prefix = "gemini_vlm"
    DEFAULT_ENDPOINT = GEMINI_API_ENDPOINT
    DEFAULT_MODEL = GEMINI_MODEL
    MIME_TYPES = {
        **RemoteVLMBackend.MIME_TYPES,
        "heic": "image/heic",
        "heif": "image/heif",
    }

    def build_request(self, prompt: str, image: EncodedImage) -> tuple[str, dict]:
        payload = {
            "contents": [
                {
                    "parts": [
                        {"inline_data": {"mime_type": image.mime_type, "data": image.data}},
                        {"text": prompt},
                    ]
                }
            ]
        }
        return f"{self.api_endpoint}/models/{self.model}:generateContent", payload

    def auth_headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    def extract_text(self, data: Any) -> str:
        text = dig(data, "candidates", 0, "content", "parts", 0, "text")
        return text if isinstance(text, str) else ""

    def classify_status(self, status: int, message: str, body: Any) -> tuple[ErrorKind, Optional[str]]:
        if status == 400 and _mentions_api_key(message, body):
            return ErrorKind.API_KEY_INVALID, "Invalid API key. Please check your Gemini API key in settings."
        return super().classify_status(status, message, body)

    def validate_config(self) -> bool:
        if not self.api_key:
            return False
        if self.is_official_endpoint("generativelanguage.googleapis.com"):
            return self.api_key.startswith("AIza") and len(self.api_key) > 30
        return len(self.api_key) >= 10

    def get_name(self) -> str:
        return "Google Gemini Vision"
