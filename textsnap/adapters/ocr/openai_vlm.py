"""
OpenAI vision backend (chat/completions with an image_url part).

Works with api.openai.com and any OpenAI-compatible endpoint; set
OPENAI_API_ENDPOINT to point it elsewhere.
"""
from typing import Any, Optional

from textsnap.adapters.ocr.remote_vlm import EncodedImage, RemoteVLMBackend, dig
from textsnap.core.contracts import BackendConfig
from textsnap.core.errors import ErrorKind
from textsnap.services.status_store import StatusStore

OPENAI_API_ENDPOINT = "https://api.openai.com/v1"
OPENAI_MODEL = "gpt-4o"
OPENAI_DETAIL = "high"  # high is worth the cost for OCR
MAX_TOKENS = 2000


class OpenAIVLMBackend(RemoteVLMBackend):
    provider = "OpenAI"
    log_prefix = "openai_vlm"
    DEFAULT_ENDPOINT = OPENAI_API_ENDPOINT
    DEFAULT_MODEL = OPENAI_MODEL

    def __init__(self, config: BackendConfig, status_store: Optional[StatusStore] = None):
        super().__init__(config, status_store)
        self.detail = config.detail or OPENAI_DETAIL

    def build_request(self, prompt: str, image: EncodedImage) -> tuple[str, dict]:
        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": image.data_url, "detail": self.detail},
                        },
                    ],
                }
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": 0,
        }
        return f"{self.api_endpoint}/chat/completions", payload

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def extract_text(self, data: Any) -> str:
        content = dig(data, "choices", 0, "message", "content")
        return content if isinstance(content, str) else ""

    def classify_status(self, status: int, message: str, body: Any) -> tuple[ErrorKind, Optional[str]]:
        if status == 401:
            return ErrorKind.API_KEY_INVALID, "Invalid API key. Please check your OpenAI API key in settings."
        return super().classify_status(status, message, body)

    def validate_config(self) -> bool:
        if not self.api_key:
            return False
        # Official keys look like sk-...; compatible endpoints use their own formats
        if self.is_official_endpoint("api.openai.com"):
            return self.api_key.startswith("sk-") and len(self.api_key) > 20
        return len(self.api_key) >= 10

    def get_name(self) -> str:
        return "OpenAI Vision"
