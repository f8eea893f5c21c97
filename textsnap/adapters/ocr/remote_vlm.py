"""
Shared flow for OCR through a hosted multimodal model.

Subclasses only describe the provider: how the request body and URL look,
which auth header carries the key, where the answer lives in the response,
and which error statuses mean a bad key. Reading the image, the HTTP call,
status classification and response checks live here.

No retries: every failure is raised to the caller already classified.
"""
import base64
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx

from textsnap.adapters.ocr.base import OCRBackend
from textsnap.core.contracts import BackendConfig
from textsnap.core.errors import ErrorKind, RecognitionError
from textsnap.core.prompts import STANDARD_OCR_PROMPT
from textsnap.services.status_store import StatusStore

REMOTE_TIMEOUT_S = 60.0
DEFAULT_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class EncodedImage:
    mime_type: str
    data: str  # base64, no data: prefix

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def dig(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists; None as soon as a key or index is missing."""
    cur = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(cur, list) or not -len(cur) <= key < len(cur):
                return None
        elif not isinstance(cur, dict) or key not in cur:
            return None
        cur = cur[key]
    return cur


class RemoteVLMBackend(OCRBackend):
    provider = "API"          # used in user-facing messages
    log_prefix = "remote_vlm"
    DEFAULT_ENDPOINT = ""
    DEFAULT_MODEL = ""
    MIME_TYPES: dict[str, str] = {
        "png": "image/png",
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "gif": "image/gif",
        "webp": "image/webp",
    }

    def __init__(self, config: BackendConfig, status_store: Optional[StatusStore] = None):
        self.status = status_store or StatusStore()
        self.api_key = (config.api_key or "").strip()
        self.api_endpoint = (config.api_endpoint or self.DEFAULT_ENDPOINT).strip().rstrip("/")
        self.model = (config.model or self.DEFAULT_MODEL).strip()
        self.timeout_s = REMOTE_TIMEOUT_S

    # ── provider hooks ──────────────────────────────────────────────────────

    def build_request(self, prompt: str, image: EncodedImage) -> tuple[str, dict]:
        """Return (url, json_payload)."""
        raise NotImplementedError

    def auth_headers(self) -> dict[str, str]:
        raise NotImplementedError

    def extract_text(self, data: Any) -> str:
        raise NotImplementedError

    def classify_status(self, status: int, message: str, body: Any) -> tuple[ErrorKind, Optional[str]]:
        """Map a non-2xx response to (kind, friendly message or None to keep the provider's)."""
        if status == 429:
            return ErrorKind.QUOTA_EXCEEDED, "API quota exceeded or rate limit reached. Please try again later."
        if status >= 500:
            return ErrorKind.NETWORK, f"{self.provider} server error. Please try again later."
        return ErrorKind.UNKNOWN, None

    # ── shared flow ─────────────────────────────────────────────────────────

    def recognize_text(self, image_path: str, custom_prompt: Optional[str] = None) -> str:
        if not self.api_key:
            raise RecognitionError(
                ErrorKind.CONFIG,
                f"{self.provider} API Key is not configured. Please set it in extension preferences.",
            )

        image = self.prepare_image(image_path)
        prompt = custom_prompt or STANDARD_OCR_PROMPT
        url, payload = self.build_request(prompt, image)
        headers = {"Content-Type": "application/json", **self.auth_headers()}

        self.status.log(
            f"{self.log_prefix}: POST {urlsplit(url).path} model={self.model} "
            f"({image.mime_type}, {len(image.data)} b64 chars)"
        )
        try:
            resp = httpx.post(url, json=payload, headers=headers, timeout=self.timeout_s)
        except httpx.TimeoutException as e:
            raise RecognitionError(
                ErrorKind.TIMEOUT, f"Request timed out after {self.timeout_s:g} seconds"
            ) from e
        except httpx.InvalidURL as e:
            raise RecognitionError(ErrorKind.CONFIG, f"Invalid API endpoint: {self.api_endpoint!r}") from e
        except httpx.HTTPError as e:
            raise RecognitionError(ErrorKind.NETWORK, f"Network error: {e}") from e

        if not resp.is_success:
            self._raise_for_status(resp)

        try:
            data = resp.json()
        except ValueError as e:
            raise RecognitionError(
                ErrorKind.UNKNOWN, "Failed to parse API response", details={"body": resp.text[:500]}
            ) from e

        text = self.extract_text(data)
        if not text:
            raise RecognitionError(ErrorKind.UNKNOWN, "No text content in API response", details={"body": data})

        text = text.strip()
        self.status.log(f"{self.log_prefix}: → {len(text)} chars")
        return text

    def prepare_image(self, image_path: str) -> EncodedImage:
        try:
            with open(image_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise RecognitionError(ErrorKind.INVALID_IMAGE, f"Failed to read image file: {e}") from e
        if not raw:
            raise RecognitionError(ErrorKind.INVALID_IMAGE, f"Image file is empty: {image_path}")
        return EncodedImage(
            mime_type=self.detect_mime_type(image_path),
            data=base64.standard_b64encode(raw).decode("ascii"),
        )

    def detect_mime_type(self, image_path: str) -> str:
        ext = os.path.splitext(image_path)[1].lower().lstrip(".")
        return self.MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)

    def _raise_for_status(self, resp: httpx.Response):
        status = resp.status_code
        message = f"API Error: {status} {resp.reason_phrase}".strip()
        try:
            body = resp.json()
        except ValueError:
            body = resp.text[:500]
        else:
            provider_message = dig(body, "error", "message")
            if isinstance(provider_message, str) and provider_message:
                message = provider_message

        self.status.log(f"{self.log_prefix}: HTTP {status} — {message[:300]}", logging.WARNING)
        kind, friendly = self.classify_status(status, message, body)
        raise RecognitionError(kind, friendly or message, details={"status": status, "body": body})

    def is_official_endpoint(self, host: str) -> bool:
        return urlsplit(self.api_endpoint).hostname == host
