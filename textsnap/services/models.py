from pydantic import BaseModel
from typing import Literal, Optional

from textsnap.core.contracts import BackendConfig, BackendKind


class RecognizeRequest(BaseModel):
    image_path: str
    prompt: Optional[str] = None   # overrides the default OCR prompt (ignored by vision)


class UploadRecognizeRequest(BaseModel):
    image: str                       # base64 image bytes
    filename: Optional[str] = None   # only the extension is used, for the MIME type
    prompt: Optional[str] = None


class RecognizeResponse(BaseModel):
    ok: bool
    backend: str
    duration_ms: int
    text: str = ""
    preview: Optional[str] = None
    error_kind: Optional[str] = None     # ErrorKind value, None for "no text"
    error_title: Optional[str] = None
    error: Optional[str] = None


class BackendInfo(BaseModel):
    kind: Optional[BackendKind] = None   # None when the configured kind is unknown
    name: str = ""
    valid: bool
    error: Optional[str] = None


class StatusResponse(BaseModel):
    last_backend: Optional[str] = None
    last_error: Optional[str] = None
    logs: list[str]


class StoredBackendConfig(BaseModel):
    """Backend settings saved by the settings UI; wins over env preferences."""
    kind: BackendKind
    api_key: Optional[str] = None
    api_endpoint: Optional[str] = None
    model: Optional[str] = None
    detail: Optional[Literal["low", "auto", "high"]] = None
    script_path: Optional[str] = None

    def to_config(self) -> BackendConfig:
        return BackendConfig(
            kind=self.kind,
            api_key=self.api_key,
            api_endpoint=self.api_endpoint,
            model=self.model,
            detail=self.detail,
            script_path=self.script_path,
        )

    @classmethod
    def from_config(cls, config: BackendConfig) -> "StoredBackendConfig":
        return cls(
            kind=config.kind,
            api_key=config.api_key,
            api_endpoint=config.api_endpoint,
            model=config.model,
            detail=config.detail,
            script_path=config.script_path,
        )
