from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

Detail = Literal["low", "auto", "high"]


class BackendKind(str, Enum):
    VISION = "vision"   # on-device Vision helper (subprocess)
    OPENAI = "openai"   # chat/completions with image_url
    GEMINI = "gemini"   # models/{model}:generateContent with inline_data

    @classmethod
    def parse(cls, value: str) -> "BackendKind":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown backend type: {value}") from None


@dataclass(frozen=True)
class BackendConfig:
    kind: BackendKind
    api_key: Optional[str] = None
    api_endpoint: Optional[str] = None
    model: Optional[str] = None
    detail: Optional[Detail] = None
    # Only used by the vision backend; None means the bundled helper path
    script_path: Optional[str] = None


@dataclass
class VisionResult:
    """One JSON line printed by the Vision helper."""
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None
