"""
Backend configuration.

Order of precedence:
  1. Stored JSON config (TEXTSNAP_CONFIG_FILE, default ~/.config/textsnap/backend.json),
     written by save_backend_config()
  2. Environment / .env preferences:
       OCR_BACKEND            vision | openai | gemini   (default: vision)
       OPENAI_API_KEY, OPENAI_API_ENDPOINT, OPENAI_MODEL, OPENAI_DETAIL
       GEMINI_API_KEY, GEMINI_API_ENDPOINT, GEMINI_MODEL
       TEXTSNAP_VISION_SCRIPT

The recognition code only reads the resulting BackendConfig, never writes it.
"""
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from textsnap.adapters.ocr.gemini_vlm import GEMINI_API_ENDPOINT, GEMINI_MODEL
from textsnap.adapters.ocr.openai_vlm import OPENAI_API_ENDPOINT, OPENAI_DETAIL, OPENAI_MODEL
from textsnap.core.contracts import BackendConfig, BackendKind
from textsnap.services.models import StoredBackendConfig
from textsnap.services.status_store import StatusStore

DEFAULT_CONFIG_FILE = "~/.config/textsnap/backend.json"
_DETAILS = ("low", "auto", "high")


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def config_file_path() -> Path:
    return Path(_env("TEXTSNAP_CONFIG_FILE") or DEFAULT_CONFIG_FILE).expanduser()


def config_from_env(kind: Optional[str] = None) -> BackendConfig:
    backend = BackendKind.parse(kind or _env("OCR_BACKEND") or BackendKind.VISION.value)

    if backend == BackendKind.GEMINI:
        return BackendConfig(
            kind=backend,
            api_key=_env("GEMINI_API_KEY"),
            api_endpoint=_env("GEMINI_API_ENDPOINT") or GEMINI_API_ENDPOINT,
            model=_env("GEMINI_MODEL") or GEMINI_MODEL,
            detail="high",  # unused by Gemini, kept for a uniform config shape
        )
    if backend == BackendKind.OPENAI:
        detail = (_env("OPENAI_DETAIL") or OPENAI_DETAIL).lower()
        return BackendConfig(
            kind=backend,
            api_key=_env("OPENAI_API_KEY"),
            api_endpoint=_env("OPENAI_API_ENDPOINT") or OPENAI_API_ENDPOINT,
            model=_env("OPENAI_MODEL") or OPENAI_MODEL,
            detail=detail if detail in _DETAILS else OPENAI_DETAIL,
        )
    return BackendConfig(kind=backend, script_path=_env("TEXTSNAP_VISION_SCRIPT"))


def load_stored_config(status_store: Optional[StatusStore] = None) -> Optional[BackendConfig]:
    path = config_file_path()
    if not path.is_file():
        return None
    try:
        stored = StoredBackendConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        # Fall back to env preferences rather than failing every request
        (status_store or StatusStore()).log(f"config: ignoring unreadable {path}: {e}")
        return None
    return stored.to_config()


def get_backend_config(kind: Optional[str] = None, status_store: Optional[StatusStore] = None) -> BackendConfig:
    """An explicit kind skips the stored config and reads env preferences for that kind."""
    if kind is None:
        stored = load_stored_config(status_store)
        if stored is not None:
            return stored
    return config_from_env(kind)


def save_backend_config(config: BackendConfig) -> Path:
    path = config_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(StoredBackendConfig.from_config(config).model_dump_json(indent=2), encoding="utf-8")
    os.chmod(path, 0o600)  # holds the API key
    return path
