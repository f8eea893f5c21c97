"""
One recognition request, end to end: build the configured backend, run it,
and turn the result or failure into something a UI can show directly.

Clipboard/screenshot capture and the toast/HUD rendering stay with the caller.
"""
import time
from dataclasses import dataclass
from typing import Optional

from textsnap.adapters.ocr.factory import create_backend
from textsnap.core.contracts import BackendConfig
from textsnap.core.errors import RecognitionError, describe_error
from textsnap.services.status_store import StatusStore

PREVIEW_CHARS = 100


@dataclass
class RecognitionOutcome:
    ok: bool
    backend: str
    duration_ms: int
    text: str = ""
    error_kind: Optional[str] = None
    error_title: Optional[str] = None
    error_message: Optional[str] = None


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def recognize_image(
    config: BackendConfig,
    image_path: str,
    prompt: Optional[str] = None,
    status_store: Optional[StatusStore] = None,
) -> RecognitionOutcome:
    status = status_store or StatusStore()
    backend = create_backend(config, status)
    name = backend.get_name()
    status.last_backend = name

    t0 = time.time()
    try:
        status.log(f"recognize: backend={name} image={image_path}")
        text = backend.recognize_text(image_path, prompt)
    except RecognitionError as e:
        dt = int((time.time() - t0) * 1000)
        title, message = describe_error(e)
        status.last_error = f"{e.kind.value}: {e.message}"
        status.log(f"recognize: failed kind={e.kind.value} dt={dt}ms — {e.message}")
        return RecognitionOutcome(
            ok=False, backend=name, duration_ms=dt,
            error_kind=e.kind.value, error_title=title, error_message=message,
        )

    dt = int((time.time() - t0) * 1000)
    if not text:
        status.log(f"recognize: no text dt={dt}ms")
        return RecognitionOutcome(
            ok=False, backend=name, duration_ms=dt,
            error_title="No text recognized",
            error_message="The image may not contain text, or the text is not clear enough",
        )

    status.last_error = None
    status.log(f"recognize: done chars={len(text)} dt={dt}ms")
    return RecognitionOutcome(ok=True, backend=name, duration_ms=dt, text=text)
