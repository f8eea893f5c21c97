import base64
import binascii
import os
import tempfile

from fastapi import FastAPI
from dotenv import load_dotenv

from textsnap.adapters.ocr.factory import create_backend
from textsnap.core.recognizer import RecognitionOutcome, preview, recognize_image
from textsnap.services.config import get_backend_config
from textsnap.services.models import (
    BackendInfo, RecognizeRequest, RecognizeResponse, StatusResponse, UploadRecognizeRequest,
)
from textsnap.services.status_store import StatusStore

load_dotenv(override=False)

app = FastAPI(title="textsnap")

status = StatusStore()

TEMP_PREFIX = "textsnap-ocr-"


def _to_response(outcome: RecognitionOutcome) -> RecognizeResponse:
    return RecognizeResponse(
        ok=outcome.ok,
        backend=outcome.backend,
        duration_ms=outcome.duration_ms,
        text=outcome.text,
        preview=preview(outcome.text) if outcome.ok else None,
        error_kind=outcome.error_kind,
        error_title=outcome.error_title,
        error=outcome.error_message,
    )


def _config_error(e: ValueError) -> RecognizeResponse:
    status.log(f"config: {e}")
    return RecognizeResponse(
        ok=False, backend="", duration_ms=0,
        error_kind="config", error_title="Configuration Error", error=str(e),
    )


@app.get("/status", response_model=StatusResponse)
def get_status():
    return StatusResponse(last_backend=status.last_backend, last_error=status.last_error, logs=status.logs)


@app.get("/backend", response_model=BackendInfo)
def get_backend():
    # Config is re-read on every call so settings changes apply without restart
    try:
        config = get_backend_config(status_store=status)
        backend = create_backend(config, status)
    except ValueError as e:
        status.log(f"config: {e}")
        return BackendInfo(valid=False, error=str(e))
    return BackendInfo(kind=config.kind, name=backend.get_name(), valid=backend.validate_config())


@app.get("/health")
def health():
    info = get_backend()
    return {
        "api": True,
        "backend": info.name,
        "kind": info.kind.value if info.kind else None,
        "config_valid": info.valid,
        "error": info.error,
    }


@app.post("/recognize", response_model=RecognizeResponse)
def recognize(req: RecognizeRequest):
    try:
        config = get_backend_config(status_store=status)
    except ValueError as e:
        return _config_error(e)
    outcome = recognize_image(config, req.image_path, req.prompt, status_store=status)
    return _to_response(outcome)


@app.post("/recognize/upload", response_model=RecognizeResponse)
def recognize_upload(req: UploadRecognizeRequest):
    try:
        config = get_backend_config(status_store=status)
        backend_name = create_backend(config, status).get_name()
    except ValueError as e:
        return _config_error(e)
    try:
        image_bytes = base64.b64decode(req.image, validate=True)
    except (binascii.Error, ValueError):
        status.log("recognize/upload: base64 decode failed")
        return RecognizeResponse(
            ok=False, backend=backend_name, duration_ms=0,
            error_kind="invalid_image", error_title="Image Error", error="base64 decode failed",
        )

    suffix = os.path.splitext(req.filename or "")[1].lower() or ".png"
    fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(image_bytes)
        outcome = recognize_image(config, tmp_path, req.prompt, status_store=status)
    finally:
        try:
            os.unlink(tmp_path)
        except OSError as e:
            status.log(f"recognize/upload: failed to clean up {tmp_path}: {e}")
    return _to_response(outcome)
