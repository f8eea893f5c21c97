"""
On-device OCR through the macOS Vision framework.

The engine is reached only through an external helper script run as a
subprocess: `<interpreter> <script> <image_path>`. The helper prints exactly
one JSON line to stdout: {"success": bool, "text"?: str, "error"?: str}.
Anything on stderr is logged and otherwise ignored.

The helper runs in its own process group. `swift <script>` forks the compiler
frontend, so on timeout or output overflow the whole group is killed, not
just the direct child.

The helper has no notion of a prompt, so custom prompts are ignored.
"""
import json
import logging
import os
import signal
import subprocess
import threading
import time
from typing import Optional

from textsnap.adapters.ocr.base import OCRBackend
from textsnap.core.contracts import BackendConfig, VisionResult
from textsnap.core.errors import ErrorKind, RecognitionError
from textsnap.services.status_store import StatusStore

DEFAULT_INTERPRETER = "/usr/bin/swift"

# swift compiles the script on first run, so the budget is generous
VISION_TIMEOUT_S = 30.0
MAX_OUTPUT_BYTES = 10 * 1024 * 1024
MAX_STDERR_BYTES = 64 * 1024
_READ_CHUNK = 64 * 1024
_POLL_S = 0.05
_DRAIN_S = 1.0


class _PipeReader(threading.Thread):
    """Reads a pipe into memory up to `limit` bytes.

    stdout stops at the limit and flags overflow; stderr keeps draining past
    it (so the helper never blocks on a full pipe) but keeps only the head.
    """

    def __init__(self, pipe, limit: int, stop_at_limit: bool):
        super().__init__(daemon=True)
        self.pipe = pipe
        self.limit = limit
        self.stop_at_limit = stop_at_limit
        self.data = bytearray()
        self.overflowed = threading.Event()

    def run(self):
        try:
            while True:
                chunk = self.pipe.read1(_READ_CHUNK)
                if not chunk:
                    return
                room = self.limit - len(self.data)
                if room > 0:
                    self.data.extend(chunk[:room])
                if len(chunk) > room:
                    self.overflowed.set()
                    if self.stop_at_limit:
                        return
        except (OSError, ValueError):
            # pipe closed under us after the group was killed
            return


def _kill_group(proc: subprocess.Popen):
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


class VisionOCRBackend(OCRBackend):
    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        status_store: Optional[StatusStore] = None,
        *,
        interpreter: Optional[str] = None,
        timeout_s: float = VISION_TIMEOUT_S,
        max_output_bytes: int = MAX_OUTPUT_BYTES,
    ):
        self.status = status_store or StatusStore()
        # No helper ships with the package; it has to be configured
        self.script_path: Optional[str] = (
            (config.script_path if config else None) or os.getenv("TEXTSNAP_VISION_SCRIPT") or None
        )
        self.interpreter = interpreter or os.getenv("TEXTSNAP_VISION_INTERPRETER") or DEFAULT_INTERPRETER
        self.timeout_s = timeout_s
        self.max_output_bytes = max_output_bytes

    def recognize_text(self, image_path: str, custom_prompt: Optional[str] = None) -> str:
        if custom_prompt:
            self.status.log("vision_ocr: custom prompt ignored", logging.DEBUG)
        if not self.validate_config():
            raise RecognitionError(
                ErrorKind.CONFIG,
                "Vision helper not configured. Set TEXTSNAP_VISION_SCRIPT to the vision-ocr helper script.",
                details={"script_path": self.script_path},
            )
        if not os.path.isfile(image_path):
            raise RecognitionError(ErrorKind.INVALID_IMAGE, f"Image file not found: {image_path}")

        self.status.log(f"vision_ocr: running helper on {os.path.basename(image_path)}")
        stdout, stderr = self._run_helper(image_path)
        if stderr.strip():
            self.status.log(f"vision_ocr: helper stderr: {stderr.strip()[:500]}", logging.WARNING)

        result = self._parse_output(stdout)
        if not result.success:
            raise RecognitionError(ErrorKind.UNKNOWN, result.error or "Unknown error occurred")

        text = (result.text or "").strip()
        self.status.log(f"vision_ocr: → {len(text)} chars")
        return text

    def _run_helper(self, image_path: str) -> tuple[str, str]:
        cmd = [self.interpreter, self.script_path, image_path]
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            raise RecognitionError(
                ErrorKind.CONFIG,
                f"Cannot start OCR helper ({self.interpreter}): {e}",
            ) from e

        out_reader = _PipeReader(proc.stdout, self.max_output_bytes, stop_at_limit=True)
        err_reader = _PipeReader(proc.stderr, MAX_STDERR_BYTES, stop_at_limit=False)
        # every path kills the whole process group before Popen.__exit__ reaps it
        with proc:
            out_reader.start()
            err_reader.start()
            try:
                self._wait_for_helper(proc, out_reader)
            finally:
                _kill_group(proc)
                proc.wait()
                out_reader.join(_DRAIN_S)
                err_reader.join(_DRAIN_S)

        return (
            bytes(out_reader.data).decode("utf-8", errors="replace"),
            bytes(err_reader.data).decode("utf-8", errors="replace"),
        )

    def _wait_for_helper(self, proc: subprocess.Popen, out_reader: _PipeReader):
        """Return once the helper exited and stdout hit EOF; raise on overflow or timeout."""
        deadline = time.monotonic() + self.timeout_s
        while True:
            # the reader sets the overflow flag before it exits
            done = proc.poll() is not None and not out_reader.is_alive()
            if out_reader.overflowed.is_set():
                raise RecognitionError(
                    ErrorKind.UNKNOWN,
                    f"OCR output exceeded {self.max_output_bytes} bytes",
                )
            if done:
                return
            if time.monotonic() >= deadline:
                raise RecognitionError(
                    ErrorKind.TIMEOUT,
                    f"OCR operation timed out after {self.timeout_s:g} seconds. "
                    "This might happen on first run while Swift compiles the script.",
                )
            out_reader.join(_POLL_S)

    def _parse_output(self, stdout: str) -> VisionResult:
        raw = stdout.strip()
        if not raw:
            raise RecognitionError(
                ErrorKind.UNKNOWN,
                "No output from OCR script. The script might have failed silently.",
            )
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RecognitionError(
                ErrorKind.UNKNOWN,
                "Failed to parse OCR result. The script output might be malformed.",
                details={"output": raw[:300]},
            ) from e
        if not isinstance(data, dict):
            raise RecognitionError(
                ErrorKind.UNKNOWN,
                "Failed to parse OCR result. The script output might be malformed.",
                details={"output": raw[:300]},
            )
        text = data.get("text")
        error = data.get("error")
        return VisionResult(
            success=data.get("success") is True,
            text=text if isinstance(text, str) else None,
            error=error if isinstance(error, str) else None,
        )

    def validate_config(self) -> bool:
        try:
            return self.script_path is not None and os.path.isfile(self.script_path)
        except (OSError, ValueError):
            return False

    def get_name(self) -> str:
        return "macOS Vision API"
