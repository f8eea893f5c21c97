"""
Error taxonomy shared by every OCR backend.

Adapters translate transport, subprocess and parse failures into exactly one
ErrorKind before raising, so callers only ever see RecognitionError.
"""
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NETWORK = "network"
    API_KEY_INVALID = "api_key"
    QUOTA_EXCEEDED = "quota"
    TIMEOUT = "timeout"
    INVALID_IMAGE = "invalid_image"
    CONFIG = "config"
    UNKNOWN = "unknown"


class RecognitionError(Exception):
    def __init__(self, kind: ErrorKind, message: str, details: Any = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"RecognitionError(kind={self.kind.value!r}, message={self.message!r})"


# Toast title + message per kind; None message means "show err.message"
_USER_MESSAGES: dict[ErrorKind, tuple[str, str | None]] = {
    ErrorKind.API_KEY_INVALID: ("API Key Error", "Please configure a valid API Key in extension settings"),
    ErrorKind.QUOTA_EXCEEDED:  ("Quota Exceeded", "API quota exhausted or rate limit reached, please try again later"),
    ErrorKind.TIMEOUT:         ("Request Timeout", "OCR processing took too long, try using a smaller image"),
    ErrorKind.NETWORK:         ("Network Error", "Unable to connect to API service, please check your connection"),
    ErrorKind.CONFIG:          ("Configuration Error", None),
    ErrorKind.INVALID_IMAGE:   ("Image Error", None),
    ErrorKind.UNKNOWN:         ("Recognition Failed", None),
}


def user_message(err: RecognitionError) -> tuple[str, str]:
    """Return (title, message) suitable for a toast/HUD."""
    title, message = _USER_MESSAGES.get(err.kind, ("Recognition Failed", None))
    return title, message or err.message


def describe_error(exc: BaseException) -> tuple[str, str]:
    if isinstance(exc, RecognitionError):
        return user_message(exc)
    return "Recognition Failed", str(exc) or "Unknown error, please try again"
