import base64

import httpx
import pytest

from textsnap.adapters.ocr.gemini_vlm import GeminiVLMBackend
from textsnap.core.contracts import BackendConfig, BackendKind
from textsnap.core.errors import ErrorKind, RecognitionError

KEY = "AIza" + "b" * 35
OK_BODY = {"candidates": [{"content": {"parts": [{"text": "第一行\n$x^2$ \n"}], "role": "model"}}]}


def _backend(**overrides):
    fields = {"kind": BackendKind.GEMINI, "api_key": KEY}
    fields.update(overrides)
    return GeminiVLMBackend(BackendConfig(**fields))


def test_success_builds_generate_content_request(fake_http, tmp_path):
    image = tmp_path / "photo.HEIC"
    image.write_bytes(b"heic-bytes")
    http = fake_http(json_body=OK_BODY)

    text = _backend().recognize_text(str(image), "read it")

    assert text == "第一行\n$x^2$"
    call = http.calls[0]
    assert call["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
    )
    assert call["headers"]["x-goog-api-key"] == KEY
    assert "Authorization" not in call["headers"]
    inline, prompt = call["json"]["contents"][0]["parts"]
    assert inline["inline_data"]["mime_type"] == "image/heic"
    assert inline["inline_data"]["data"] == base64.b64encode(b"heic-bytes").decode()
    assert prompt == {"text": "read it"}


def test_missing_key_fails_before_any_request(fake_http, image_file):
    http = fake_http(json_body=OK_BODY)
    with pytest.raises(RecognitionError) as exc:
        _backend(api_key="   ").recognize_text(str(image_file))
    assert exc.value.kind == ErrorKind.CONFIG
    assert http.calls == []


def test_bad_key_400_is_invalid_credential(fake_http, image_file):
    fake_http(
        status_code=400,
        json_body={
            "error": {
                "code": 400,
                "message": "API key not valid. Please pass a valid API key.",
                "status": "INVALID_ARGUMENT",
                "details": [{"reason": "API_KEY_INVALID"}],
            }
        },
    )
    with pytest.raises(RecognitionError) as exc:
        _backend().recognize_text(str(image_file))
    assert exc.value.kind == ErrorKind.API_KEY_INVALID


def test_other_400_is_unknown(fake_http, image_file):
    fake_http(status_code=400, json_body={"error": {"message": "Unsupported MIME type"}})
    with pytest.raises(RecognitionError) as exc:
        _backend().recognize_text(str(image_file))
    assert exc.value.kind == ErrorKind.UNKNOWN
    assert exc.value.message == "Unsupported MIME type"


@pytest.mark.parametrize("status, kind", [(429, ErrorKind.QUOTA_EXCEEDED), (500, ErrorKind.NETWORK)])
def test_quota_and_server_errors(fake_http, image_file, status, kind):
    fake_http(status_code=status, json_body={"error": {"message": "x"}})
    with pytest.raises(RecognitionError) as exc:
        _backend().recognize_text(str(image_file))
    assert exc.value.kind == kind


def test_401_is_not_special_for_gemini(fake_http, image_file):
    fake_http(status_code=401, json_body={"error": {"message": "unauthenticated"}})
    with pytest.raises(RecognitionError) as exc:
        _backend().recognize_text(str(image_file))
    assert exc.value.kind == ErrorKind.UNKNOWN


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"finishReason": "SAFETY"}]},
        {"promptFeedback": {"blockReason": "OTHER"}},
    ],
)
def test_empty_candidates_are_unknown(fake_http, image_file, body):
    fake_http(json_body=body)
    with pytest.raises(RecognitionError) as exc:
        _backend().recognize_text(str(image_file))
    assert exc.value.kind == ErrorKind.UNKNOWN


def test_timeout(fake_http, image_file):
    fake_http(exc=httpx.ConnectTimeout("slow"))
    with pytest.raises(RecognitionError) as exc:
        _backend().recognize_text(str(image_file))
    assert exc.value.kind == ErrorKind.TIMEOUT


@pytest.mark.parametrize(
    "key, endpoint, expected",
    [
        (None, None, False),
        (KEY, None, True),
        ("AIza-too-short", None, False),
        ("sk-" + "x" * 40, None, False),
        ("proxy-key-1234", "https://gemini-proxy.example.com/v1beta", True),
        ("tiny", "https://gemini-proxy.example.com/v1beta", False),
        ("proxy-key-1234", "https://generativelanguage.googleapis.com.evil.example/v1beta", True),
        ("proxy-key-1234", "https://relay.example/v1beta?target=generativelanguage.googleapis.com", True),
        ("proxy-key-1234", "https://generativelanguage.googleapis.com:443/v1beta", False),
    ],
)
def test_validate_config(key, endpoint, expected):
    assert _backend(api_key=key, api_endpoint=endpoint).validate_config() is expected


def test_name_is_stable():
    assert _backend().get_name() == _backend().get_name() == "Google Gemini Vision"
