import httpx

from textsnap.scripts.integration_test import _check, _checks


def _client(status_code=200, json_body=None):
    def handler(request):
        return httpx.Response(status_code, json=json_body)
    return httpx.Client(base_url="http://textsnap.test", transport=httpx.MockTransport(handler))


def test_check_passes_when_expected_fields_match():
    with _client(json_body={"ok": False, "error_kind": "invalid_image", "text": ""}) as client:
        assert _check(client, "/recognize", {"image_path": "x"}, {"ok": False, "error_kind": "invalid_image"}) is None


def test_check_reports_mismatch_and_http_errors():
    with _client(json_body={"ok": False, "error": "boom"}) as client:
        reason = _check(client, "/recognize", {"image_path": "x"}, {"ok": True})
    assert "'ok': False" in reason and "boom" in reason

    with _client(status_code=500, json_body={}) as client:
        assert _check(client, "/health", None, {}) == "HTTP 500"


def test_image_argument_adds_a_by_path_check():
    paths = [c[2] for c in _checks("/tmp/shot.png") if c[0] == "/recognize"]
    assert {"image_path": "/tmp/shot.png"} in paths
    assert len(_checks(None)) == len(_checks("/tmp/shot.png")) - 1
