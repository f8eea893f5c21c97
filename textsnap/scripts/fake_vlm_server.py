"""
Fake OpenAI / Gemini vision server for trying the remote backends without an API key.

Serves both provider routes on port 9100 and answers with a fixed text.
FAKE_VLM_STATUS forces an error status (e.g. 401, 429, 500) to exercise error mapping.

Usage:
    python -m textsnap.scripts.fake_vlm_server                       (terminal 1)
    OCR_BACKEND=openai OPENAI_API_KEY=fake-key-123 \
        OPENAI_API_ENDPOINT=http://127.0.0.1:9100/v1 \
        python -m textsnap.scripts.cli some.png                       (terminal 2)
"""

import os
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="fake-vlm-server")

FAKE_TEXT = os.getenv("FAKE_VLM_TEXT", "Hello from the fake VLM server\n$E = mc^2$")


def _forced_error() -> JSONResponse | None:
    code = int(os.getenv("FAKE_VLM_STATUS", "200"))
    if code < 400:
        return None
    message = "API key not valid. Please pass a valid API key. (API_KEY_INVALID)" if code == 400 else f"forced error {code}"
    print(f"[vlm] forcing HTTP {code}")
    return JSONResponse(status_code=code, content={"error": {"code": code, "message": message}})


@app.post("/v1/chat/completions")
async def chat_completions(request: Request):
    body = await request.json()
    parts = body["messages"][0]["content"]
    image = next(p for p in parts if p.get("type") == "image_url")
    print(f"[vlm] openai model={body.get('model')} detail={image['image_url'].get('detail')} "
          f"auth={'yes' if request.headers.get('authorization') else 'no'}")
    return _forced_error() or {"choices": [{"message": {"role": "assistant", "content": FAKE_TEXT}}]}


@app.post("/v1beta/models/{model_action}")
async def generate_content(model_action: str, request: Request):
    body = await request.json()
    inline = body["contents"][0]["parts"][0]["inline_data"]
    print(f"[vlm] gemini {model_action} mime={inline['mime_type']} "
          f"key={'yes' if request.headers.get('x-goog-api-key') else 'no'}")
    return _forced_error() or {"candidates": [{"content": {"parts": [{"text": FAKE_TEXT}]}}]}


if __name__ == "__main__":
    print("Fake VLM server starting on http://localhost:9100")
    uvicorn.run(app, host="0.0.0.0", port=9100)
