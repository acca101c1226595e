import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure backend package is importable
backend_root = Path(__file__).resolve().parents[1]
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

from career_ai.config import LlamaSettings  # noqa: E402
from career_ai.llama_service import LlamaService, get_llama_service  # noqa: E402

BASE_URL = "http://llama.test"


class FakeLlamaServer:
    """MockTransport handler: canned answers per (method, path), every request recorded."""

    def __init__(self):
        self.requests = []
        self._routes = {}

    def on(self, method, path, status=200, json_body=None, text=None, exc=None):
        self._routes[(method, path)] = (status, json_body, text, exc)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        status, json_body, text, exc = route
        if exc is not None:
            raise exc(f"simulated {exc.__name__}", request=request)
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)

    def calls(self, path):
        return [r for r in self.requests if r.url.path == path]

    def payloads(self, path="/v1/chat/completions"):
        return [json.loads(r.content) for r in self.calls(path)]


def completion_body(content, model="meta-llama-3.1-8b-instruct", usage=None):
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": usage or {"prompt_tokens": 12, "completion_tokens": 8, "total_tokens": 20},
    }


def models_body(*ids):
    return {"object": "list", "data": [{"id": i, "object": "model", "owned_by": "local"} for i in ids]}


@pytest.fixture
def settings():
    return LlamaSettings(base_url=BASE_URL, timeout=5, fallback_model="fallback-model")


@pytest.fixture
def fake_server():
    return FakeLlamaServer()


@pytest.fixture
def service(settings, fake_server):
    return LlamaService(settings, transport=httpx.MockTransport(fake_server))


@pytest.fixture
def client(monkeypatch):
    """FastAPI TestClient; tests swap the Llama service via dependency_overrides."""
    monkeypatch.setenv("CORS_ORIGINS", "*")
    # Never reach a real inference server during tests
    monkeypatch.setenv("LLAMA_BASE_URL", "http://127.0.0.1:9")

    from career_ai.main import app

    yield TestClient(app)
    app.dependency_overrides.pop(get_llama_service, None)
