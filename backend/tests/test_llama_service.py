import httpx
import pytest

from career_ai.schemas import ChatMessage, CompletionOptions
from conftest import completion_body, models_body

MESSAGES = [ChatMessage(role="user", content="Say hi")]


@pytest.mark.asyncio
async def test_check_connection_lists_models(service, fake_server):
    fake_server.on("GET", "/v1/models", json_body=models_body("llama-a", "llama-b"))

    status = await service.check_connection()

    assert status.connected is True
    assert status.error is None
    assert status.advertised_ids() == ["llama-a", "llama-b"]


@pytest.mark.asyncio
async def test_check_connection_failure_is_a_value(service, fake_server):
    fake_server.on("GET", "/v1/models", exc=httpx.ConnectError)

    status = await service.check_connection()

    assert status.connected is False
    assert "ConnectError" in status.error
    assert status.models is None


@pytest.mark.asyncio
async def test_check_connection_is_repeatable(service, fake_server):
    fake_server.on("GET", "/v1/models", status=503, json_body={"error": "loading"})

    first = await service.check_connection()
    second = await service.check_connection()

    assert first.connected is second.connected is False
    assert len(fake_server.calls("/v1/models")) == 2


@pytest.mark.asyncio
async def test_check_connection_is_repeatable_when_connected(service, fake_server):
    fake_server.on("GET", "/v1/models", json_body=models_body("llama-a"))

    first = await service.check_connection()
    second = await service.check_connection()

    assert first.connected is second.connected is True
    assert first.advertised_ids() == second.advertised_ids() == ["llama-a"]
    assert len(fake_server.calls("/v1/models")) == 2


@pytest.mark.asyncio
async def test_resolve_model_explicit_skips_model_listing(service, fake_server):
    fake_server.on("GET", "/v1/models", json_body=models_body("llama-a"))

    assert await service.resolve_model("my-model") == "my-model"
    assert fake_server.calls("/v1/models") == []


@pytest.mark.asyncio
async def test_resolve_model_uses_first_advertised(service, fake_server):
    fake_server.on("GET", "/v1/models", json_body=models_body("llama-a", "llama-b"))

    assert await service.resolve_model() == "llama-a"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "route",
    [
        {"json_body": models_body()},
        {"status": 500, "json_body": {"error": "boom"}},
        {"exc": httpx.ReadTimeout},
        {"text": "not json"},
    ],
    ids=["empty-list", "server-error", "timeout", "garbage"],
)
async def test_resolve_model_falls_back(service, fake_server, route):
    fake_server.on("GET", "/v1/models", **route)

    assert await service.resolve_model() == "fallback-model"


@pytest.mark.asyncio
async def test_chat_completion_defaults(service, fake_server):
    fake_server.on("POST", "/v1/chat/completions", json_body=completion_body("hi there", model="served-model"))

    result = await service.chat_completion(MESSAGES, CompletionOptions(model="requested-model"))

    assert result.success is True
    assert result.content == "hi there"
    assert result.model == "served-model"
    assert result.usage["total_tokens"] == 20
    (payload,) = fake_server.payloads()
    assert payload == {
        "model": "requested-model",
        "messages": [{"role": "user", "content": "Say hi"}],
        "temperature": 0.7,
        "max_tokens": 1000,
        "stream": False,
    }


@pytest.mark.asyncio
async def test_chat_completion_without_model_lists_models_then_completes(service, fake_server):
    fake_server.on("GET", "/v1/models", json_body=models_body("llama-a"))
    fake_server.on("POST", "/v1/chat/completions", json_body=completion_body("ok"))

    result = await service.chat_completion([{"role": "user", "content": "Say hi"}])

    assert result.success is True
    assert [r.url.path for r in fake_server.requests] == ["/v1/models", "/v1/chat/completions"]
    assert fake_server.payloads()[0]["model"] == "llama-a"


@pytest.mark.asyncio
async def test_chat_completion_explicit_zero_temperature_is_kept(service, fake_server):
    fake_server.on("POST", "/v1/chat/completions", json_body=completion_body("ok"))

    await service.chat_completion(MESSAGES, CompletionOptions(model="m", temperature=0.0, max_tokens=5))

    payload = fake_server.payloads()[0]
    assert payload["temperature"] == 0.0
    assert payload["max_tokens"] == 5


@pytest.mark.asyncio
async def test_chat_completion_reported_model_falls_back_to_requested(service, fake_server):
    body = completion_body("ok")
    del body["model"]
    del body["usage"]
    fake_server.on("POST", "/v1/chat/completions", json_body=body)

    result = await service.chat_completion(MESSAGES, CompletionOptions(model="m"))

    assert result.model == "m"
    assert result.usage == {}


@pytest.mark.asyncio
async def test_chat_completion_http_error_keeps_upstream_payload(service, fake_server):
    fake_server.on("POST", "/v1/chat/completions", status=400, json_body={"error": "model not loaded"})

    result = await service.chat_completion(MESSAGES, CompletionOptions(model="m"))

    assert result.success is False
    assert result.error_type == "transport"
    assert "400" in result.error
    assert result.details == {"error": "model not loaded"}


@pytest.mark.asyncio
async def test_chat_completion_transport_exception_is_a_value(service, fake_server):
    fake_server.on("POST", "/v1/chat/completions", exc=httpx.ConnectError)

    result = await service.chat_completion(MESSAGES, CompletionOptions(model="m"))

    assert result.success is False
    assert result.error_type == "transport"
    assert result.details is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{"choices": []}, {"object": "error"}, {"choices": [{"message": {}}]}, {"choices": [{"message": {"content": None}}]}],
)
async def test_chat_completion_malformed_response(service, fake_server, body):
    fake_server.on("POST", "/v1/chat/completions", json_body=body)

    result = await service.chat_completion(MESSAGES, CompletionOptions(model="m"))

    assert result.success is False
    assert result.error_type == "upstream_shape"
    assert result.details == body


@pytest.mark.asyncio
async def test_chat_completion_non_json_body(service, fake_server):
    fake_server.on("POST", "/v1/chat/completions", text="<html>proxy error</html>")

    result = await service.chat_completion(MESSAGES, CompletionOptions(model="m"))

    assert result.success is False
    assert result.error_type == "upstream_shape"
    assert result.details == "<html>proxy error</html>"


@pytest.mark.asyncio
async def test_chat_completion_rejects_empty_messages(service, fake_server):
    result = await service.chat_completion([])

    assert result.success is False
    assert result.error_type == "invalid_request"
    assert fake_server.requests == []


@pytest.mark.asyncio
async def test_chat_completion_rejects_unknown_role(service, fake_server):
    result = await service.chat_completion([{"role": "tool", "content": "x"}], CompletionOptions(model="m"))

    assert result.success is False
    assert result.error_type == "invalid_request"
    assert fake_server.requests == []


def test_completion_options_reject_unknown_fields():
    with pytest.raises(ValueError):
        CompletionOptions(model="m", top_k=5)


@pytest.mark.asyncio
async def test_test_connection_sends_minimal_prompt(service, fake_server):
    fake_server.on("POST", "/v1/chat/completions", json_body=completion_body("OK"))

    result = await service.test_connection()

    assert result.success is True
    assert result.content == "OK"
    payload = fake_server.payloads()[0]
    assert payload["temperature"] == 0.1
    assert payload["max_tokens"] == 50
    assert [m["role"] for m in payload["messages"]] == ["user"]
