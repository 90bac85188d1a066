import json
from types import SimpleNamespace

import pytest

from app.services.errors import ConfigurationError, UpstreamError
from app.services.llm.adapters import (
    ExtractionPrompt,
    GeminiAdapter,
    HuggingFaceAdapter,
    HeuristicAdapter,
    OllamaAdapter,
    OpenAIChatAdapter,
    build_adapter,
)
from app.services.llm.extraction import ExtractionGateway
from app.services.llm.extraction_schema import PRESCRIPTION_SCHEMA

from conftest import TODAY, FakePost, FakeResponse

PROMPT = ExtractionPrompt(system="SYS", user="USER", transcript="Prescribe Aspirin 75mg once daily")

def test_openai_adapter_request_shape(monkeypatch):
    fake = FakePost(FakeResponse(200, {"choices": [{"message": {"content": '{"diagnosis": null}'}}]}))
    monkeypatch.setattr("app.services.openai_client.requests.post", fake)

    text = OpenAIChatAdapter(api_key="sk-test", model="gpt-test").complete(PROMPT)

    assert text == '{"diagnosis": null}'
    call = fake.calls[0]
    assert call["url"].endswith("/chat/completions")
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["json"]["model"] == "gpt-test"
    assert call["json"]["messages"][0] == {"role": "system", "content": "SYS"}
    assert call["json"]["response_format"] == {"type": "json_object"}

def test_openai_adapter_error_status(monkeypatch):
    monkeypatch.setattr("app.services.openai_client.requests.post", FakePost(FakeResponse(429, {"error": "rate"})))
    with pytest.raises(UpstreamError):
        OpenAIChatAdapter(api_key="sk-test").complete(PROMPT)

def test_gemini_adapter_uses_query_key_and_json_mime(monkeypatch):
    payload = {"candidates": [{"content": {"parts": [{"text": '{"a":'}, {"text": " 1}"}]}}]}
    fake = FakePost(FakeResponse(200, payload))
    monkeypatch.setattr("app.services.gemini_client.requests.post", fake)

    text = GeminiAdapter(api_key="g-key", model="gemini-test").complete(PROMPT)

    assert text == '{"a": 1}'
    call = fake.calls[0]
    assert call["url"].endswith("/gemini-test:generateContent")
    assert call["params"] == {"key": "g-key"}
    assert call["json"]["generationConfig"]["responseMimeType"] == "application/json"

def test_ollama_adapter_sends_schema(monkeypatch):
    fake = FakePost(FakeResponse(200, {"message": {"content": "{}"}}))
    monkeypatch.setattr("app.services.ollama_client.requests.post", fake)

    assert OllamaAdapter(model="llama-test", base_url="http://ollama/api").complete(PROMPT) == "{}"
    call = fake.calls[0]
    assert call["url"] == "http://ollama/api/chat"
    assert call["json"]["format"] == PRESCRIPTION_SCHEMA
    assert call["json"]["stream"] is False

def test_heuristic_adapter_answers_json():
    data = json.loads(HeuristicAdapter().complete(PROMPT))
    assert data["medicines"][0]["generic_name"] == "Aspirin"

@pytest.mark.parametrize("vendor", ["openai", "gemini", "huggingface"])
def test_build_adapter_without_key(no_vendor_keys, vendor):
    with pytest.raises(ConfigurationError):
        build_adapter(vendor)

def test_build_adapter_reads_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    adapter = build_adapter("OpenAI")
    assert isinstance(adapter, OpenAIChatAdapter)
    assert adapter.api_key == "sk-env"

def test_build_adapter_unknown_vendor():
    with pytest.raises(ConfigurationError):
        build_adapter("watson")

class FakeInferenceClient:
    created = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.requests = []
        FakeInferenceClient.created.append(self)

    def chat_completion(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content='{"diagnosis": "angina"}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

def test_hf_adapter_asks_for_schema(monkeypatch):
    FakeInferenceClient.created = []
    monkeypatch.setattr("app.services.hf_client.InferenceClient", FakeInferenceClient)

    text = HuggingFaceAdapter(token="hf-test", model="org/model").complete(PROMPT)

    assert text == '{"diagnosis": "angina"}'
    client = FakeInferenceClient.created[0]
    assert client.kwargs["api_key"] == "hf-test"
    fmt = client.requests[0]["response_format"]
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["schema"] == PRESCRIPTION_SCHEMA

WRONG_SHAPE = {
    "openai": [
        {"choices": [{"message": "oops"}]},
        [{"choices": []}],
        {"choices": "none"},
        {"choices": [{"message": {"content": {"text": "x"}}}]},
    ],
    "gemini": [
        {"candidates": [{"content": "x"}]},
        [],
        {"candidates": {"content": {}}},
        {"candidates": [{"content": {"parts": "x"}}]},
    ],
    "ollama": [
        {"message": "x"},
        ["x"],
        {"message": {"content": ["x"]}},
    ],
}

ADAPTERS = {
    "openai": ("app.services.openai_client.requests.post", lambda: OpenAIChatAdapter(api_key="sk-test")),
    "gemini": ("app.services.gemini_client.requests.post", lambda: GeminiAdapter(api_key="g-key")),
    "ollama": ("app.services.ollama_client.requests.post", lambda: OllamaAdapter()),
}

CASES = [(vendor, body) for vendor, bodies in WRONG_SHAPE.items() for body in bodies]

@pytest.mark.parametrize("vendor, body", CASES)
def test_wrong_shaped_body_is_upstream_error(monkeypatch, vendor, body):
    target, make = ADAPTERS[vendor]
    monkeypatch.setattr(target, FakePost(FakeResponse(200, body)))
    with pytest.raises(UpstreamError):
        make().complete(PROMPT)

@pytest.mark.parametrize("vendor, body", CASES)
def test_wrong_shaped_body_falls_back(monkeypatch, vendor, body):
    target, make = ADAPTERS[vendor]
    monkeypatch.setattr(target, FakePost(FakeResponse(200, body)))
    rx = ExtractionGateway(make(), clock=lambda: TODAY).extract("Fever since two days")
    assert rx.chief_complaints == "Fever since two days"
    assert rx.medicines == []

def test_hf_wrong_shape_is_upstream_error(monkeypatch):
    class NoChoices(FakeInferenceClient):
        def chat_completion(self, **kwargs):
            return SimpleNamespace(choices=[SimpleNamespace(message="oops")])

    monkeypatch.setattr("app.services.hf_client.InferenceClient", NoChoices)
    with pytest.raises(UpstreamError):
        HuggingFaceAdapter(token="hf-test").complete(PROMPT)

def test_heuristic_adapter_uses_the_gateway_date():
    gw = ExtractionGateway(HeuristicAdapter(), clock=lambda: TODAY)
    rx = gw.extract("Prescribe Aspirin 75mg once daily. Follow up in 3 days.")
    assert rx.followup_date == "2026-10-22"
    assert rx.medicines[0].frequency == "OD"
