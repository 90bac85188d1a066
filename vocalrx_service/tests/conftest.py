import json
from datetime import date
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.llm.adapters import ExtractionPrompt

TODAY = date(2026, 10, 19)

class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

class FakePost:
    """Stands in for requests.post and remembers every call."""

    def __init__(self, response: FakeResponse):
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        return self.response

class FakeAdapter:
    name = "fake"

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[ExtractionPrompt] = []

    def complete(self, prompt: ExtractionPrompt) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

ASPIRIN_REPLY = json.dumps({
    "chief_complaints": None,
    "clinical_findings": None,
    "diagnosis": None,
    "prescribed_investigations": [],
    "medicines": [{
        "brand_name": None,
        "generic_name": "Aspirin",
        "dosage": "75mg",
        "frequency": "once daily",
        "route": "by mouth",
        "duration": None,
        "remarks": None,
    }],
    "advice": {"diet": None, "exercise": None, "sleep": None, "other": None},
    "followup_date": None,
})

class FakeTranscriber:
    def __init__(self, transcript="Prescribe Aspirin 75mg once daily", error=None):
        self.transcript = transcript
        self.error = error
        self.calls = []

    def transcribe(self, audio, content_type="audio/wav"):
        self.calls.append((audio, content_type))
        if self.error is not None:
            raise self.error
        return self.transcript

class FakeRefiner:
    def __init__(self, refined="Medications: Aspirin 75mg once daily", error=None):
        self.refined = refined
        self.error = error

    def refine(self, transcript):
        if self.error is not None:
            raise self.error
        return self.refined

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def no_vendor_keys(monkeypatch):
    for k in ("DEEPGRAM_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY", "HF_TOKEN"):
        monkeypatch.delenv(k, raising=False)
