# app/services/llm/adapters.py
import json
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Protocol

from app.core.llm_config import (
    EXTRACTION_VENDOR,
    GEMINI_MODEL_EXTRACT,
    HF_MODEL_EXTRACT,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL_EXTRACT,
    OPENAI_BASE_URL,
    OPENAI_MODEL_EXTRACT,
)
from app.services.errors import ConfigurationError
from app.services.extraction import simple_extract_prescription
from app.services.gemini_client import gemini_generate_text
from app.services.hf_client import hf_chat_text
from app.services.llm.extraction_schema import PRESCRIPTION_SCHEMA
from app.services.ollama_client import ollama_chat_text
from app.services.openai_client import openai_chat_text

@dataclass(frozen=True)
class ExtractionPrompt:
    system: str
    user: str
    transcript: str
    schema: Dict[str, Any] = field(default_factory=lambda: PRESCRIPTION_SCHEMA)
    today: Optional[date] = None

class VendorAdapter(Protocol):
    """One LLM vendor. `complete` returns the raw reply text; parsing is not its job."""

    name: str

    def complete(self, prompt: ExtractionPrompt) -> str:
        ...

class OpenAIChatAdapter:
    name = "openai"

    def __init__(self, api_key: str, model: str = OPENAI_MODEL_EXTRACT, base_url: str = OPENAI_BASE_URL):
        if not (api_key or "").strip():
            raise ConfigurationError("OpenAI API key not configured")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url

    def complete(self, prompt: ExtractionPrompt) -> str:
        return openai_chat_text(
            api_key=self.api_key,
            model=self.model,
            system=prompt.system,
            user=prompt.user,
            json_mode=True,
            base_url=self.base_url,
        )

class GeminiAdapter:
    name = "gemini"

    def __init__(self, api_key: str, model: str = GEMINI_MODEL_EXTRACT):
        if not (api_key or "").strip():
            raise ConfigurationError("Gemini API key not configured")
        self.api_key = api_key
        self.model = model

    def complete(self, prompt: ExtractionPrompt) -> str:
        # instruction and prompt travel as two parts of one user turn
        return gemini_generate_text(
            api_key=self.api_key,
            model=self.model,
            parts=[prompt.system, prompt.user],
            response_mime_type="application/json",
        )

class OllamaAdapter:
    name = "ollama"

    def __init__(self, model: str = OLLAMA_MODEL_EXTRACT, base_url: str = OLLAMA_BASE_URL):
        self.model = model
        self.base_url = base_url

    def complete(self, prompt: ExtractionPrompt) -> str:
        return ollama_chat_text(
            model=self.model,
            system=prompt.system,
            user=prompt.user,
            schema=prompt.schema,
            base_url=self.base_url,
        )

class HuggingFaceAdapter:
    name = "huggingface"

    def __init__(self, token: str, model: str = HF_MODEL_EXTRACT):
        if not (token or "").strip():
            raise ConfigurationError("HF_TOKEN is missing. Set it in config.env and restart.")
        self.token = token
        self.model = model

    def complete(self, prompt: ExtractionPrompt) -> str:
        return hf_chat_text(
            token=self.token,
            model=self.model,
            system=prompt.system,
            user=prompt.user,
            schema=prompt.schema,
        )

class HeuristicAdapter:
    """Offline keyword extractor, answers in the same JSON shape as the LLMs."""

    name = "heuristic"

    def complete(self, prompt: ExtractionPrompt) -> str:
        return json.dumps(simple_extract_prescription(prompt.transcript, today=prompt.today).model_dump())

def build_adapter(vendor: str) -> VendorAdapter:
    """Build the adapter for `vendor`, reading its credential from the environment now."""
    v = (vendor or "").strip().lower()
    if v == "openai":
        return OpenAIChatAdapter(api_key=os.getenv("OPENAI_API_KEY", ""))
    if v == "gemini":
        return GeminiAdapter(api_key=os.getenv("GEMINI_API_KEY", ""))
    if v == "ollama":
        return OllamaAdapter()
    if v in ("huggingface", "hf"):
        return HuggingFaceAdapter(token=os.getenv("HF_TOKEN", ""))
    if v == "heuristic":
        return HeuristicAdapter()
    raise ConfigurationError(f"Unknown extraction vendor: {vendor!r}")

def adapter_from_env(vendor: Optional[str] = None) -> VendorAdapter:
    return build_adapter(vendor or EXTRACTION_VENDOR)
