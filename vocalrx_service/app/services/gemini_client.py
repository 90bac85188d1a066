# app/services/gemini_client.py
import logging
from typing import Any, Dict, List, Optional

import requests

from app.core.llm_config import (
    GEMINI_BASE_URL,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    VENDOR_TIMEOUT_S,
)
from app.services.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

def candidate_text(data: Any) -> str:
    """Join every text part of the first candidate; a body of the wrong shape is an upstream error."""
    if not isinstance(data, dict):
        raise UpstreamError("Gemini response is not a JSON object")
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise UpstreamError("Gemini candidates is not a list")
    if not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if content is None:
        return ""
    if not isinstance(content, dict):
        raise UpstreamError("Gemini candidate content is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise UpstreamError("Gemini content parts is not a list")
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))

def gemini_generate_text(
    *,
    api_key: str,
    model: str,
    parts: List[str],
    response_mime_type: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout_s: Optional[int] = None,
    base_url: str = GEMINI_BASE_URL,
) -> str:
    """
    Calls Gemini generateContent with one user turn and returns the joined
    text of the first candidate ('' when the vendor produced none).
    """
    if not (api_key or "").strip():
        raise ConfigurationError("Gemini API key not configured")

    url = f"{base_url}/{model}:generateContent"
    generation_config: Dict[str, Any] = {
        "temperature": temperature if temperature is not None else LLM_TEMPERATURE,
        "topK": 40,
        "topP": 0.9,
        "maxOutputTokens": max_tokens if max_tokens is not None else LLM_MAX_TOKENS,
    }
    if response_mime_type:
        generation_config["responseMimeType"] = response_mime_type

    payload = {
        "contents": [{"role": "user", "parts": [{"text": p} for p in parts]}],
        "generationConfig": generation_config,
    }

    try:
        r = requests.post(
            url,
            params={"key": api_key},
            json=payload,
            timeout=timeout_s or VENDOR_TIMEOUT_S,
        )
    except requests.RequestException as e:
        raise UpstreamError(f"Gemini request failed: {e}") from e

    if r.status_code >= 400:
        logger.warning("Gemini %s: %s", r.status_code, r.text[:500])
        raise UpstreamError(f"Gemini {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamError("Gemini returned a non-JSON body") from e

    return candidate_text(data)
