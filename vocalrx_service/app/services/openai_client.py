# app/services/openai_client.py
import logging
from typing import Any, Dict, Optional

import requests

from app.core.llm_config import (
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    OPENAI_BASE_URL,
    VENDOR_TIMEOUT_S,
)
from app.services.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

def openai_chat_text(
    *,
    api_key: str,
    model: str,
    system: str,
    user: str,
    json_mode: bool = True,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout_s: Optional[int] = None,
    base_url: str = OPENAI_BASE_URL,
) -> str:
    """Calls /chat/completions and returns the assistant message content."""
    if not (api_key or "").strip():
        raise ConfigurationError("OpenAI API key not configured")

    payload: Dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "temperature": temperature if temperature is not None else LLM_TEMPERATURE,
        "max_tokens": max_tokens if max_tokens is not None else LLM_MAX_TOKENS,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    try:
        r = requests.post(
            f"{base_url}/chat/completions",
            headers={"Authorization": f"Bearer {api_key}"},
            json=payload,
            timeout=timeout_s or VENDOR_TIMEOUT_S,
        )
    except requests.RequestException as e:
        raise UpstreamError(f"OpenAI request failed: {e}") from e

    if r.status_code >= 400:
        logger.warning("OpenAI %s: %s", r.status_code, r.text[:500])
        raise UpstreamError(f"OpenAI {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamError("OpenAI returned a non-JSON body") from e

    if not isinstance(data, dict):
        raise UpstreamError("OpenAI response is not a JSON object")
    choices = data.get("choices") or []
    if not isinstance(choices, list):
        raise UpstreamError("OpenAI choices is not a list")
    if not choices:
        return ""
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        raise UpstreamError("OpenAI choice has no message object")
    content = message.get("content")
    if content is not None and not isinstance(content, str):
        raise UpstreamError("OpenAI message content is not text")
    return content or ""
