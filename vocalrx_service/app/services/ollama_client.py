import logging
from typing import Any, Dict, Optional

import requests

from app.core.llm_config import (
    LLM_TEMPERATURE,
    OLLAMA_BASE_URL,
    VENDOR_TIMEOUT_S,
)
from app.services.errors import UpstreamError

logger = logging.getLogger(__name__)

def ollama_chat_text(
    model: str,
    system: str,
    user: str,
    schema: Optional[Dict[str, Any]] = None,
    temperature: Optional[float] = None,
    timeout_s: Optional[int] = None,
    base_url: str = OLLAMA_BASE_URL,
) -> str:
    """
    Calls Ollama /api/chat and returns the assistant message content.
    We enforce JSON output with `format` when possible.
    """
    url = f"{base_url}/chat"
    payload: Dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "stream": False,
        "options": {"temperature": temperature if temperature is not None else LLM_TEMPERATURE},
    }
    # If schema is provided, ask Ollama for structured JSON output
    if schema is not None:
        payload["format"] = schema

    try:
        r = requests.post(url, json=payload, timeout=timeout_s or VENDOR_TIMEOUT_S)
    except requests.RequestException as e:
        raise UpstreamError(f"Ollama request failed: {e}") from e

    if r.status_code >= 400:
        logger.warning("Ollama %s: %s", r.status_code, r.text[:500])
        raise UpstreamError(f"Ollama {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamError("Ollama returned a non-JSON body") from e

    if not isinstance(data, dict):
        raise UpstreamError("Ollama response is not a JSON object")
    message = data.get("message")
    if message is None:
        return ""
    if not isinstance(message, dict):
        raise UpstreamError("Ollama message is not an object")
    content = message.get("content")
    if content is not None and not isinstance(content, str):
        raise UpstreamError("Ollama message content is not text")
    return content or ""
