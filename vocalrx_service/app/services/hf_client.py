import logging
import os
from typing import Any, Dict, Optional

from huggingface_hub import InferenceClient

from app.core.llm_config import (
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    VENDOR_TIMEOUT_S,
)
from app.services.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

def hf_chat_text(
    *,
    token: str,
    model: str,
    system: str,
    user: str,
    schema: Optional[Dict[str, Any]] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout_s: Optional[int] = None,
) -> str:
    if not (token or "").strip():
        raise ConfigurationError("HF_TOKEN is missing. Set it in config.env and restart.")

    # provider is read at runtime (prevents stale cached value)
    provider = os.getenv("HF_PROVIDER", "auto").strip() or "auto"

    client = InferenceClient(
        provider=provider,
        api_key=token,
        timeout=float(timeout_s or VENDOR_TIMEOUT_S),
    )

    messages = [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]

    if schema:
        response_format = {
            "type": "json_schema",
            "json_schema": {
                "name": "Prescription",
                "schema": schema,
                "strict": True,
            },
        }
    else:
        response_format = {"type": "json_object"}

    try:
        out = client.chat_completion(
            model=model,
            messages=messages,
            temperature=temperature if temperature is not None else LLM_TEMPERATURE,
            max_tokens=max_tokens if max_tokens is not None else LLM_MAX_TOKENS,
            response_format=response_format,
        )
    except Exception as e:
        # huggingface_hub raises a mix of HTTP and provider errors
        logger.warning("HF inference failed: %s", e)
        raise UpstreamError(f"HF inference failed: {e}") from e

    try:
        choices = out.choices or []
        content = choices[0].message.content if choices else ""
    except (AttributeError, IndexError, TypeError) as e:
        raise UpstreamError(f"HF response has an unexpected shape: {e}") from e
    if content is not None and not isinstance(content, str):
        raise UpstreamError("HF message content is not text")
    return content or ""
