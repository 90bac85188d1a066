# app/services/llm/refinement.py
import logging
import os
from typing import Any, Optional

from app.core.llm_config import GEMINI_MODEL_REFINE, LLM_MAX_TOKENS, LLM_TEMPERATURE, VENDOR_TIMEOUT_S
from app.services.errors import ConfigurationError, InputValidationError, UpstreamError
from app.services.gemini_client import gemini_generate_text
from app.services.llm.prompts import REFINE_SYSTEM_PROMPT, refine_user_prompt

logger = logging.getLogger(__name__)

class RefinementGateway:
    """Cleans a raw dictation into sectioned prose with Gemini. Returns text, not JSON."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = GEMINI_MODEL_REFINE,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
        timeout_s: int = VENDOR_TIMEOUT_S,
    ):
        if not (api_key or "").strip():
            raise ConfigurationError("Gemini API key not configured")
        self.api_key = api_key.strip()
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s

    def refine(self, transcript: Any) -> str:
        if not isinstance(transcript, str) or not transcript.strip():
            raise InputValidationError("Transcript is required")

        logger.info("Refining transcript (%d chars) with %s", len(transcript), self.model)
        refined = gemini_generate_text(
            api_key=self.api_key,
            model=self.model,
            parts=[REFINE_SYSTEM_PROMPT, refine_user_prompt(transcript)],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout_s=self.timeout_s,
        )
        if not refined.strip():
            raise UpstreamError("No refined text generated")
        return refined

def refinement_gateway_from_env() -> RefinementGateway:
    return RefinementGateway(api_key=os.getenv("GEMINI_API_KEY", ""))
