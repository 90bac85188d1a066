# app/services/transcription.py
import logging
import os
from typing import Any, Dict, Optional

import requests

from app.core.llm_config import (
    DEEPGRAM_BASE_URL,
    DEEPGRAM_LANGUAGE,
    DEEPGRAM_MODEL,
    VENDOR_TIMEOUT_S,
)
from app.services.errors import (
    ConfigurationError,
    InputValidationError,
    NoTranscriptError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

def _first_transcript(data: Dict[str, Any]) -> str:
    """results.channels[0].alternatives[0].transcript, or '' if any hop is missing."""
    try:
        channels = (data.get("results") or {}).get("channels") or []
        alternatives = (channels[0] or {}).get("alternatives") or []
        return str((alternatives[0] or {}).get("transcript") or "")
    except (AttributeError, IndexError, TypeError):
        return ""

class TranscriptionGateway:
    """Sends one recorded dictation to Deepgram and returns the transcript."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEEPGRAM_BASE_URL,
        model: str = DEEPGRAM_MODEL,
        language: str = DEEPGRAM_LANGUAGE,
        timeout_s: int = VENDOR_TIMEOUT_S,
    ):
        if not (api_key or "").strip():
            raise ConfigurationError("Deepgram API key not configured")
        self.api_key = api_key.strip()
        self.base_url = base_url
        self.model = model
        self.language = language
        self.timeout_s = timeout_s

    def _params(self) -> Dict[str, str]:
        return {
            "model": self.model,
            "language": self.language,
            "smart_format": "true",
            "dictation": "true",
            "paragraphs": "true",
        }

    def transcribe(self, audio: bytes, content_type: str = "audio/wav") -> str:
        if not audio:
            raise InputValidationError("No audio data received")

        logger.info("Transcribing %d bytes with deepgram model=%s", len(audio), self.model)
        try:
            r = requests.post(
                self.base_url,
                params=self._params(),
                headers={
                    "Authorization": f"Token {self.api_key}",
                    "Content-Type": content_type or "audio/wav",
                },
                data=audio,
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Transcription request failed: {e}") from e

        if r.status_code >= 400:
            logger.warning("Deepgram %s: %s", r.status_code, r.text[:500])
            raise UpstreamError(f"Transcription failed (deepgram {r.status_code})")

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError("Transcription failed: vendor returned non-JSON body") from e

        transcript = _first_transcript(data if isinstance(data, dict) else {}).strip()
        if not transcript:
            raise NoTranscriptError("No transcript generated")

        logger.info("Transcript received (%d chars)", len(transcript))
        return transcript

def transcription_gateway_from_env() -> TranscriptionGateway:
    # read at runtime so a key added to config.env is picked up on restart
    return TranscriptionGateway(api_key=os.getenv("DEEPGRAM_API_KEY", ""))
