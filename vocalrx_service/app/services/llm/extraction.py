# app/services/llm/extraction.py
import logging
from datetime import date
from typing import Any, Callable, Optional

from app.schemas.models import Prescription
from app.services.errors import ConfigurationError, InputValidationError, UpstreamError, VocalRxError
from app.services.llm.adapters import ExtractionPrompt, VendorAdapter, adapter_from_env
from app.services.llm.extraction_prompt import build_extraction_prompt
from app.services.llm.extraction_sanitize import sanitize_prescription
from app.services.llm.json_parse import parse_prescription_json

logger = logging.getLogger(__name__)

FALLBACK_VERBATIM_MAX = 50
FALLBACK_PREVIEW_CHARS = 100
ELLIPSIS = "..."

def fallback_prescription(transcript: str) -> Prescription:
    """Degraded but valid result used whenever the vendor path fails."""
    if len(transcript) <= FALLBACK_VERBATIM_MAX:
        complaints = transcript
    else:
        complaints = transcript[:FALLBACK_PREVIEW_CHARS] + ELLIPSIS
    return Prescription(chief_complaints=complaints)

def validate_transcript(transcript: Any) -> str:
    if not isinstance(transcript, str) or not transcript.strip():
        raise InputValidationError("Transcript is required")
    return transcript

class ExtractionGateway:
    """
    Transcript -> Prescription through one LLM vendor.

    The prompt contract and the fallback live here once; vendors differ only
    in their adapter. Apart from input validation nothing raises: every
    vendor-side failure becomes `fallback_prescription`.
    """

    def __init__(self, adapter: Optional[VendorAdapter], clock: Callable[[], date] = date.today):
        self.adapter = adapter
        self.clock = clock

    @property
    def vendor(self) -> str:
        return self.adapter.name if self.adapter is not None else "none"

    def _extract_with_vendor(self, transcript: str, today: date) -> Prescription:
        if self.adapter is None:
            raise ConfigurationError("No extraction vendor configured")

        system, user = build_extraction_prompt(transcript, today)
        text = self.adapter.complete(ExtractionPrompt(system=system, user=user, transcript=transcript, today=today))
        if not (text or "").strip():
            raise UpstreamError(f"{self.vendor} returned no text")

        raw = parse_prescription_json(text)
        return sanitize_prescription(raw, today)

    def extract(self, transcript: Any) -> Prescription:
        transcript = validate_transcript(transcript)
        today = self.clock()

        logger.info("Extracting prescription via %s (%d chars)", self.vendor, len(transcript))
        try:
            rx = self._extract_with_vendor(transcript, today)
        except VocalRxError as e:
            logger.warning("Extraction via %s failed, using fallback: %s", self.vendor, e)
            return fallback_prescription(transcript)

        logger.info(
            "Extracted %d medicine(s), %d investigation(s)",
            len(rx.medicines),
            len(rx.prescribed_investigations),
        )
        return rx

def extraction_gateway_from_env(vendor: Optional[str] = None) -> ExtractionGateway:
    try:
        adapter: Optional[VendorAdapter] = adapter_from_env(vendor)
    except ConfigurationError as e:
        # extraction degrades instead of failing; every call will fall back
        logger.warning("Extraction vendor unavailable: %s", e)
        adapter = None
    return ExtractionGateway(adapter=adapter)
