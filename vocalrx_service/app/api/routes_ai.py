# app/api/routes_ai.py
import logging
import os
from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse

from app.agent.graph import dictation_graph
from app.core.llm_config import EXTRACTION_VENDOR
from app.schemas.models import (
    DictationResponse,
    Prescription,
    RefineResponse,
    RenderFormat,
    RenderRequest,
    TranscribeResponse,
    TranscriptRequest,
)
from app.services.errors import InputValidationError, VocalRxError
from app.services.llm.extraction import extraction_gateway_from_env, validate_transcript
from app.services.llm.refinement import refinement_gateway_from_env
from app.services.render import render_prescription_html, render_prescription_text
from app.services.transcription import transcription_gateway_from_env

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

def _http_error(e: VocalRxError) -> HTTPException:
    if e.status_code >= 500:
        logger.error("%s: %s", type(e).__name__, e)
    return HTTPException(status_code=e.status_code, detail=str(e))

async def _read_audio(request: Request) -> tuple[bytes, str]:
    audio = await request.body()
    if not audio:
        raise HTTPException(status_code=400, detail="No audio data received")
    return audio, request.headers.get("content-type") or "audio/wav"

@router.post("/transcribe", response_model=TranscribeResponse)
async def ai_transcribe(request: Request):
    audio, content_type = await _read_audio(request)
    try:
        gateway = transcription_gateway_from_env()
        transcript = await run_in_threadpool(gateway.transcribe, audio, content_type)
    except VocalRxError as e:
        raise _http_error(e) from e
    return TranscribeResponse(transcript=transcript)

@router.post("/refine", response_model=RefineResponse)
def ai_refine(req: TranscriptRequest):
    try:
        validate_transcript(req.transcript)
        refined = refinement_gateway_from_env().refine(req.transcript)
    except VocalRxError as e:
        raise _http_error(e) from e
    return RefineResponse(refined=refined)

@router.post("/extract", response_model=Prescription)
def ai_extract(req: TranscriptRequest):
    # vendor failures never surface here; the gateway falls back locally
    try:
        validate_transcript(req.transcript)
    except InputValidationError as e:
        raise _http_error(e) from e
    return extraction_gateway_from_env().extract(req.transcript)

@router.post("/dictate", response_model=DictationResponse)
async def ai_dictate(request: Request, refine: bool = False):
    """record -> transcribe -> (refine) -> extract in one call."""
    audio, content_type = await _read_audio(request)
    initial_state = {
        "audio": audio,
        "content_type": content_type,
        "refine": refine,
        "audit": [],
    }
    try:
        result = await run_in_threadpool(dictation_graph.invoke, initial_state)
    except VocalRxError as e:
        raise _http_error(e) from e

    return DictationResponse(
        transcript=result["transcript"],
        refined=result.get("refined"),
        prescription=Prescription(**result["prescription"]),
        audit=result.get("audit", []),
    )

@router.post("/render")
def ai_render(req: RenderRequest, format: RenderFormat = "html"):
    if format == "text":
        return PlainTextResponse(render_prescription_text(req.prescription, req.context))
    return HTMLResponse(render_prescription_html(req.prescription, req.context))

@router.get("/config")
def ai_config():
    """Which vendors are usable right now. Never echoes a key."""
    return {
        "DEEPGRAM_API_KEY_set": bool(os.getenv("DEEPGRAM_API_KEY")),
        "GEMINI_API_KEY_set": bool(os.getenv("GEMINI_API_KEY")),
        "OPENAI_API_KEY_set": bool(os.getenv("OPENAI_API_KEY")),
        "HF_TOKEN_set": bool(os.getenv("HF_TOKEN")),
        "EXTRACTION_VENDOR": EXTRACTION_VENDOR,
    }
