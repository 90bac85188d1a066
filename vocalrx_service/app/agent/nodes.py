# app/agent/nodes.py
import logging
from typing import Any, Dict

from langchain_core.runnables import RunnableConfig

from app.agent.state import DictationState
from app.services.errors import VocalRxError
from app.services.llm.extraction import extraction_gateway_from_env
from app.services.llm.refinement import refinement_gateway_from_env
from app.services.transcription import transcription_gateway_from_env

logger = logging.getLogger(__name__)

def _audit(state: DictationState, event: str, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    audit = list(state.get("audit") or [])
    audit.append({"event": event, **(extra or {})})
    return {"audit": audit}

def _gateway(config: RunnableConfig, key: str, factory):
    """Gateways come from config["configurable"] when given (tests, API), else from env."""
    gw = ((config or {}).get("configurable") or {}).get(key)
    return gw if gw is not None else factory()

def transcribe_node(state: DictationState, config: RunnableConfig) -> Dict[str, Any]:
    if (state.get("transcript") or "").strip():
        return _audit(state, "transcribe.skip", {"reason": "transcript already provided"})

    transcriber = _gateway(config, "transcriber", transcription_gateway_from_env)
    # failures here end the run: there is nothing to extract from
    transcript = transcriber.transcribe(state.get("audio") or b"", state.get("content_type") or "audio/wav")
    return {"transcript": transcript, **_audit(state, "transcribe.done", {"chars": len(transcript)})}

def route_after_transcribe(state: DictationState) -> str:
    return "refine" if state.get("refine") else "extract"

def refine_node(state: DictationState, config: RunnableConfig) -> Dict[str, Any]:
    try:
        refiner = _gateway(config, "refiner", refinement_gateway_from_env)
        refined = refiner.refine(state["transcript"])
    except VocalRxError as e:
        # refinement is optional; extract from the raw transcript instead
        logger.warning("Refinement skipped: %s", e)
        return {"refined": None, **_audit(state, "refine.failed", {"error": str(e)})}
    return {"refined": refined, **_audit(state, "refine.done", {"chars": len(refined)})}

def extract_node(state: DictationState, config: RunnableConfig) -> Dict[str, Any]:
    extractor = _gateway(config, "extractor", extraction_gateway_from_env)
    source = state.get("refined") or state["transcript"]
    rx = extractor.extract(source)
    return {
        "prescription": rx.model_dump(),
        **_audit(state, "extract.done", {
            "vendor": getattr(extractor, "vendor", "unknown"),
            "source": "refined" if state.get("refined") else "transcript",
            "medicines": len(rx.medicines),
        }),
    }
