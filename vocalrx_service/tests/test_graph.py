import json

import pytest

from app.agent.graph import dictation_graph
from app.services.errors import ConfigurationError, UpstreamError
from app.services.llm.extraction import ExtractionGateway

from conftest import ASPIRIN_REPLY, TODAY, FakeAdapter, FakeRefiner, FakeTranscriber

def _config(transcriber=None, refiner=None, reply=ASPIRIN_REPLY):
    adapter = FakeAdapter(reply=reply)
    return adapter, {
        "configurable": {
            "transcriber": transcriber or FakeTranscriber(),
            "refiner": refiner or FakeRefiner(),
            "extractor": ExtractionGateway(adapter, clock=lambda: TODAY),
        }
    }

def _events(result):
    return [e["event"] for e in result["audit"]]

def test_without_refinement():
    adapter, config = _config()
    result = dictation_graph.invoke({"audio": b"a", "refine": False, "audit": []}, config=config)

    assert result["transcript"] == "Prescribe Aspirin 75mg once daily"
    assert "refined" not in result or result["refined"] is None
    assert result["prescription"]["medicines"][0]["frequency"] == "OD"
    assert _events(result) == ["transcribe.done", "extract.done"]
    assert result["audit"][-1]["vendor"] == "fake"
    assert result["audit"][-1]["source"] == "transcript"
    assert adapter.prompts[0].transcript == "Prescribe Aspirin 75mg once daily"

def test_refined_text_feeds_extraction():
    adapter, config = _config()
    result = dictation_graph.invoke({"audio": b"a", "refine": True, "audit": []}, config=config)

    assert result["refined"] == "Medications: Aspirin 75mg once daily"
    assert result["audit"][-1]["source"] == "refined"
    assert adapter.prompts[0].transcript == result["refined"]

def test_refinement_failure_is_not_fatal():
    adapter, config = _config(refiner=FakeRefiner(error=ConfigurationError("Gemini API key not configured")))
    result = dictation_graph.invoke({"audio": b"a", "refine": True, "audit": []}, config=config)

    assert result["refined"] is None
    assert _events(result) == ["transcribe.done", "refine.failed", "extract.done"]
    assert adapter.prompts[0].transcript == "Prescribe Aspirin 75mg once daily"
    assert result["prescription"]["medicines"][0]["generic_name"] == "Aspirin"

def test_transcription_failure_stops_the_run():
    adapter, config = _config(transcriber=FakeTranscriber(error=UpstreamError("Deepgram 500")))
    with pytest.raises(UpstreamError):
        dictation_graph.invoke({"audio": b"a", "audit": []}, config=config)
    assert adapter.prompts == []

def test_given_transcript_skips_transcription():
    transcriber = FakeTranscriber()
    adapter, config = _config(transcriber=transcriber)
    result = dictation_graph.invoke({"transcript": "Prescribe Aspirin 75mg once daily", "audit": []}, config=config)

    assert transcriber.calls == []
    assert _events(result) == ["transcribe.skip", "extract.done"]

def test_vendor_garbage_still_yields_a_prescription():
    _, config = _config(reply="I am not JSON")
    result = dictation_graph.invoke({"audio": b"a", "audit": []}, config=config)
    assert result["prescription"]["chief_complaints"] == "Prescribe Aspirin 75mg once daily"
    assert json.dumps(result["prescription"])
