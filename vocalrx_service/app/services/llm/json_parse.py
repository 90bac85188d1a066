# app/services/llm/json_parse.py
import json
import re
from typing import Any, Dict

from app.services.errors import ContractViolation

_FENCE_RE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\r?\n?(.*?)\r?\n?```$", re.DOTALL | re.IGNORECASE)

def strip_code_fence(text: str) -> str:
    """Remove one ```/```json fence wrapped around the whole reply."""
    t = (text or "").strip()
    m = _FENCE_RE.match(t)
    return m.group(1).strip() if m else t

def parse_prescription_json(text: str) -> Dict[str, Any]:
    cleaned = strip_code_fence(text)
    if not cleaned:
        raise ContractViolation("Empty response text from LLM")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ContractViolation(f"Invalid JSON from LLM: {cleaned[:200]}...") from e
    if not isinstance(data, dict):
        raise ContractViolation(f"Expected a JSON object, got {type(data).__name__}")
    return data
