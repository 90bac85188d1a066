from typing import Any, Dict, List, Optional, TypedDict

class DictationState(TypedDict, total=False):
    # inputs
    audio: bytes
    content_type: str
    refine: bool

    # outputs
    transcript: str
    refined: Optional[str]
    prescription: Dict[str, Any]  # Prescription.model_dump()

    audit: List[Dict[str, Any]]
