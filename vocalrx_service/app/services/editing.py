# app/services/editing.py
"""
In-place edits of a reviewed prescription.

Every function returns a new Prescription and leaves its input untouched, so
the UI can keep the extracted original next to the edited copy.
"""
import re
from typing import Any, Optional, Tuple

from app.schemas.models import Advice, Medicine, Prescription
from app.services.errors import InputValidationError

SCALAR_FIELDS = ("chief_complaints", "clinical_findings", "diagnosis", "followup_date")
MEDICINE_FIELDS = tuple(Medicine.model_fields)
ADVICE_FIELDS = tuple(Advice.model_fields)

def _check_index(i: int, size: int, what: str) -> None:
    if not isinstance(i, int) or not 0 <= i < size:
        raise InputValidationError(f"{what} index {i} out of range (0..{size - 1})")

def set_field(rx: Prescription, field: str, value: Optional[str]) -> Prescription:
    if field not in SCALAR_FIELDS:
        raise InputValidationError(f"Unknown prescription field: {field}")
    return rx.model_copy(update={field: value}, deep=True)

def set_advice(rx: Prescription, field: str, value: Optional[str]) -> Prescription:
    if field not in ADVICE_FIELDS:
        raise InputValidationError(f"Unknown advice field: {field}")
    advice = rx.advice.model_copy(update={field: value})
    return rx.model_copy(update={"advice": advice}, deep=True)

def replace_medicine(rx: Prescription, i: int, med: Medicine) -> Prescription:
    _check_index(i, len(rx.medicines), "Medicine")
    meds = [m.model_copy() for m in rx.medicines]
    meds[i] = med.model_copy()
    return rx.model_copy(update={"medicines": meds}, deep=True)

def update_medicine(rx: Prescription, i: int, field: str, value: Optional[str]) -> Prescription:
    if field not in MEDICINE_FIELDS:
        raise InputValidationError(f"Unknown medicine field: {field}")
    _check_index(i, len(rx.medicines), "Medicine")
    return replace_medicine(rx, i, rx.medicines[i].model_copy(update={field: value}))

def add_medicine(rx: Prescription, med: Optional[Medicine] = None, at: Optional[int] = None) -> Prescription:
    new = med.model_copy() if med is not None else Medicine(route="Oral")
    meds = [m.model_copy() for m in rx.medicines]
    meds.insert(len(meds) if at is None else at, new)
    return rx.model_copy(update={"medicines": meds}, deep=True)

def remove_medicine(rx: Prescription, i: int) -> Prescription:
    _check_index(i, len(rx.medicines), "Medicine")
    meds = [m.model_copy() for j, m in enumerate(rx.medicines) if j != i]
    return rx.model_copy(update={"medicines": meds}, deep=True)

def replace_investigation(rx: Prescription, i: int, name: str) -> Prescription:
    _check_index(i, len(rx.prescribed_investigations), "Investigation")
    tests = list(rx.prescribed_investigations)
    tests[i] = name
    return rx.model_copy(update={"prescribed_investigations": tests}, deep=True)

def add_investigation(rx: Prescription, name: str, at: Optional[int] = None) -> Prescription:
    tests = list(rx.prescribed_investigations)
    tests.insert(len(tests) if at is None else at, name)
    return rx.model_copy(update={"prescribed_investigations": tests}, deep=True)

def remove_investigation(rx: Prescription, i: int) -> Prescription:
    _check_index(i, len(rx.prescribed_investigations), "Investigation")
    tests = [t for j, t in enumerate(rx.prescribed_investigations) if j != i]
    return rx.model_copy(update={"prescribed_investigations": tests}, deep=True)

def apply_edit(rx: Prescription, op: str, **kw: Any) -> Prescription:
    """Dispatch by name, for callers that receive edits as data (e.g. a UI event)."""
    ops = {
        "set_field": set_field,
        "set_advice": set_advice,
        "replace_medicine": replace_medicine,
        "update_medicine": update_medicine,
        "add_medicine": add_medicine,
        "remove_medicine": remove_medicine,
        "replace_investigation": replace_investigation,
        "add_investigation": add_investigation,
        "remove_investigation": remove_investigation,
    }
    if op not in ops:
        raise InputValidationError(f"Unknown edit operation: {op}")
    try:
        return ops[op](rx, **kw)
    except TypeError as e:
        raise InputValidationError(f"Bad arguments for {op}: {e}") from e

# ---------------------------
# "Brand (Generic)" display string
# ---------------------------
_DRUG_NAME_RE = re.compile(r"^\s*(?P<brand>[^()]*?)\s*\((?P<generic>[^()]*)\)\s*$")

def format_drug_name(brand: Optional[str], generic: Optional[str]) -> str:
    brand = (brand or "").strip()
    generic = (generic or "").strip()
    if brand and generic:
        return f"{brand} ({generic})"
    return brand or generic

def parse_drug_name(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Inverse of format_drug_name, best effort.
    "Ecosprin (Aspirin)" -> ("Ecosprin", "Aspirin"); "(Aspirin)" -> (None, "Aspirin");
    anything without a trailing parenthesised part is taken as the brand.
    format_drug_name(*parse_drug_name(s)) == s only for already-normalised strings.
    """
    s = (text or "").strip()
    if not s:
        return None, None
    m = _DRUG_NAME_RE.match(s)
    if not m:
        return s, None
    return (m.group("brand").strip() or None, m.group("generic").strip() or None)
