import re
from datetime import date, timedelta
from typing import List, Optional
from app.schemas.models import Advice, Medicine, Prescription

FREQ_MAP = {
    "once daily": "OD", "once a day": "OD", "od": "OD",
    "twice daily": "BD", "twice a day": "BD", "bd": "BD", "bid": "BD",
    "thrice daily": "TDS", "three times": "TDS", "tds": "TDS", "tid": "TDS",
    "four times": "QID", "qid": "QID",
    "at bedtime": "HS", "at night": "HS",
    "sos": "SOS", "as needed": "SOS", "when required": "SOS", "prn": "SOS",
}

ROUTE_MAP = {
    "orally": "Oral", "oral": "Oral", "by mouth": "Oral",
    "intravenous": "IV", "iv": "IV",
    "intramuscular": "IM", "im": "IM",
    "sublingual": "Sublingual",
    "apply": "Topical", "topical": "Topical", "ointment": "Topical",
}

# canonical test name -> spoken variants
TEST_KEYWORDS = {
    "ECG": ["ecg", "ekg", "electrocardiogram"],
    "2D Echo": ["2d echo", "echocardiogram", "echo"],
    "Complete Blood Count": ["cbc", "complete blood count", "blood count"],
    "Cardiac Enzymes": ["cardiac enzymes"],
    "Troponin I": ["troponin"],
    "Chest X-ray": ["chest x-ray", "chest xray", "x-ray chest"],
    "Lipid Profile": ["lipid profile"],
    "HbA1c": ["hba1c", "glycated hemoglobin"],
    "Fasting Blood Sugar": ["fasting blood sugar", "blood sugar fasting", "fbs"],
    "Postprandial Blood Sugar": ["postprandial", "post prandial", "ppbs"],
    "Thyroid Profile": ["thyroid profile", "thyroid function"],
    "Liver Function Test": ["liver function", "lft"],
    "Kidney Function Test": ["kidney function", "renal function", "kft", "rft"],
    "Urine Routine": ["urine routine", "urine examination"],
}

_STRENGTH = r"\d+(?:\.\d+)?\s?(?:mg|mcg|g|ml|units?)"
_MED_RE = re.compile(
    r"(?:\b(?:tab(?:let)?|cap(?:sule)?|syrup|syp|inj(?:ection)?)\.?\s+)?"
    r"\b([A-Z][A-Za-z\-]+|[a-z][a-z\-]{3,})\s+(" + _STRENGTH + r")\b",
)
_NOT_A_DRUG = {"prescribe", "prescribed", "start", "give", "take", "tablet", "tab", "capsule", "cap", "syrup", "injection", "and", "with", "of"}
_PERIODIC_RE = re.compile(
    r"\b((?:once|twice|thrice|one|two|three|four|\d+)\s*(?:times?\s+)?(?:a|per|every)\s+(?:week|month)"
    r"|weekly|monthly|on alternate days|every other day)\b",
    re.IGNORECASE,
)
_DURATION_RE = re.compile(r"\b(?:for|x)\s+(\d+\s*(?:days?|weeks?|months?))\b", re.IGNORECASE)
_FOLLOWUP_RE = re.compile(
    r"\b(?:follow[\s-]?up|review|come back)\b[^.\n]*?\b(?:in|after)\s+(?:(\d+)|an?|one)\s*(days?|weeks?|months?)\b",
    re.IGNORECASE,
)

def _first_group(patterns: List[str], text: str) -> Optional[str]:
    for p in patterns:
        m = re.search(p, text, re.IGNORECASE)
        if m:
            return m.group(1).strip(" ,.") or None
    return None

def _clauses(text: str) -> List[str]:
    return [c.strip() for c in re.split(r"[.\n;]+", text) if c.strip()]

def _keyword_value(mapping: dict, clause_low: str) -> Optional[str]:
    # longest phrase first so "once daily" wins over "od"
    for k in sorted(mapping, key=len, reverse=True):
        if re.search(r"\b" + re.escape(k) + r"\b", clause_low):
            return mapping[k]
    return None

def _extract_medicines(text: str) -> List[Medicine]:
    meds: List[Medicine] = []
    for clause in _clauses(text):
        m = _MED_RE.search(clause)
        if not m:
            continue
        name = m.group(1)
        if name.lower() in _NOT_A_DRUG:
            continue

        low = clause.lower()
        duration = _DURATION_RE.search(clause)
        # per-week / per-month schedules stay as dictated
        periodic = _PERIODIC_RE.search(clause)
        meds.append(Medicine(
            generic_name=name[:1].upper() + name[1:],
            dosage=m.group(2).replace(" ", ""),
            frequency=periodic.group(1) if periodic else _keyword_value(FREQ_MAP, low),
            route=_keyword_value(ROUTE_MAP, low),
            duration=duration.group(1) if duration else None,
        ))
    return meds

def _extract_investigations(text: str) -> List[str]:
    low = text.lower()
    found: List[str] = []
    for canonical, variants in TEST_KEYWORDS.items():
        if any(re.search(r"\b" + re.escape(v) + r"\b", low) for v in variants):
            found.append(canonical)
    # "fasting and postprandial sugar" names the fasting test by the bare word only
    if "Fasting Blood Sugar" not in found and re.search(r"\bfasting\b", low) and "Postprandial Blood Sugar" in found:
        found.insert(found.index("Postprandial Blood Sugar"), "Fasting Blood Sugar")
    return found

def _extract_advice(text: str) -> Advice:
    diet, exercise, sleep = [], [], []
    for clause in _clauses(text):
        low = clause.lower()
        if re.search(r"\b(diet|salt|oily|sugar intake|fruits|vegetables|water)\b", low):
            diet.append(clause)
        elif re.search(r"\b(walk|walking|exercise|yoga|physical activity)\b", low):
            exercise.append(clause)
        elif re.search(r"\bsleep\b", low):
            sleep.append(clause)
    return Advice(
        diet="; ".join(diet) or None,
        exercise="; ".join(exercise) or None,
        sleep="; ".join(sleep) or None,
    )

def _extract_followup(text: str, today: date) -> Optional[str]:
    m = _FOLLOWUP_RE.search(text)
    if not m:
        return None
    n = int(m.group(1)) if m.group(1) else 1
    unit = m.group(2).lower()
    days = n * (7 if unit.startswith("week") else 30 if unit.startswith("month") else 1)
    return (today + timedelta(days=days)).isoformat()

def simple_extract_prescription(transcript: str, today: Optional[date] = None) -> Prescription:
    """
    Keyword-only extraction for running without an LLM.
    Only fills what it can point at in the text; everything else stays empty.
    """
    text = transcript or ""
    if not text.strip():
        return Prescription()

    return Prescription(
        chief_complaints=_first_group(
            [
                r"\b(?:complain(?:s|ing)? of|c/o|presents? with|presenting with)\s+([^.;\n]+)",
                r"\bchief complaints?\s*:?\s*([^.;\n]+)",
            ],
            text,
        ),
        clinical_findings=_first_group(
            [r"\b(?:on examination|o/e|examination shows|findings?\s*:)\s*,?\s*([^.;\n]+)"],
            text,
        ),
        diagnosis=_first_group(
            [r"\b(?:diagnosis(?: is)?\s*:?|impression\s*:?|diagnosed with|suggestive of)\s+([^.;\n]+)"],
            text,
        ),
        prescribed_investigations=_extract_investigations(text),
        medicines=_extract_medicines(text),
        advice=_extract_advice(text),
        followup_date=_extract_followup(text, today or date.today()),
    )
