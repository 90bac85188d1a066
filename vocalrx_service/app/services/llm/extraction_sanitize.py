# app/services/llm/extraction_sanitize.py
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from app.schemas.models import Advice, Medicine, Prescription
from app.services.llm.extraction_prompt import default_followup

_ADVICE_FIELDS = ("diet", "exercise", "sleep", "other")
_SCALAR_FIELDS = ("chief_complaints", "clinical_findings", "diagnosis")

def clean_text(v: Any) -> Optional[str]:
    """None/blank -> None, lists joined with '; ', everything else str()."""
    if v is None or isinstance(v, (dict, bool)):
        return None
    if isinstance(v, (list, tuple)):
        items = [clean_text(x) for x in v]
        joined = "; ".join(x for x in items if x)
        return joined or None
    s = str(v).strip()
    if not s or s.lower() in ("null", "none", "n/a"):
        return None
    return s

# ---------------------------
# dosage
# ---------------------------
_UNIT_ALIASES = {
    "milligram": "mg", "milligrams": "mg", "mg": "mg", "mgs": "mg",
    "microgram": "mcg", "micrograms": "mcg", "mcg": "mcg", "µg": "mcg", "ug": "mcg",
    "gram": "g", "grams": "g", "gm": "g", "gms": "g", "g": "g",
    "milliliter": "ml", "milliliters": "ml", "millilitre": "ml", "millilitres": "ml", "ml": "ml",
    "unit": "units", "units": "units", "iu": "IU",
}
_DOSE_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(" + "|".join(sorted((re.escape(k) for k in _UNIT_ALIASES), key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)

def normalize_dosage(dosage: Optional[str]) -> Optional[str]:
    d = clean_text(dosage)
    if d is None:
        return None
    return _DOSE_RE.sub(lambda m: f"{m.group(1)}{_UNIT_ALIASES[m.group(2).lower()]}", d)

# ---------------------------
# frequency
# ---------------------------
_FREQ_CODES = {
    "OD": "OD", "QD": "OD",
    "BD": "BD", "BID": "BD",
    "TDS": "TDS", "TID": "TDS",
    "QID": "QID", "QDS": "QID",
    "SOS": "SOS", "PRN": "SOS",
    "HS": "HS",
    "STAT": "STAT",
    "WEEKLY": "Weekly",
}
_EVERY_HOURS = {24: "OD", 12: "BD", 8: "TDS", 6: "QID"}
_COURSE_RE = re.compile(r"\bfor\s+(?:\d+|a|an|one|two|three|four)\s*(?:days?|weeks?|months?)\b")
_NON_DAILY_RE = re.compile(r"\b(?:weeks?|weekly|months?|monthly|fortnight\w*|alternate|every\s+other)\b")

def normalize_frequency(freq_raw: Optional[str]) -> Optional[str]:
    """Map dictated frequency to OD/BD/TDS/QID/SOS/HS/STAT/Weekly; keep it as-is when unsure."""
    original = clean_text(freq_raw)
    if original is None:
        return None
    f = original.lower().strip(" .")

    # direct codes
    if f.upper().replace(".", "") in _FREQ_CODES:
        return _FREQ_CODES[f.upper().replace(".", "")]

    # weekly has to win over "once"
    if "once a week" in f or "once weekly" in f or f == "weekly":
        return "Weekly"
    # any other schedule counted per week or month has no daily code
    if _NON_DAILY_RE.search(_COURSE_RE.sub("", f)):
        return original
    if "as needed" in f or "when needed" in f or "if needed" in f or "when required" in f or re.search(r"\b(sos|prn)\b", f):
        return "SOS"
    if "once" in f or "one time" in f or "1x" in f or f in ("daily", "every day", "once daily"):
        return "OD"
    if "twice" in f or "two times" in f or "2x" in f:
        return "BD"
    if "thrice" in f or "three times" in f or "3x" in f:
        return "TDS"
    if "four times" in f or "4x" in f:
        return "QID"

    m = re.search(r"every\s+(\d+)\s*(?:hours|hrs|hr|h)\b", f)
    if m and int(m.group(1)) in _EVERY_HOURS:
        return _EVERY_HOURS[int(m.group(1))]

    # patterns like 1-0-1, 1-1-1 etc
    m = re.search(r"\b([01])\s*-\s*([01])\s*-\s*([01])(?:\s*-\s*([01]))?\b", f)
    if m:
        total = sum(int(x) for x in m.groups() if x is not None)
        if total in (1, 2, 3, 4):
            return {1: "OD", 2: "BD", 3: "TDS", 4: "QID"}[total]

    if "bedtime" in f or "at night" in f:
        return "HS"
    if "immediately" in f:
        return "STAT"
    if re.search(r"\bdaily\b", f):
        return "OD"

    return original

# ---------------------------
# route
# ---------------------------
_ROUTE_PATTERNS = [
    (re.compile(r"\b(sublingual|under the tongue|s/?l)\b"), "Sublingual"),
    (re.compile(r"\b(iv|i\.v\.?|intravenous(ly)?)\b"), "IV"),
    (re.compile(r"\b(im|i\.m\.?|intramuscular(ly)?)\b"), "IM"),
    (re.compile(r"\b(sc|s\.c\.?|subcut(aneous(ly)?)?)\b"), "SC"),
    (re.compile(r"\b(inhal\w*|nebuli[sz]\w*|inhaler)\b"), "Inhalation"),
    (re.compile(r"\b(topical(ly)?|local(ly)?|apply|application|ointment|cream)\b"), "Topical"),
    (re.compile(r"\b(ophthalmic|eye drops?)\b"), "Ophthalmic"),
    (re.compile(r"\b(nasal(ly)?|nose drops?|nasal spray)\b"), "Nasal"),
    (re.compile(r"\b(rectal(ly)?|per rectum|suppository)\b"), "Rectal"),
    (re.compile(r"\b(oral(ly)?|by mouth|p\.?o\.?|per oral|tablets?|capsules?|syrup)\b"), "Oral"),
]

def normalize_route(route_raw: Optional[str]) -> Optional[str]:
    original = clean_text(route_raw)
    if original is None:
        return None
    r = original.lower()
    hits = {label for rx, label in _ROUTE_PATTERNS if rx.search(r)}
    # two different routes named -> ambiguous, keep what was dictated
    if len(hits) == 1:
        return hits.pop()
    return original

# ---------------------------
# investigations
# ---------------------------
_DIRECTIVE_RE = re.compile(
    r"^(?:(?:please|kindly)\s+)?"
    r"(?:(?:investigations?|tests?|labs?)\s+(?:advised|ordered|required)|"
    r"(?:investigations?|tests?)|advised?|advice|check|get|do|order|send(?:\s+for)?)"
    r"(?:\s+(?:for|of))?\s*[:\-]?\s+",
    re.IGNORECASE,
)
_TRAILING_DIRECTIVE_RE = re.compile(r"\s+(?:to be\s+)?(?:done|advised|ordered|checked)$", re.IGNORECASE)
_DIRECTIVE_ONLY = {"investigation", "investigations", "test", "tests", "lab", "labs", "advised", "advice", "check", "none", "nil"}

_SUGAR = r"(?:blood\s+(?:sugar|glucose)|sugar|glucose|bs)"
_FASTING = r"(?:fasting|f)"
_PP = r"(?:post\s*-?\s*prandial|pp)"
_COMPOUND_TESTS = [
    (
        re.compile(rf"^{_SUGAR}\s+{_FASTING}\s*(?:and|&|/|,)\s*{_PP}$", re.IGNORECASE),
        ["Fasting Blood Sugar", "Postprandial Blood Sugar"],
    ),
    (
        re.compile(rf"^{_FASTING}\s*(?:and|&|/|,)\s*{_PP}\s+{_SUGAR}$", re.IGNORECASE),
        ["Fasting Blood Sugar", "Postprandial Blood Sugar"],
    ),
    (
        re.compile(r"^(?:fbs|fbg)\s*(?:and|&|/|,)\s*(?:ppbs|ppbg)$", re.IGNORECASE),
        ["Fasting Blood Sugar", "Postprandial Blood Sugar"],
    ),
    (
        re.compile(r"^(?:blood\s+|serum\s+)?urea\s*(?:and|&|/)\s*(?:serum\s+)?creatinine$", re.IGNORECASE),
        ["Blood Urea", "Serum Creatinine"],
    ),
    (
        re.compile(r"^t3\s*(?:,|and|&|/)?\s*t4\s*(?:,|and|&|/)?\s*tsh$", re.IGNORECASE),
        ["T3", "T4", "TSH"],
    ),
]

def _strip_directives(item: str) -> str:
    s = item.strip(" .\t")
    prev = None
    while s and s != prev:
        prev = s
        s = _DIRECTIVE_RE.sub("", s, count=1).strip(" .:-\t")
        s = _TRAILING_DIRECTIVE_RE.sub("", s).strip(" .:-\t")
    return s

_PAREN_RE = re.compile(r"^(?P<head>[^()]+?)\s*\((?P<inner>[^()]+)\)$")

def _split_top_level(text: str) -> List[str]:
    """Split on , ; and newlines that are not inside parentheses."""
    parts: List[str] = []
    buf: List[str] = []
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch in ",;\n" and depth == 0:
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    parts.append("".join(buf))
    return parts

def _expand_compound(name: str) -> List[str]:
    # "blood sugar (fasting, postprandial)" reads as "blood sugar fasting and postprandial"
    candidates = [name]
    m = _PAREN_RE.match(name)
    if m:
        inner = [p for p in re.split(r"\s*(?:,|;|/|&|\band\b)\s*", m.group("inner")) if p.strip()]
        candidates.append(f"{m.group('head')} {' and '.join(inner)}")
    for candidate in candidates:
        for rx, expanded in _COMPOUND_TESTS:
            if rx.match(candidate):
                return expanded
    return [name]

def flatten_investigations(raw: Any) -> List[str]:
    """One entry per test; directive phrases stripped, compound phrases split, duplicates dropped."""
    if raw is None:
        return []
    items = raw if isinstance(raw, (list, tuple)) else [raw]

    out: List[str] = []
    seen = set()
    for item in items:
        if isinstance(item, dict):
            item = item.get("name") or item.get("test")
        text = clean_text(item)
        if not text:
            continue
        for part in _split_top_level(text):
            name = _strip_directives(part)
            if not name or name.lower() in _DIRECTIVE_ONLY:
                continue
            for n in _expand_compound(name):
                key = n.lower()
                if key in seen:
                    continue
                seen.add(key)
                out.append(n)
    return out

# ---------------------------
# medicines / advice / follow-up
# ---------------------------
def sanitize_medicine(m: Any) -> Optional[Medicine]:
    if not isinstance(m, dict):
        return None
    med = Medicine(
        brand_name=clean_text(m.get("brand_name")),
        generic_name=clean_text(m.get("generic_name")),
        dosage=normalize_dosage(m.get("dosage")),
        frequency=normalize_frequency(m.get("frequency")),
        route=normalize_route(m.get("route")),
        duration=clean_text(m.get("duration")),
        remarks=clean_text(m.get("remarks")),
    )
    if not (med.brand_name or med.generic_name):
        return None
    return med

def sanitize_medicines(raw: Any) -> List[Medicine]:
    if raw is None:
        return []
    items = raw if isinstance(raw, (list, tuple)) else [raw]

    seen = set()
    out: List[Medicine] = []
    for m in items:
        med = sanitize_medicine(m)
        if med is None:
            continue
        key = tuple((getattr(med, f) or "").lower() for f in ("brand_name", "generic_name", "dosage", "frequency"))
        if key in seen:
            continue
        seen.add(key)
        out.append(med)
    return out

def sanitize_advice(raw: Any) -> Advice:
    if not isinstance(raw, dict):
        # a bare string is general advice
        return Advice(other=clean_text(raw))
    return Advice(**{f: clean_text(raw.get(f)) for f in _ADVICE_FIELDS})

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d", "%d.%m.%Y", "%d %B %Y", "%d %b %Y", "%B %d, %Y", "%b %d, %Y")

def normalize_followup(raw: Any, today: date) -> str:
    """YYYY-MM-DD; anything missing or unparseable becomes one week from today."""
    s = clean_text(raw)
    if s:
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(s, fmt).date().isoformat()
            except ValueError:
                continue
    return default_followup(today)

def sanitize_prescription(raw: Dict[str, Any], today: date) -> Prescription:
    """Repair a vendor JSON object into a schema-conformant Prescription."""
    return Prescription(
        **{f: clean_text(raw.get(f)) for f in _SCALAR_FIELDS},
        prescribed_investigations=flatten_investigations(raw.get("prescribed_investigations")),
        medicines=sanitize_medicines(raw.get("medicines")),
        advice=sanitize_advice(raw.get("advice")),
        followup_date=normalize_followup(raw.get("followup_date"), today),
    )
